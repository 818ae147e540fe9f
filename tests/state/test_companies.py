import time

import pytest

from internship_portal.models import Company, CompanyPage, Job
from internship_portal.state.companies import DETAIL_MODAL, JOB_MODAL, CompaniesController
from internship_portal.state.jobs import JobsController

ACME = Company(id="c1", name="Acme", industry="Software", active_jobs=2)
GLOBEX = Company(id="c2", name="Globex", industry="Energy")


@pytest.fixture
def companies(api, services):
    api.responses["list_companies"] = lambda page, limit, search, filters: CompanyPage(
        companies=(ACME, GLOBEX) if page == 1 else (GLOBEX,),
        current_page=page,
        total_pages=3,
    )
    api.responses["list_my_applications"] = ()
    api.responses["get_company"] = lambda company_id: ACME
    api.responses["list_company_jobs"] = lambda company_id: (Job(id="j1", title="Data Intern", company_name="Acme"),)
    controller = CompaniesController(services)
    controller.load()
    yield controller
    controller.dispose()


def company_calls(api):
    return [args for name, args in api.calls if name == "list_companies"]


def test_load_fetches_first_page_and_applied(api, companies):
    assert company_calls(api) == [(1, companies.page_size, "", companies.company_filters.value.to_params())]
    assert "list_my_applications" in api.names()
    assert companies.pagination.value.total_pages == 3
    assert [c.name for c in companies.items("companies")] == ["Acme", "Globex"]


def test_go_to_page_respects_bounds(api, companies):
    assert companies.go_to_page(2)
    assert companies.pagination.value.current_page == 2

    assert not companies.go_to_page(0)
    assert not companies.go_to_page(4)
    assert len(company_calls(api)) == 2


def test_search_burst_issues_one_request(api, wait_for, companies):
    for term in ("a", "ac", "acm"):
        companies.search(term)

    assert wait_for(lambda: len(company_calls(api)) == 2)
    time.sleep(0.1)
    calls = company_calls(api)
    assert len(calls) == 2
    assert calls[-1][0] == 1
    assert calls[-1][2] == "acm"


def test_company_filters(api, wait_for, companies):
    companies.set_company_filter(industry="Software", has_active_jobs=True)
    assert wait_for(lambda: len(company_calls(api)) == 2)
    assert company_calls(api)[-1][3]["industry"] == "Software"
    assert company_calls(api)[-1][3]["hasActiveJobs"] is True

    with pytest.raises(ValueError):
        companies.set_company_filter(rating=5)


def test_open_company_loads_detail_and_jobs(api, companies):
    companies.open_company(ACME)

    assert companies.modals.is_open(DETAIL_MODAL)
    detail = companies.detail.value
    assert detail.company == ACME
    assert [job.title for job in detail.jobs] == ["Data Intern"]
    assert not detail.loading

    companies.open_job(detail.jobs[0])
    assert companies.modals.is_top(JOB_MODAL)

    companies.close_company()
    assert companies.detail.value.company is None


def test_detail_failure_toasts(api, services, companies):
    api.failures["list_company_jobs"] = RuntimeError("boom")
    companies.open_company(ACME)

    assert companies.detail.value.company is None
    assert "Failed to fetch company details" in services.notifier.messages


def test_view_jobs_hands_company_name_to_jobs_tab(api, services, companies):
    api.responses["list_jobs"] = (
        Job(id="j1", title="Data Intern", company_name="Acme"),
        Job(id="j2", title="Field Engineer", company_name="Globex"),
    )
    companies.open_company(ACME)
    companies.view_jobs(ACME)
    assert companies.modals.stack.value == ()

    jobs = JobsController(services)
    jobs.activate()
    jobs.load()
    assert jobs.filters["jobs"].value.search_term == "Acme"
    assert [job.id for job in jobs.visible()] == ["j1"]
    assert services.navigator.consume("jobs") is None
    jobs.dispose()
