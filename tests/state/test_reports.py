import pytest

from internship_portal.models import AppraisalReport, MisconductReport, ProgressReport
from internship_portal.services.api import ApiError, AuthenticationError
from internship_portal.services.events import DASHBOARD_REFRESH
from internship_portal.state.reports import ACTION_MODAL, DETAIL_MODAL, FEEDBACK_MODAL, ReportsController


@pytest.fixture
def reports(api, services):
    data = {
        "misconduct": (
            MisconductReport(id="m1", student_name="Ayesha", company_name="Acme", issue_type="Absence"),
            MisconductReport(id="m2", student_name="Bilal", company_name="Globex", status="Resolved"),
        ),
        "progress": (ProgressReport(id="p1", student_name="Chen", company_name="Initech"),),
        "appraisal": (
            AppraisalReport(id="a1", student_name="Dana", overall_rating=3.0),
            AppraisalReport(id="a2", student_name="Eli", overall_rating=4.5),
        ),
    }
    api.responses["list_reports"] = lambda kind: data[kind]
    controller = ReportsController(services)
    controller.load()
    return controller


def test_load_fetches_all_three_kinds(api, reports):
    assert sorted(args[0] for name, args in api.calls if name == "list_reports") == ["appraisal", "misconduct", "progress"]
    assert len(reports.items("misconduct")) == 2
    assert reports.counts("misconduct") == {"total": 2, "Pending": 1, "Resolved": 1}


def test_resolve_with_comments_updates_list_and_refreshes_dashboard(api, services, reports):
    refreshes = []
    services.bus.subscribe(DASHBOARD_REFRESH, refreshes.append)
    report = reports.items("misconduct")[0]

    reports.select(report)
    reports.open_misconduct_action("resolve")
    assert reports.modals.is_top(ACTION_MODAL)
    reports.set_comments("  Spoke with the company  ")
    reports.submit_misconduct_action()

    assert ("update_misconduct_status", ("m1", "Resolved", "Spoke with the company")) in api.calls
    updated = reports.items("misconduct")[0]
    assert updated.status == "Resolved"
    assert updated.supervisor_comments == "Spoke with the company"
    assert reports.modals.stack.value == ()
    assert reports.selection.value.item is None
    assert refreshes == [{"source": "reports"}]
    assert "Report marked as Resolved" in services.notifier.messages


def test_blank_comments_never_reach_the_api(api, services, reports):
    reports.open_misconduct_action("warning", reports.items("misconduct")[0])
    reports.set_comments("   ")
    reports.submit_misconduct_action()

    assert "update_misconduct_status" not in api.names()
    assert "Supervisor comments are required" in services.notifier.messages
    assert reports.modals.is_open(ACTION_MODAL)


def test_failed_update_keeps_modal_and_list(api, services, reports):
    api.failures["update_misconduct_status"] = ApiError("Report already closed", status_code=400)
    reports.open_misconduct_action("cancel", reports.items("misconduct")[0])
    reports.set_comments("Repeated absence")
    reports.submit_misconduct_action()

    assert reports.items("misconduct")[0].status == "Pending"
    assert reports.modals.is_open(ACTION_MODAL)
    assert "Report already closed" in services.notifier.messages
    assert not reports.is_pending("misconduct.cancel")


def test_unknown_action_is_rejected(reports):
    with pytest.raises(ValueError):
        reports.open_misconduct_action("expel", reports.items("misconduct")[0])


def test_progress_feedback_requires_text_and_refetches(api, services, reports):
    report = reports.items("progress")[0]
    reports.select(report)
    reports.open_progress_feedback()
    assert [entry.modal_id for entry in reports.modals.stack.value] == [DETAIL_MODAL, FEEDBACK_MODAL]

    reports.submit_progress_feedback()
    assert "Feedback is required" in services.notifier.messages

    fetches_before = api.names().count("list_reports")
    reports.set_feedback("Great progress")
    reports.submit_progress_feedback()

    assert ("review_progress_report", ("p1", "Great progress")) in api.calls
    assert api.names().count("list_reports") == fetches_before + 1
    assert reports.modals.stack.value == ()


def test_closing_the_detail_modal_closes_the_action_above_it(reports):
    report = reports.items("misconduct")[0]
    reports.select(report)
    reports.open_misconduct_action("resolve")
    reports.set_comments("draft")

    reports.close_modal(DETAIL_MODAL)

    assert reports.modals.stack.value == ()
    assert reports.selection.value.item is None
    assert reports.selection.value.comments == ""


def test_fetch_failure_keeps_previous_items(api, services, reports):
    api.failures["list_reports"] = RuntimeError("backend down")
    reports.load()

    assert len(reports.items("misconduct")) == 2
    state = reports.lists["misconduct"].value
    assert state.error == "backend down"
    assert not state.loading
    assert "Failed to fetch misconduct reports" in services.notifier.messages


def test_expired_token_hands_off_to_session_handler(api, expired, reports):
    api.failures["list_reports"] = AuthenticationError("jwt expired", status_code=401)
    reports.load()
    assert expired == [True, True, True]


def test_search_status_and_rating_sort(reports):
    reports.set_search("misconduct", "acme")
    assert [r.id for r in reports.visible("misconduct")] == ["m1"]

    reports.clear_filters("misconduct")
    reports.set_status_filter("misconduct", "Resolved")
    assert [r.id for r in reports.visible("misconduct")] == ["m2"]

    reports.set_sort("appraisal", "rating-desc")
    assert [r.id for r in reports.visible("appraisal")] == ["a2", "a1"]


def test_dispose_stales_later_loads(api, reports):
    calls = len(api.calls)
    reports.dispose()
    reports.load()
    assert len(api.calls) == calls
    assert reports.disposed
