from internship_portal.models import DashboardStats, Job
from internship_portal.services.events import DASHBOARD_REFRESH
from internship_portal.services.navigation import NavigationTarget
from internship_portal.state.dashboard import DashboardController
from internship_portal.state.jobs import DETAIL_MODAL, JobsController


def test_dashboard_loads_stats(api, services):
    api.responses["get_dashboard_stats"] = DashboardStats(students_count=12, reports_pending=3)
    dashboard = DashboardController(services)
    dashboard.load()

    assert dashboard.stats.value.students_count == 12
    assert not dashboard.loading.value


def test_dashboard_failure_shows_zeroed_stats(api, services):
    api.failures["get_dashboard_stats"] = RuntimeError("down")
    dashboard = DashboardController(services)
    dashboard.load()

    assert dashboard.stats.value == DashboardStats()
    assert "Failed to load dashboard statistics" in services.notifier.messages


def test_refresh_requests_coalesce(api, services, wait_for):
    api.responses["get_dashboard_stats"] = DashboardStats(students_count=5)
    dashboard = DashboardController(services)
    dashboard.activate()

    services.bus.publish(DASHBOARD_REFRESH, source="reports")
    services.bus.publish(DASHBOARD_REFRESH, source="requests")

    assert dashboard.refresh_count == 2
    assert wait_for(lambda: dashboard.stats.value.students_count == 5)
    assert api.names().count("get_dashboard_stats") == 1
    dashboard.dispose()


def test_disposed_dashboard_ignores_refresh(api, services):
    dashboard = DashboardController(services)
    dashboard.activate()
    dashboard.dispose()

    services.bus.publish(DASHBOARD_REFRESH, source="documents")
    assert dashboard.refresh_count == 0


def test_jobs_follow_later_navigation(api, services):
    api.responses["list_jobs"] = (
        Job(id="j1", title="Data Intern", company_name="Acme"),
        Job(id="j2", title="Field Engineer", company_name="Globex", location="Karachi"),
    )
    jobs = JobsController(services)
    jobs.activate()
    jobs.load()
    assert len(jobs.visible()) == 2

    services.navigator.navigate(NavigationTarget(tab="jobs", payload="karachi"))
    assert [job.id for job in jobs.visible()] == ["j2"]

    jobs.select(jobs.visible()[0])
    assert jobs.modals.is_open(DETAIL_MODAL)

    jobs.dispose()
    services.navigator.navigate(NavigationTarget(tab="jobs", payload="Acme"))
    assert jobs.filters["jobs"].value.search_term == "karachi"
