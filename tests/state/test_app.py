import pytest

from internship_portal.models import MisconductReport
from internship_portal.services.api import AuthenticationError
from internship_portal.services.logging import StructuredLogger
from internship_portal.services.navigation import LOGIN_ROUTE, NavigationTarget
from internship_portal.services.settings import PortalSettings
from internship_portal.state.app import SESSION_EXPIRED_MESSAGE, PortalController
from internship_portal.state.reports import DETAIL_MODAL


def build(api, **settings):
    return PortalController(
        settings=PortalSettings(auth_token="token-1", **settings),
        logger=StructuredLogger("test-portal"),
        api=api,
    )


@pytest.fixture
def portal(api):
    controller = build(api)
    yield controller
    controller.close()


def test_initial_tab_depends_on_role(api):
    assert build(api).state.value.ui.active_tab == "overview"
    assert build(api, user_role="student").state.value.ui.active_tab == "companies"


def test_controllers_are_cached_until_disposed(portal):
    reports = portal.reports
    assert portal.reports is reports

    reports.dispose()
    assert portal.reports is not reports
    with pytest.raises(ValueError):
        portal.controller("settings")


def test_leaving_a_tab_closes_its_modals(api, portal):
    api.responses["list_reports"] = lambda kind: (MisconductReport(id="m1"),) if kind == "misconduct" else ()
    portal.set_active_tab("reports")
    reports = portal.reports
    reports.load()
    reports.select(reports.items("misconduct")[0])
    assert reports.modals.is_open(DETAIL_MODAL)

    portal.set_active_tab("documents")
    assert reports.modals.stack.value == ()
    assert reports.selection.value.item is None
    assert portal.state.value.ui.active_tab == "documents"


def test_navigation_switches_tab(portal):
    portal.navigator.navigate(NavigationTarget(tab="jobs", payload="Acme"))
    assert portal.state.value.ui.active_tab == "jobs"


def test_expired_token_logs_out_once(api, portal):
    api.failures["list_reports"] = AuthenticationError("jwt expired", status_code=401)
    portal.reports.load()

    session = portal.state.value.session
    assert session.expired and not session.authenticated
    assert portal.notifier.messages.count(SESSION_EXPIRED_MESSAGE) == 1
    assert portal.navigator.current.value == NavigationTarget(tab=LOGIN_ROUTE)
    assert ("set_token", (None,)) in api.calls

    portal.expire_session()
    assert portal.notifier.messages.count(SESSION_EXPIRED_MESSAGE) == 1


def test_login_after_expiry(api, portal):
    portal.expire_session()
    portal.login("token-2", user_id="u7", role="supervisor")

    session = portal.state.value.session
    assert session.authenticated and not session.expired
    assert session.user_id == "u7"
    assert ("set_token", ("token-2",)) in api.calls


def test_logout_disposes_tabs(api, portal):
    messages = portal.messages
    portal.logout()

    assert messages.disposed
    assert not portal.state.value.session.authenticated
    assert portal.messages is not messages


def test_unread_total(portal):
    portal.set_unread_total(4)
    assert portal.state.value.ui.unread_total == 4
