import pytest

from internship_portal.services.navigation import LOGIN_ROUTE, NavigationTarget, Navigator
from internship_portal.services.notifications import Notifier


def test_notifier_keeps_most_recent_toasts():
    notifier = Notifier(limit=2)
    notifier.info("one")
    second = notifier.error("two")
    notifier.success("three")

    assert notifier.messages == ("two", "three")
    notifier.dismiss(second.id)
    assert notifier.messages == ("three",)
    notifier.clear()
    assert notifier.messages == ()


def test_navigation_payload_is_consumed_once():
    navigator = Navigator()
    seen = []
    unlisten = navigator.on_navigate(seen.append)

    navigator.navigate(NavigationTarget(tab="jobs", payload="Acme"))

    assert seen == [NavigationTarget(tab="jobs", payload="Acme")]
    assert navigator.consume("companies") is None
    assert navigator.consume("jobs") == "Acme"
    assert navigator.consume("jobs") is None

    unlisten()
    navigator.navigate(NavigationTarget(tab=LOGIN_ROUTE))
    assert len(seen) == 1


def test_unknown_tab_is_rejected():
    with pytest.raises(ValueError):
        Navigator().navigate(NavigationTarget(tab="settings"))
