"""Shared fixtures for the tab controller tests."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Tuple

import pytest

from internship_portal.services.events import EventBus
from internship_portal.services.logging import StructuredLogger
from internship_portal.services.navigation import Navigator
from internship_portal.services.notifications import Notifier
from internship_portal.services.settings import PortalSettings
from internship_portal.services.tasks import PortalTasks
from internship_portal.state.base import PortalServices


class FakeApi:
    """Records every call; answers from ``responses`` or raises from ``failures``."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, tuple]] = []
        self.responses: Dict[str, Any] = {}
        self.failures: Dict[str, Exception] = {}

    def _call(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        failure = self.failures.get(name)
        if failure is not None:
            raise failure
        response = self.responses.get(name)
        return response(*args) if callable(response) else response

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        return lambda *args, **kwargs: self._call(name, *args, *kwargs.values())

    def names(self) -> List[str]:
        return [name for name, _args in self.calls]


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def settings() -> PortalSettings:
    return PortalSettings(unread_poll_seconds=0.02, search_debounce_seconds=0.03)


@pytest.fixture
def expired() -> list:
    return []


@pytest.fixture
def services(api, settings, expired) -> PortalServices:
    logger = StructuredLogger("test-portal")
    return PortalServices(
        api=api,
        logger=logger,
        notifier=Notifier(logger, limit=20),
        bus=EventBus(logger),
        navigator=Navigator(),
        tasks=PortalTasks(logger),
        settings=settings,
        on_session_expired=lambda: expired.append(True),
    )


@pytest.fixture
def wait_for():
    def wait(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.01)
        return predicate()

    return wait
