"""Typed navigation between tabs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

import solara

SUPERVISOR_TABS = ("overview", "requests", "reports", "documents", "messages")
STUDENT_TABS = ("companies", "jobs")
LOGIN_ROUTE = "login"


@dataclass(frozen=True, slots=True)
class NavigationTarget:
    tab: str
    payload: Optional[str] = None


class Navigator:
    """Holds the pending navigation target and notifies listeners.

    The receiving tab calls :meth:`consume` once on mount so a payload such as
    a company name is applied exactly once.
    """

    def __init__(self, tabs: tuple[str, ...] = SUPERVISOR_TABS + STUDENT_TABS + (LOGIN_ROUTE,)) -> None:
        self._tabs = tabs
        self.current: solara.Reactive[Optional[NavigationTarget]] = solara.reactive(None)
        self._listeners: List[Callable[[NavigationTarget], None]] = []

    def navigate(self, target: NavigationTarget) -> None:
        if target.tab not in self._tabs:
            raise ValueError(f"Unknown tab: {target.tab}")
        self.current.set(target)
        for listener in list(self._listeners):
            listener(target)

    def on_navigate(self, listener: Callable[[NavigationTarget], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def cleanup() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return cleanup

    def consume(self, tab: str) -> Optional[str]:
        """Return and clear the payload addressed to ``tab``."""

        target = self.current.value
        if target is None or target.tab != tab:
            return None
        self.current.set(NavigationTarget(tab=tab))
        return target.payload
