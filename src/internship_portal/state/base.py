"""Shared plumbing for the list-and-detail tab controllers."""

from __future__ import annotations

import asyncio
import dataclasses
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterable, Optional, TypeVar

import solara

from internship_portal.models.listing import FilterState, ListState, SelectionState, SortKey
from internship_portal.services.api import ApiError, AuthenticationError, DownloadedFile, PortalClient
from internship_portal.services.events import DASHBOARD_REFRESH, EventBus
from internship_portal.services.logging import StructuredLogger
from internship_portal.services.navigation import Navigator
from internship_portal.services.notifications import Notifier
from internship_portal.services.settings import PortalSettings
from internship_portal.services.tasks import LifetimeScope, PortalTasks, TaskCancelled
from internship_portal.state.listing import is_justified
from internship_portal.state.modal import ModalManager, ModalSize

S = TypeVar("S")


@dataclass
class PortalServices:
    """Collaborators every tab controller needs."""

    api: PortalClient
    logger: StructuredLogger
    notifier: Notifier
    bus: EventBus
    navigator: Navigator
    tasks: PortalTasks
    settings: PortalSettings
    on_session_expired: Optional[Callable[[], None]] = None


def update_reactive(reactive: solara.Reactive[S], updater: Callable[[S], Dict[str, Any]]) -> None:
    """Apply ``updater`` (returning changed fields) to a dataclass held by ``reactive``."""

    prev = reactive.value
    reactive.set(dataclasses.replace(prev, **updater(prev)))


class ListController:
    """Base class for the tab controllers.

    Subclasses register one :class:`ListState` and :class:`FilterState`
    reactive per resource, then use :meth:`_fetch` and :meth:`_mutate` so
    that error handling, toasts, pending flags and session expiry behave the
    same on every tab.
    """

    name = "tab"

    def __init__(self, services: PortalServices) -> None:
        self.services = services
        self.api = services.api
        self.logger = services.logger.bind(tab=self.name)
        self.notifier = services.notifier
        self.bus = services.bus
        self.navigator = services.navigator
        self.tasks = services.tasks
        self.settings = services.settings
        self.modals = ModalManager()
        self.scope = LifetimeScope()
        self.lists: Dict[str, solara.Reactive[ListState]] = {}
        self.filters: Dict[str, solara.Reactive[FilterState]] = {}
        self.selection: solara.Reactive[SelectionState] = solara.reactive(SelectionState())
        self.pending: solara.Reactive[FrozenSet[str]] = solara.reactive(frozenset())
        self.download: solara.Reactive[Optional[DownloadedFile]] = solara.reactive(None)

    # ------------------------------------------------------------------ registration
    def _register(self, resource: str, sort_key: SortKey = SortKey.DATE_DESC) -> solara.Reactive[ListState]:
        self.lists[resource] = solara.reactive(ListState())
        self.filters[resource] = solara.reactive(FilterState(sort_key=sort_key))
        return self.lists[resource]

    def items(self, resource: str) -> tuple:
        return self.lists[resource].value.items

    # ------------------------------------------------------------------ lifecycle helpers
    def _spawn(self, coroutine: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coroutine)  # type: ignore[arg-type]
        else:
            loop.create_task(coroutine)  # type: ignore[arg-type]

    def load(self) -> None:
        self._spawn(self.refresh())

    async def refresh(self) -> None:
        raise NotImplementedError

    def dispose(self) -> None:
        """Stale every in-flight fetch and close this tab's modals."""

        self.scope.dispose()
        self.modals.close_all()
        self.logger.debug(f"{self.name}.disposed")

    @property
    def disposed(self) -> bool:
        return self.scope.disposed

    # ------------------------------------------------------------------ fetch / mutate
    async def _fetch(
        self,
        resource: str,
        func: Callable[..., Iterable[Any]],
        *args: Any,
        error_message: str,
    ) -> bool:
        target = self.lists[resource]
        token = self.scope.token()
        if token.cancelled:
            return False
        update_reactive(target, lambda prev: {"loading": True, "error": None})
        try:
            items = await self.tasks.run(f"{self.name}.{resource}.fetch", func, *args, token=token)
        except TaskCancelled:
            return False
        except AuthenticationError:
            update_reactive(target, lambda prev: {"loading": False})
            self._session_expired()
            return False
        except Exception as error:  # noqa: BLE001 - keep last known good items
            self.logger.error(f"{self.name}.{resource}.fetch.failed", error=str(error))
            self.notifier.error(error_message)
            update_reactive(target, lambda prev: {"loading": False, "error": str(error), "loaded": True})
            return False
        target.set(ListState(items=tuple(items), loading=False, error=None, loaded=True))
        return True

    async def _mutate(
        self,
        action: str,
        func: Callable[..., Any],
        *args: Any,
        error_message: str,
        on_success: Optional[Callable[[Any], None]] = None,
        success_message: Optional[str] = None,
    ) -> bool:
        if action in self.pending.value:
            return False
        token = self.scope.token()
        self.pending.set(self.pending.value | {action})
        try:
            result = await self.tasks.run(f"{self.name}.{action}", func, *args, token=token)
        except TaskCancelled:
            return False
        except AuthenticationError:
            self._session_expired()
            return False
        except ApiError as error:
            self.logger.error(f"{self.name}.{action}.failed", error=error.message, status_code=error.status_code)
            self.notifier.error(error.message or error_message)
            return False
        except Exception as error:  # noqa: BLE001 - surfaced as a toast
            self.logger.error(f"{self.name}.{action}.failed", error=str(error))
            self.notifier.error(error_message)
            return False
        finally:
            self.pending.set(self.pending.value - {action})
        if on_success is not None:
            on_success(result)
        if success_message:
            self.notifier.success(success_message)
        self.logger.info(f"{self.name}.{action}.succeeded")
        return True

    def is_pending(self, action: str) -> bool:
        return action in self.pending.value

    def _session_expired(self) -> None:
        self.logger.warning(f"{self.name}.session.expired")
        if self.services.on_session_expired is not None:
            self.services.on_session_expired()

    def _require(self, text: Optional[str], message: str) -> bool:
        if is_justified(text):
            return True
        self.notifier.error(message)
        return False

    def _refresh_dashboard(self) -> None:
        self.bus.publish(DASHBOARD_REFRESH, source=self.name)

    async def _download(self, action: str, func: Callable[..., DownloadedFile], *args: Any) -> None:
        await self._mutate(
            action,
            func,
            *args,
            error_message="Failed to download file",
            on_success=self.download.set,
            success_message="Download ready",
        )

    # ------------------------------------------------------------------ filters
    def set_search(self, resource: str, term: str) -> None:
        update_reactive(self.filters[resource], lambda prev: {"search_term": term})

    def set_sort(self, resource: str, key: SortKey | str) -> None:
        update_reactive(self.filters[resource], lambda prev: {"sort_key": SortKey(key)})

    def set_status_filter(self, resource: str, status: str) -> None:
        update_reactive(self.filters[resource], lambda prev: {"status": status or "all"})

    def set_department_filter(self, resource: str, department: str) -> None:
        update_reactive(self.filters[resource], lambda prev: {"department": department or "all"})

    def toggle_filter_panel(self, resource: str) -> None:
        update_reactive(self.filters[resource], lambda prev: {"panel_open": not prev.panel_open})

    def clear_filters(self, resource: str) -> None:
        self.filters[resource].set(self.filters[resource].value.cleared())

    # ------------------------------------------------------------------ selection and modals
    def _open(self, modal_id: str, item: Any = None, *, action: Optional[str] = None, title: Optional[str] = None, size: ModalSize = "md") -> None:
        if item is not None:
            prev = self.selection.value
            if prev.item is not item:
                self.selection.set(SelectionState(item=item, action=action))
            else:
                update_reactive(self.selection, lambda prev: {"action": action})
        elif action is not None:
            update_reactive(self.selection, lambda prev: {"action": action})
        self.modals.open(modal_id, title=title, size=size)

    def close_modal(self, modal_id: str) -> None:
        """Close ``modal_id`` (and anything above it); the selection goes when nothing is left open."""

        self.modals.close(modal_id)
        if not self.modals.stack.value:
            self.clear_selection()
        else:
            update_reactive(self.selection, lambda prev: {"action": None, "comments": "", "feedback": "", "rating": None, "attachments": ()})

    def clear_selection(self) -> None:
        self.selection.set(SelectionState())

    def set_comments(self, text: str) -> None:
        update_reactive(self.selection, lambda prev: {"comments": text})

    def set_feedback(self, text: str) -> None:
        update_reactive(self.selection, lambda prev: {"feedback": text})

    def set_rating(self, rating: Optional[int]) -> None:
        update_reactive(self.selection, lambda prev: {"rating": rating})

    def _finish_action(self) -> None:
        self.modals.close_all()
        self.clear_selection()

    def clear_download(self) -> None:
        self.download.set(None)
