"""Portal controller: session, shared services and the per-tab controllers."""

from __future__ import annotations

import dataclasses
from typing import Callable, Dict, Optional

import solara

from internship_portal.models import app as app_models
from internship_portal.services.api import PortalClient
from internship_portal.services.events import EventBus
from internship_portal.services.logging import StructuredLogger
from internship_portal.services.navigation import LOGIN_ROUTE, NavigationTarget, Navigator
from internship_portal.services.notifications import Notifier
from internship_portal.services.settings import PortalSettings, load_settings
from internship_portal.services.tasks import PortalTasks
from internship_portal.state.base import ListController, PortalServices, update_reactive
from internship_portal.state.companies import CompaniesController
from internship_portal.state.dashboard import DashboardController
from internship_portal.state.documents import DocumentsController
from internship_portal.state.jobs import JobsController
from internship_portal.state.messages import MessagesController
from internship_portal.state.modal import ScrollLock
from internship_portal.state.reports import ReportsController
from internship_portal.state.requests import RequestsController

SESSION_EXPIRED_MESSAGE = "Session expired. Please log in again."

TAB_CONTROLLERS: Dict[str, Callable[[PortalServices], ListController]] = {
    "overview": DashboardController,
    "requests": RequestsController,
    "reports": ReportsController,
    "documents": DocumentsController,
    "messages": MessagesController,
    "companies": CompaniesController,
    "jobs": JobsController,
}


class PortalController:
    """High level orchestrator for one browser session."""

    def __init__(
        self,
        *,
        settings: Optional[PortalSettings] = None,
        logger: Optional[StructuredLogger] = None,
        api: Optional[PortalClient] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.logger = logger or StructuredLogger(self.settings.app_name)
        self.logger.set_level(self.settings.log_level)
        self.logger.configure_context(
            app_name=self.settings.app_name,
            environment=self.settings.environment,
            user_id=self.settings.user_id,
            role=self.settings.user_role,
        )
        self.api = api or PortalClient(
            self.settings.api_base_url,
            timeout=self.settings.request_timeout,
            token=self.settings.auth_token,
        )
        self.notifier = Notifier(self.logger)
        self.bus = EventBus(self.logger)
        self.navigator = Navigator()
        self.tasks = PortalTasks(self.logger)
        self.scroll_lock = ScrollLock()
        self.services = PortalServices(
            api=self.api,
            logger=self.logger,
            notifier=self.notifier,
            bus=self.bus,
            navigator=self.navigator,
            tasks=self.tasks,
            settings=self.settings,
            on_session_expired=self.expire_session,
        )
        initial_tab = "overview" if self.settings.user_role == "supervisor" else "companies"
        self.state: solara.Reactive[app_models.AppState] = solara.reactive(
            app_models.AppState(
                session=app_models.SessionState(
                    authenticated=bool(self.settings.auth_token),
                    user_id=self.settings.user_id,
                    role=self.settings.user_role,
                    public_config=self.settings.public_config(),
                ),
                ui=app_models.UIState(active_tab=initial_tab),
            )
        )
        self._controllers: Dict[str, ListController] = {}
        self._unlisten = self.navigator.on_navigate(self._follow_navigation)

    # ------------------------------------------------------------------ tab controllers
    def controller(self, tab: str) -> ListController:
        """Return the controller for ``tab``, building it on first use."""

        existing = self._controllers.get(tab)
        if existing is not None and not existing.disposed:
            return existing
        try:
            factory = TAB_CONTROLLERS[tab]
        except KeyError as error:
            raise ValueError(f"Unknown tab: {tab}") from error
        controller = factory(self.services)
        self._controllers[tab] = controller
        return controller

    @property
    def dashboard(self) -> DashboardController:
        return self.controller("overview")  # type: ignore[return-value]

    @property
    def requests(self) -> RequestsController:
        return self.controller("requests")  # type: ignore[return-value]

    @property
    def reports(self) -> ReportsController:
        return self.controller("reports")  # type: ignore[return-value]

    @property
    def documents(self) -> DocumentsController:
        return self.controller("documents")  # type: ignore[return-value]

    @property
    def messages(self) -> MessagesController:
        return self.controller("messages")  # type: ignore[return-value]

    @property
    def companies(self) -> CompaniesController:
        return self.controller("companies")  # type: ignore[return-value]

    @property
    def jobs(self) -> JobsController:
        return self.controller("jobs")  # type: ignore[return-value]

    # ------------------------------------------------------------------ navigation
    def set_active_tab(self, tab: str) -> None:
        previous = self.state.value.ui.active_tab
        if previous == tab:
            return
        leaving = self._controllers.get(previous)
        if leaving is not None:
            leaving.modals.close_all()
            leaving.clear_selection()
        self.logger.set_page(tab)
        self.logger.info("navigation.tab.changed", previous=previous, tab=tab)
        update_reactive(self.state, lambda prev: {"ui": dataclasses.replace(prev.ui, active_tab=tab)})

    def _follow_navigation(self, target: NavigationTarget) -> None:
        if target.tab != LOGIN_ROUTE:
            self.set_active_tab(target.tab)

    def set_unread_total(self, total: int) -> None:
        if self.state.value.ui.unread_total != total:
            update_reactive(self.state, lambda prev: {"ui": dataclasses.replace(prev.ui, unread_total=total)})

    # ------------------------------------------------------------------ session
    def login(self, token: str, *, user_id: Optional[str] = None, display_name: Optional[str] = None, role: Optional[str] = None) -> None:
        self.api.set_token(token)
        self.logger.configure_context(user_id=user_id, role=role or self.state.value.session.role)

        def updater(prev: app_models.AppState):
            session = dataclasses.replace(
                prev.session,
                authenticated=True,
                expired=False,
                user_id=user_id,
                display_name=display_name,
                role=role or prev.session.role,
            )
            return {"session": session}

        update_reactive(self.state, updater)
        self.logger.info("session.login", user_id=user_id)

    def logout(self) -> None:
        self.api.set_token(None)
        self.dispose_tabs()
        update_reactive(
            self.state,
            lambda prev: {"session": dataclasses.replace(prev.session, authenticated=False, user_id=None, display_name=None)},
        )
        self.logger.info("session.logout")

    def expire_session(self) -> None:
        """Handle a rejected token: mark the session, tell the user and go to login."""

        if self.state.value.session.expired:
            return
        self.api.set_token(None)
        update_reactive(
            self.state,
            lambda prev: {"session": dataclasses.replace(prev.session, authenticated=False, expired=True)},
        )
        self.notifier.error(SESSION_EXPIRED_MESSAGE)
        self.navigator.navigate(NavigationTarget(tab=LOGIN_ROUTE))

    # ------------------------------------------------------------------ teardown
    def dispose_tabs(self) -> None:
        for controller in self._controllers.values():
            controller.dispose()
        self._controllers.clear()

    def close(self) -> None:
        self._unlisten()
        self.dispose_tabs()
        self.api.close()


def use_portal_state(controller: PortalController) -> app_models.AppState:
    """Convenience hook for reading the reactive portal state."""

    return controller.state.value
