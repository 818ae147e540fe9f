"""Application shell: header, active tab and the shared overlays."""

from __future__ import annotations

from typing import Callable, Dict

import solara

from internship_portal.core.styles import GlobalStyles
from internship_portal.services.logging import StructuredLogger
from internship_portal.services.settings import load_settings
from internship_portal.state import PortalController, use_portal_state
from internship_portal.ui.components.header import PortalHeader, tabs_for_role
from internship_portal.ui.components.modal import ScrollLockStyle
from internship_portal.ui.components.notifications import ToastStack
from internship_portal.ui.pages import companies, documents, jobs, login, messages, overview, reports, requests

TAB_VIEWS: Dict[str, Callable[[PortalController], None]] = {
    "overview": overview.View,
    "requests": requests.View,
    "reports": reports.View,
    "documents": documents.View,
    "messages": messages.View,
    "companies": companies.View,
    "jobs": jobs.View,
}


def create_controller() -> PortalController:
    settings = load_settings()
    logger = StructuredLogger(settings.app_name)
    return PortalController(settings=settings, logger=logger)


@solara.component
def _PortalShell(controller: PortalController) -> None:
    app_state = use_portal_state(controller)
    session = app_state.session
    allowed = tabs_for_role(session.role)
    active_tab = app_state.ui.active_tab

    def sync_tab():
        if session.authenticated and active_tab not in allowed:
            controller.set_active_tab(allowed[0])

    solara.use_effect(sync_tab, [session.authenticated, session.role, active_tab])

    with solara.Column(classes=["ip-shell"]):
        PortalHeader(controller)
        if not session.authenticated:
            login.View(controller)
        elif active_tab in allowed:
            TAB_VIEWS[active_tab](controller).key(f"tab-{active_tab}")


@solara.component
def Page():
    controller = solara.use_memo(create_controller, [])
    solara.use_effect(lambda: controller.close, [controller])

    GlobalStyles()
    ScrollLockStyle(controller.scroll_lock)
    _PortalShell(controller)
    ToastStack(controller.notifier)
