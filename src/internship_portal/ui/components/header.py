"""Portal header with the role's tab navigation."""

from __future__ import annotations

from typing import Dict

import solara

from internship_portal.services.navigation import STUDENT_TABS, SUPERVISOR_TABS
from internship_portal.state import PortalController

TAB_LABELS: Dict[str, str] = {
    "overview": "Overview",
    "requests": "Requests",
    "reports": "Reports",
    "documents": "Documents",
    "messages": "Messages",
    "companies": "Registered Companies",
    "jobs": "Jobs",
}


def tabs_for_role(role: str) -> tuple:
    return SUPERVISOR_TABS if role == "supervisor" else STUDENT_TABS


@solara.component
def HeaderNav(controller: PortalController) -> None:
    app_state = controller.state.value
    active = app_state.ui.active_tab
    for tab in tabs_for_role(app_state.session.role):
        classes = ["ip-tab"]
        if tab == active:
            classes.append("ip-tab--active")
        with solara.Row(style={"alignItems": "center", "gap": "0.125rem"}):
            solara.Button(
                TAB_LABELS[tab],
                text=True,
                classes=classes,
                on_click=lambda tab=tab: controller.set_active_tab(tab),
            )
            if tab == "messages" and app_state.ui.unread_total:
                solara.Text(str(app_state.ui.unread_total), classes=["ip-badge"])


@solara.component
def PortalHeader(controller: PortalController) -> None:
    app_state = controller.state.value
    public_config = app_state.session.public_config
    environment = public_config.get("environment", "local").upper()
    who = app_state.session.display_name or app_state.session.role.title()

    with solara.Row(classes=["ip-header"]):
        with solara.Column(style={"gap": "0.125rem"}):
            solara.Text(public_config.get("app_display_name", "Internship Portal"), classes=["ip-title"])
            solara.Text(f"{who} · {environment}", classes=["ip-meta"])
        with solara.Row(style={"alignItems": "center", "gap": "0.25rem"}):
            HeaderNav(controller)
            if app_state.session.authenticated:
                solara.Button("Log out", icon_name="mdi-logout", text=True, on_click=controller.logout)
