"""Supervisor overview with the headline counts."""

from __future__ import annotations

import solara

from internship_portal.state import PortalController
from internship_portal.ui.components.cards import StatCard


@solara.component
def View(controller: PortalController) -> None:
    dashboard = controller.dashboard

    def mount():
        dashboard.activate()
        dashboard.load()
        return dashboard.dispose

    solara.use_effect(mount, [dashboard])

    stats = dashboard.stats.value
    if dashboard.loading.value:
        solara.ProgressLinear(True)
    with solara.Row(style={"gap": "1rem", "flexWrap": "wrap"}):
        StatCard("Supervised students", stats.students_count, f"{stats.active_students} active")
        StatCard("Completed internships", stats.completed_students)
        StatCard("Reports pending", stats.reports_pending, f"{stats.reports_reviewed} reviewed")
        StatCard("Evaluations pending", stats.evaluations_pending)
        StatCard("Supervision requests", stats.supervision_requests)
        StatCard("Job applications", stats.applications)
        StatCard("Unread messages", stats.unread_messages)
    with solara.Row(style={"gap": "0.5rem"}):
        solara.Button("Refresh", icon_name="mdi-refresh", text=True, on_click=dashboard.load)
        solara.Button("Review requests", text=True, on_click=lambda: controller.set_active_tab("requests"))
        solara.Button("Open messages", text=True, on_click=lambda: controller.set_active_tab("messages"))
