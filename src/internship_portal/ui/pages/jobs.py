"""Job listings for students."""

from __future__ import annotations

import solara

from internship_portal.models.portal import Job
from internship_portal.state import JobsController, PortalController
from internship_portal.state.jobs import DETAIL_MODAL, RESOURCE, SORT_KEYS
from internship_portal.ui.components.cards import InfoRow, ListStatus, format_date
from internship_portal.ui.components.filters import FilterBar
from internship_portal.ui.components.modal import StackedModal


@solara.component
def JobCard(jobs: JobsController, job: Job) -> None:
    with solara.Card(classes=["ip-card"]):
        with solara.Row(style={"justifyContent": "space-between", "alignItems": "center"}):
            with solara.Column(style={"gap": "0.125rem"}):
                solara.Text(job.title or "Position", classes=["ip-card__title"])
                solara.Text(" · ".join(part for part in (job.company_name, job.location, job.work_type) if part), classes=["ip-card__subtitle"])
                solara.Text(f"Posted {format_date(job.created_at)}", classes=["ip-meta"])
            solara.Button("Details", text=True, on_click=lambda: jobs.select(job))


@solara.component
def View(controller: PortalController) -> None:
    jobs = controller.jobs

    def mount():
        jobs.activate()
        jobs.load()
        return jobs.dispose

    solara.use_effect(mount, [jobs])

    visible = jobs.visible()
    selected = jobs.selection.value.item

    FilterBar(jobs, RESOURCE, SORT_KEYS, placeholder="Search by title, company, location or type")
    ListStatus(jobs.lists[RESOURCE].value, "No jobs match your search.", len(visible))
    with solara.Column(classes=["ip-list"]):
        for job in visible:
            JobCard(jobs, job).key(f"job-{job.id}")

    with StackedModal(jobs.modals, DETAIL_MODAL, on_close=lambda: jobs.close_modal(DETAIL_MODAL), scroll_lock=controller.scroll_lock):
        if isinstance(selected, Job):
            InfoRow("Company", selected.company_name)
            InfoRow("Location", selected.location)
            InfoRow("Type", selected.work_type)
            InfoRow("Salary", selected.salary)
            InfoRow("Deadline", format_date(selected.application_deadline))
            if selected.description:
                solara.Markdown(selected.description)
