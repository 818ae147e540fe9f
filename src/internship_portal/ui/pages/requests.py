"""Supervision requests: student applications awaiting the supervisor."""

from __future__ import annotations

import solara

from internship_portal.models.portal import Application
from internship_portal.state import PortalController, RequestsController
from internship_portal.state.requests import (
    DETAIL_MODAL,
    EDITABLE_FIELDS,
    FEEDBACK_MODAL,
    REJECT_MODAL,
    RESOURCE,
    SORT_KEYS,
    STATUS_FILTERS,
)
from internship_portal.ui.components.actions import JustifiedActionForm
from internship_portal.ui.components.cards import DownloadReady, InfoRow, ListStatus, StatCard, StatusChip, format_date
from internship_portal.ui.components.filters import FilterBar
from internship_portal.ui.components.modal import StackedModal

FIELD_LABELS = {
    "coverLetter": "Cover letter",
    "cvUrl": "CV",
    "certificates": "Certificates",
    "answers": "Screening answers",
}


@solara.component
def ApplicationCard(requests: RequestsController, application: Application) -> None:
    pending = requests.is_pending(f"approve.{application.id}")
    with solara.Card(classes=["ip-card"]):
        with solara.Row(style={"justifyContent": "space-between", "alignItems": "center"}):
            with solara.Column(style={"gap": "0.125rem"}):
                solara.Text(application.student_name or "Unknown student", classes=["ip-card__title"])
                solara.Text(
                    f"{application.job_title} at {application.company_name}",
                    classes=["ip-card__subtitle"],
                )
                solara.Text(
                    f"{application.department} · CGPA {application.cgpa if application.cgpa is not None else 'N/A'}"
                    f" · Applied {format_date(application.sort_date)}",
                    classes=["ip-meta"],
                )
            with solara.Row(style={"alignItems": "center", "gap": "0.5rem"}):
                StatusChip(application.supervisor_status)
                solara.Button("View", text=True, on_click=lambda: requests.select(application))
                if application.supervisor_status == "pending":
                    solara.Button(
                        "Approve",
                        color="success",
                        disabled=pending,
                        on_click=lambda: requests.approve(application),
                    )
                    solara.Button("Reject", color="error", outlined=True, on_click=lambda: requests.open_reject(application))


@solara.component
def ApplicationDetail(requests: RequestsController, application: Application) -> None:
    InfoRow("Student", application.student_name)
    InfoRow("Roll number", application.roll_number)
    InfoRow("Department", application.department)
    InfoRow("CGPA", application.cgpa)
    InfoRow("Company", application.company_name)
    InfoRow("Position", application.job_title)
    InfoRow("Applied", format_date(application.sort_date))
    InfoRow("Supervisor status", application.supervisor_status)
    if application.rejection_note:
        InfoRow("Rejection note", application.rejection_note)
    with solara.Row(style={"gap": "0.5rem", "flexWrap": "wrap", "marginTop": "0.75rem"}):
        for file_type, label in (("cv", "CV"), ("certificate", "Certificate")):
            url = requests.preview_url(application, file_type)
            if url:
                solara.Button(f"Preview {label}", text=True, href=url, target="_blank")
                solara.Button(
                    f"Download {label}",
                    icon_name="mdi-download",
                    text=True,
                    on_click=lambda file_type=file_type: requests.download_file(application, file_type),
                )
    DownloadReady(requests.download.value, requests.clear_download)
    if application.supervisor_status == "pending":
        with solara.Row(classes=["ip-modal__footer"]):
            solara.Button("Request changes", text=True, on_click=lambda: requests.open_feedback(application))
            solara.Button("Reject", color="error", outlined=True, on_click=lambda: requests.open_reject(application))
            solara.Button(
                "Approve",
                color="success",
                disabled=requests.is_pending(f"approve.{application.id}"),
                on_click=lambda: requests.approve(application),
            )


@solara.component
def RejectionFeedbackForm(requests: RequestsController, application: Application) -> None:
    draft = requests.rejection.value
    pending = requests.is_pending(f"feedback.{application.id}")
    solara.Text(f"Tell {application.student_name or 'the student'} what to fix before resubmitting.")
    solara.InputText(
        "Reason",
        value=draft.reason,
        on_value=lambda value: requests.update_rejection(reason=value),
        continuous_update=True,
    )
    solara.InputTextArea(
        "Details",
        value=draft.details,
        on_value=lambda value: requests.update_rejection(details=value),
        continuous_update=True,
        rows=4,
    )
    solara.InputTextArea(
        "Requested fixes (one per line)",
        value="\n".join(draft.requested_fixes),
        on_value=lambda value: requests.update_rejection(requested_fixes=value.splitlines()),
        rows=3,
    )
    solara.Text("Fields the student may edit", classes=["ip-meta"])
    with solara.Row(style={"gap": "0.5rem", "flexWrap": "wrap"}):
        for field in EDITABLE_FIELDS:
            solara.Checkbox(
                label=FIELD_LABELS[field],
                value=field in draft.fields_to_edit,
                on_value=lambda _value, field=field: requests.toggle_field_to_edit(field),
            )
    with solara.Row(classes=["ip-modal__footer"]):
        solara.Button("Cancel", text=True, on_click=lambda: requests.close_modal(FEEDBACK_MODAL))
        solara.Button(
            "Submitting..." if pending else "Send feedback",
            color="error",
            disabled=pending or not requests.feedback_ready,
            on_click=requests.submit_feedback,
        )


@solara.component
def View(controller: PortalController) -> None:
    requests = controller.requests

    def mount():
        requests.load()
        return requests.dispose

    solara.use_effect(mount, [requests])

    stats = requests.stats.value
    list_state = requests.lists[RESOURCE].value
    selection = requests.selection.value
    application = selection.item if isinstance(selection.item, Application) else None
    visible = requests.visible()

    with solara.Row(style={"gap": "1rem", "flexWrap": "wrap"}):
        StatCard("Total", stats.total)
        StatCard("Pending", stats.pending)
        StatCard("Approved", stats.approved)
        StatCard("Rejected", stats.rejected)
        StatCard("Hired", stats.hired)
    FilterBar(
        requests,
        RESOURCE,
        SORT_KEYS,
        placeholder="Search by student, company or position",
        statuses=STATUS_FILTERS,
        departments=requests.departments(),
    )
    ListStatus(list_state, "No applications match the current filters.", len(visible))
    with solara.Column(classes=["ip-list"]):
        for item in visible:
            ApplicationCard(requests, item).key(f"application-{item.id}")

    lock = controller.scroll_lock
    with StackedModal(requests.modals, DETAIL_MODAL, on_close=lambda: requests.close_modal(DETAIL_MODAL), scroll_lock=lock):
        if application is not None:
            ApplicationDetail(requests, application)
    with StackedModal(requests.modals, REJECT_MODAL, on_close=lambda: requests.close_modal(REJECT_MODAL), scroll_lock=lock):
        if application is not None:
            JustifiedActionForm(
                "Reason for rejection",
                value=selection.comments,
                on_value=requests.set_comments,
                on_submit=requests.submit_reject,
                on_cancel=lambda: requests.close_modal(REJECT_MODAL),
                submit_label="Reject application",
                color="error",
                pending=requests.is_pending(f"reject.{application.id}"),
                prompt=f"Reject the application from {application.student_name or 'this student'}?",
            )
    with StackedModal(requests.modals, FEEDBACK_MODAL, on_close=lambda: requests.close_modal(FEEDBACK_MODAL), scroll_lock=lock):
        if application is not None:
            RejectionFeedbackForm(requests, application)
