"""Student documents: joining, internship and weekly reports."""

from __future__ import annotations

from typing import Any

import solara

from internship_portal.models.listing import DATE_AND_NAME_KEYS
from internship_portal.models.portal import InternshipReport, JoiningReport, WeeklyReport
from internship_portal.state import DocumentsController, PortalController
from internship_portal.state.documents import DETAIL_MODAL, DOCUMENT_KINDS, FEEDBACK_MODAL, GRADES, VERIFY_MODAL
from internship_portal.ui.components.actions import ConfirmActions, JustifiedActionForm
from internship_portal.ui.components.cards import DownloadReady, InfoRow, ListStatus, StatusChip, format_date
from internship_portal.ui.components.filters import FilterBar
from internship_portal.ui.components.modal import StackedModal

KIND_LABELS = {
    "joining": "Joining Reports",
    "internship": "Internship Reports",
    "weekly": "Weekly Reports",
}
RATINGS = ("1", "2", "3", "4", "5")


def kind_of(document: Any) -> str:
    if isinstance(document, JoiningReport):
        return "joining"
    if isinstance(document, InternshipReport):
        return "internship"
    return "weekly"


@solara.component
def DocumentCard(documents: DocumentsController, document: Any) -> None:
    kind = kind_of(document)
    with solara.Card(classes=["ip-card"]):
        with solara.Row(style={"justifyContent": "space-between", "alignItems": "center"}):
            with solara.Column(style={"gap": "0.125rem"}):
                title = document.student_name or "Unknown student"
                if isinstance(document, WeeklyReport):
                    title = f"{title} · Week {document.week_number}"
                solara.Text(title, classes=["ip-card__title"])
                solara.Text(document.company_name, classes=["ip-card__subtitle"])
                solara.Text(format_date(document.sort_date), classes=["ip-meta"])
            with solara.Row(style={"alignItems": "center", "gap": "0.5rem"}):
                StatusChip(document.status)
                solara.Button("View", text=True, on_click=lambda: documents.select(document))
                if isinstance(document, JoiningReport) and not document.verified:
                    solara.Button("Verify", color="success", on_click=lambda: documents.open_verify(document))
                elif not isinstance(document, JoiningReport) and not document.supervisor_feedback:
                    solara.Button("Feedback", color="primary", outlined=True, on_click=lambda: documents.open_feedback(document))
                solara.Button(
                    icon_name="mdi-file-pdf-box",
                    icon=True,
                    disabled=documents.is_pending(f"{kind}.pdf"),
                    on_click=lambda: documents.download_pdf(kind, document),
                )


@solara.component
def DocumentDetail(documents: DocumentsController, document: Any) -> None:
    InfoRow("Student", document.student_name)
    InfoRow("Company", document.company_name)
    InfoRow("Status", document.status)
    if isinstance(document, JoiningReport):
        InfoRow("Joining date", format_date(document.joining_date))
        InfoRow("Verified", "Yes" if document.verified else "No")
    else:
        InfoRow("Submitted", format_date(document.sort_date))
        if isinstance(document, WeeklyReport):
            InfoRow("Week", document.week_number)
        if isinstance(document, InternshipReport) and document.supervisor_grade:
            InfoRow("Grade", document.supervisor_grade)
        if document.supervisor_feedback:
            InfoRow("Your feedback", document.supervisor_feedback)
    DownloadReady(documents.download.value, documents.clear_download)
    with solara.Row(classes=["ip-modal__footer"]):
        if isinstance(document, JoiningReport):
            if not document.verified:
                solara.Button("Verify", color="success", on_click=lambda: documents.open_verify(document))
        elif not document.supervisor_feedback:
            solara.Button("Add feedback", color="primary", on_click=lambda: documents.open_feedback(document))


@solara.component
def FeedbackExtras(documents: DocumentsController, document: Any, rating) -> None:
    if isinstance(document, InternshipReport):
        grade = documents.grade.value
        solara.Select(
            "Grade",
            value=grade or "",
            values=["", *GRADES],
            on_value=lambda value: documents.set_grade(value or None),
        )
    elif isinstance(document, WeeklyReport):
        solara.Select(
            "Rating",
            value=str(rating) if rating else "",
            values=["", *RATINGS],
            on_value=lambda value: documents.set_rating(int(value) if value else None),
        )


@solara.component
def View(controller: PortalController) -> None:
    documents = controller.documents

    def mount():
        documents.load()
        return documents.dispose

    solara.use_effect(mount, [documents])

    kind = documents.active_kind.value
    selection = documents.selection.value
    document = selection.item
    visible = documents.visible(kind)
    pending = documents.pending_counts()

    labels = {f"{KIND_LABELS[k]} ({pending[k]} pending)": k for k in DOCUMENT_KINDS}
    current_label = next(label for label, value in labels.items() if value == kind)
    solara.ToggleButtonsSingle(
        value=current_label,
        values=list(labels),
        on_value=lambda label: documents.set_active_kind(labels[label]),
    )
    FilterBar(documents, kind, DATE_AND_NAME_KEYS, placeholder="Search by student, company or status")
    ListStatus(documents.lists[kind].value, f"No {KIND_LABELS[kind].lower()} found.", len(visible))
    with solara.Column(classes=["ip-list"]):
        for item in visible:
            DocumentCard(documents, item).key(f"{kind}-{item.id}")
    if not documents.modals.stack.value:
        DownloadReady(documents.download.value, documents.clear_download)

    lock = controller.scroll_lock
    with StackedModal(documents.modals, DETAIL_MODAL, on_close=lambda: documents.close_modal(DETAIL_MODAL), scroll_lock=lock):
        if document is not None:
            DocumentDetail(documents, document)
    with StackedModal(documents.modals, VERIFY_MODAL, on_close=lambda: documents.close_modal(VERIFY_MODAL), scroll_lock=lock):
        if isinstance(document, JoiningReport):
            solara.Text(f"Confirm that {document.student_name or 'the student'} has joined {document.company_name}.")
            ConfirmActions(
                on_confirm=documents.verify,
                on_cancel=lambda: documents.close_modal(VERIFY_MODAL),
                confirm_label="Verify",
                color="success",
                pending=documents.is_pending(f"verify.{document.id}"),
            )
    with StackedModal(documents.modals, FEEDBACK_MODAL, on_close=lambda: documents.close_modal(FEEDBACK_MODAL), scroll_lock=lock):
        if isinstance(document, (InternshipReport, WeeklyReport)):
            with JustifiedActionForm(
                "Feedback",
                value=selection.feedback,
                on_value=documents.set_feedback,
                on_submit=documents.submit_feedback,
                on_cancel=lambda: documents.close_modal(FEEDBACK_MODAL),
                submit_label="Submit feedback",
                pending=documents.is_pending(f"feedback.{document.id}"),
            ):
                FeedbackExtras(documents, document, selection.rating)
