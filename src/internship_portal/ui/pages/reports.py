"""Reports filed by companies about supervised interns."""

from __future__ import annotations

import solara

from internship_portal.models.portal import AppraisalReport, MisconductReport, ProgressReport, Report
from internship_portal.state import PortalController, ReportsController
from internship_portal.state.reports import (
    ACTION_MODAL,
    DETAIL_MODAL,
    FEEDBACK_MODAL,
    MISCONDUCT_ACTION_LABELS,
    MISCONDUCT_ACTIONS,
    REPORT_KINDS,
    sort_keys_for,
)
from internship_portal.ui.components.actions import JustifiedActionForm
from internship_portal.ui.components.cards import DownloadReady, InfoRow, ListStatus, StatusChip, format_date, format_rating
from internship_portal.ui.components.filters import FilterBar
from internship_portal.ui.components.modal import StackedModal

KIND_LABELS = {
    "misconduct": "Misconduct",
    "progress": "Progress",
    "appraisal": "Appraisals",
}
MISCONDUCT_STATUSES = ("all", "Pending", *MISCONDUCT_ACTIONS.values())
ACTION_COLORS = {"resolve": "success", "warning": "warning", "cancel": "error"}


@solara.component
def ReportCard(reports: ReportsController, report: Report) -> None:
    with solara.Card(classes=["ip-card"]):
        with solara.Row(style={"justifyContent": "space-between", "alignItems": "center"}):
            with solara.Column(style={"gap": "0.125rem"}):
                solara.Text(report.student_name or "Unknown student", classes=["ip-card__title"])
                subtitle = report.company_name
                if isinstance(report, MisconductReport) and report.issue_type:
                    subtitle = f"{report.issue_type} · {report.company_name}"
                elif isinstance(report, AppraisalReport):
                    subtitle = f"{report.company_name} · Rating {format_rating(report.overall_rating)}"
                solara.Text(subtitle, classes=["ip-card__subtitle"])
                solara.Text(format_date(report.sort_date), classes=["ip-meta"])
            with solara.Row(style={"alignItems": "center", "gap": "0.5rem"}):
                StatusChip(report.status)
                solara.Button("View", text=True, on_click=lambda: reports.select(report))
                solara.Button(
                    icon_name="mdi-file-pdf-box",
                    icon=True,
                    disabled=reports.is_pending(f"{report.kind}.pdf"),
                    on_click=lambda: reports.download_pdf(report),
                )


@solara.component
def MisconductDetail(reports: ReportsController, report: MisconductReport) -> None:
    InfoRow("Student", report.student_name)
    InfoRow("Company", report.company_name)
    InfoRow("Issue", report.issue_type)
    InfoRow("Incident date", format_date(report.incident_date))
    InfoRow("Status", report.status)
    solara.Markdown(report.description or "_No description provided._")
    if report.supervisor_comments:
        InfoRow("Supervisor comments", report.supervisor_comments)
    if report.status == "Pending":
        with solara.Row(classes=["ip-modal__footer"]):
            for action, label in MISCONDUCT_ACTION_LABELS.items():
                solara.Button(
                    label,
                    color=ACTION_COLORS[action],
                    outlined=True,
                    on_click=lambda action=action: reports.open_misconduct_action(action, report),
                )


@solara.component
def ProgressDetail(reports: ReportsController, report: ProgressReport) -> None:
    InfoRow("Student", report.student_name)
    InfoRow("Company", report.company_name)
    InfoRow("Report date", format_date(report.report_date))
    InfoRow("Overall progress", report.overall_progress)
    InfoRow("Tasks completed", report.tasks_completed)
    InfoRow("Current tasks", report.current_tasks)
    InfoRow("Challenges", report.challenges)
    if report.supervisor_feedback:
        InfoRow("Your feedback", report.supervisor_feedback)
    with solara.Row(classes=["ip-modal__footer"]):
        solara.Button("Add feedback", color="primary", on_click=lambda: reports.open_progress_feedback(report))


@solara.component
def AppraisalDetail(report: AppraisalReport) -> None:
    InfoRow("Student", report.student_name)
    InfoRow("Company", report.company_name)
    InfoRow("Overall performance", report.overall_performance)
    InfoRow("Overall rating", format_rating(report.overall_rating))
    InfoRow("Submitted", format_date(report.sort_date))
    if report.comments:
        solara.Markdown(report.comments)


@solara.component
def ReportDetail(reports: ReportsController, report: Report) -> None:
    if isinstance(report, MisconductReport):
        MisconductDetail(reports, report)
    elif isinstance(report, ProgressReport):
        ProgressDetail(reports, report)
    else:
        AppraisalDetail(report)
    DownloadReady(reports.download.value, reports.clear_download)


@solara.component
def View(controller: PortalController) -> None:
    reports = controller.reports

    def mount():
        reports.load()
        return reports.dispose

    solara.use_effect(mount, [reports])

    kind = reports.active_kind.value
    selection = reports.selection.value
    report = selection.item
    visible = reports.visible(kind)
    counts = reports.counts(kind)

    labels = {f"{KIND_LABELS[k]} ({len(reports.items(k))})": k for k in REPORT_KINDS}
    current_label = next(label for label, value in labels.items() if value == kind)
    solara.ToggleButtonsSingle(
        value=current_label,
        values=list(labels),
        on_value=lambda label: reports.set_active_kind(labels[label]),
    )
    FilterBar(
        reports,
        kind,
        sort_keys_for(kind),
        placeholder="Search by student, company or status",
        statuses=MISCONDUCT_STATUSES if kind == "misconduct" else (),
    )
    if kind == "misconduct":
        solara.Text(
            " · ".join(f"{status}: {counts.get(status, 0)}" for status in MISCONDUCT_STATUSES[1:]),
            classes=["ip-meta"],
        )
    ListStatus(reports.lists[kind].value, f"No {KIND_LABELS[kind].lower()} reports found.", len(visible))
    with solara.Column(classes=["ip-list"]):
        for item in visible:
            ReportCard(reports, item).key(f"{kind}-{item.id}")
    if not reports.modals.stack.value:
        DownloadReady(reports.download.value, reports.clear_download)

    lock = controller.scroll_lock
    with StackedModal(reports.modals, DETAIL_MODAL, on_close=lambda: reports.close_modal(DETAIL_MODAL), scroll_lock=lock):
        if report is not None:
            ReportDetail(reports, report)
    with StackedModal(reports.modals, ACTION_MODAL, on_close=lambda: reports.close_modal(ACTION_MODAL), scroll_lock=lock):
        if isinstance(report, MisconductReport) and selection.action in MISCONDUCT_ACTIONS:
            JustifiedActionForm(
                "Supervisor comments",
                value=selection.comments,
                on_value=reports.set_comments,
                on_submit=reports.submit_misconduct_action,
                on_cancel=lambda: reports.close_modal(ACTION_MODAL),
                submit_label=MISCONDUCT_ACTION_LABELS[selection.action],
                color=ACTION_COLORS[selection.action],
                pending=reports.is_pending(f"misconduct.{selection.action}"),
                prompt=f"The report will be marked as {MISCONDUCT_ACTIONS[selection.action]}.",
            )
    with StackedModal(reports.modals, FEEDBACK_MODAL, on_close=lambda: reports.close_modal(FEEDBACK_MODAL), scroll_lock=lock):
        if isinstance(report, ProgressReport):
            JustifiedActionForm(
                "Feedback",
                value=selection.feedback,
                on_value=reports.set_feedback,
                on_submit=reports.submit_progress_feedback,
                on_cancel=lambda: reports.close_modal(FEEDBACK_MODAL),
                submit_label="Submit feedback",
                pending=reports.is_pending("progress.feedback"),
            )
