"""Company reports tab: misconduct, progress and appraisal reports."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import solara

from internship_portal.models.listing import ALL_SORT_KEYS, DATE_AND_NAME_KEYS, ListState
from internship_portal.models.portal import (
    MisconductReport,
    ProgressReport,
    Report,
    ReportKind,
)
from internship_portal.state.base import ListController, PortalServices
from internship_portal.state.listing import filter_items, patch_item, sort_items

REPORT_KINDS: tuple[ReportKind, ...] = ("misconduct", "progress", "appraisal")

MISCONDUCT_ACTIONS: Dict[str, str] = {
    "resolve": "Resolved",
    "warning": "Warning Issued",
    "cancel": "Internship Cancelled",
}
MISCONDUCT_ACTION_LABELS: Dict[str, str] = {
    "resolve": "Resolve Report",
    "warning": "Issue Warning",
    "cancel": "Cancel Internship",
}
_FETCH_ERRORS: Dict[ReportKind, str] = {
    "misconduct": "Failed to fetch misconduct reports",
    "progress": "Failed to fetch progress reports",
    "appraisal": "Failed to fetch internship appraisals",
}

DETAIL_MODAL = "reports.detail"
ACTION_MODAL = "reports.action"
FEEDBACK_MODAL = "reports.feedback"


def report_search_fields(report: Report) -> tuple:
    if isinstance(report, MisconductReport):
        return (report.student_name, report.company_name, report.issue_type, report.status)
    return (report.student_name, report.company_name, report.status)


def sort_keys_for(kind: ReportKind) -> tuple:
    return ALL_SORT_KEYS if kind == "appraisal" else DATE_AND_NAME_KEYS


class ReportsController(ListController):
    """Supervisor view of the reports companies file about their interns."""

    name = "reports"

    def __init__(self, services: PortalServices) -> None:
        super().__init__(services)
        for kind in REPORT_KINDS:
            self._register(kind)
        self.active_kind: solara.Reactive[ReportKind] = solara.reactive("misconduct")

    # ------------------------------------------------------------------ fetch
    async def refresh(self) -> None:
        await asyncio.gather(*(self.fetch_kind(kind) for kind in REPORT_KINDS))

    async def fetch_kind(self, kind: ReportKind) -> bool:
        return await self._fetch(kind, self.api.list_reports, kind, error_message=_FETCH_ERRORS[kind])

    def set_active_kind(self, kind: ReportKind) -> None:
        self.active_kind.set(kind)

    # ------------------------------------------------------------------ derived views
    def visible(self, kind: ReportKind) -> List[Report]:
        filters = self.filters[kind].value
        items = filter_items(self.items(kind), filters.search_term, report_search_fields)
        if filters.status != "all":
            items = [report for report in items if report.status == filters.status]
        return sort_items(
            items,
            filters.sort_key,
            date=lambda report: report.sort_date,
            name=lambda report: report.student_name,
            rating=(lambda report: report.overall_rating) if kind == "appraisal" else None,
        )

    def counts(self, kind: ReportKind) -> Dict[str, int]:
        items = self.items(kind)
        counts: Dict[str, int] = {"total": len(items)}
        for report in items:
            counts[report.status] = counts.get(report.status, 0) + 1
        return counts

    # ------------------------------------------------------------------ detail and actions
    def select(self, report: Report) -> None:
        self._open(DETAIL_MODAL, report, title=f"{report.kind.title()} Report", size="lg")

    def open_misconduct_action(self, action: str, report: Optional[MisconductReport] = None) -> None:
        if action not in MISCONDUCT_ACTIONS:
            raise ValueError(f"Unknown misconduct action: {action}")
        target = report or self.selection.value.item
        if not isinstance(target, MisconductReport):
            return
        self._open(ACTION_MODAL, target, action=action, title=MISCONDUCT_ACTION_LABELS[action])

    def open_progress_feedback(self, report: Optional[ProgressReport] = None) -> None:
        target = report or self.selection.value.item
        if not isinstance(target, ProgressReport):
            return
        self._open(FEEDBACK_MODAL, target, action="feedback", title="Add Feedback")

    def submit_misconduct_action(self) -> None:
        self._spawn(self._submit_misconduct_action())

    async def _submit_misconduct_action(self) -> bool:
        selection = self.selection.value
        report = selection.item
        if not isinstance(report, MisconductReport) or selection.action not in MISCONDUCT_ACTIONS:
            return False
        if not self._require(selection.comments, "Supervisor comments are required"):
            return False
        status = MISCONDUCT_ACTIONS[selection.action]
        comments = selection.comments.strip()

        def apply(_result) -> None:
            target = self.lists["misconduct"]
            patched = patch_item(target.value.items, report.id, status=status, supervisor_comments=comments)
            target.set(ListState(items=patched, loaded=True))
            self._finish_action()
            self._refresh_dashboard()

        return await self._mutate(
            f"misconduct.{selection.action}",
            self.api.update_misconduct_status,
            report.id,
            status,
            comments,
            error_message="Failed to update report status",
            on_success=apply,
            success_message=f"Report marked as {status}",
        )

    def submit_progress_feedback(self) -> None:
        self._spawn(self._submit_progress_feedback())

    async def _submit_progress_feedback(self) -> bool:
        selection = self.selection.value
        report = selection.item
        if not isinstance(report, ProgressReport):
            return False
        if not self._require(selection.feedback, "Feedback is required"):
            return False

        def apply(_result) -> None:
            self._finish_action()
            self._refresh_dashboard()

        ok = await self._mutate(
            "progress.feedback",
            self.api.review_progress_report,
            report.id,
            selection.feedback.strip(),
            error_message="Failed to add feedback",
            on_success=apply,
            success_message="Feedback added successfully",
        )
        if ok:
            await self.fetch_kind("progress")
        return ok

    def download_pdf(self, report: Report) -> None:
        self._spawn(self._download(f"{report.kind}.pdf", self.api.download_report_pdf, report.kind, report.id))
