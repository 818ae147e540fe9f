"""Student documents tab: joining, internship and weekly reports."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import solara

from internship_portal.models.listing import ListState
from internship_portal.models.portal import InternshipReport, JoiningReport, WeeklyReport
from internship_portal.state.base import ListController, PortalServices
from internship_portal.state.listing import filter_items, patch_item, sort_items

DOCUMENT_KINDS = ("joining", "internship", "weekly")
GRADES = ("A", "B", "C", "D", "F")

DETAIL_MODAL = "documents.detail"
VERIFY_MODAL = "documents.verify"
FEEDBACK_MODAL = "documents.feedback"


def document_search_fields(document: Any) -> tuple:
    fields = (document.student_name, document.company_name, document.status)
    if isinstance(document, WeeklyReport):
        return fields + (f"week {document.week_number}",)
    return fields


class DocumentsController(ListController):
    name = "documents"

    def __init__(self, services: PortalServices) -> None:
        super().__init__(services)
        for kind in DOCUMENT_KINDS:
            self._register(kind)
        self.active_kind: solara.Reactive[str] = solara.reactive("joining")
        self.grade: solara.Reactive[Optional[str]] = solara.reactive(None)

    async def refresh(self) -> None:
        await asyncio.gather(
            self._fetch("joining", self.api.list_joining_reports, error_message="Failed to fetch joining reports"),
            self._fetch("internship", self.api.list_internship_reports, error_message="Failed to fetch internship reports"),
            self._fetch("weekly", self.api.list_weekly_reports, error_message="Failed to fetch weekly reports"),
        )

    def set_active_kind(self, kind: str) -> None:
        self.active_kind.set(kind)

    def visible(self, kind: str) -> List[Any]:
        filters = self.filters[kind].value
        items = filter_items(self.items(kind), filters.search_term, document_search_fields)
        if filters.status != "all":
            items = [item for item in items if item.status.casefold() == filters.status.casefold()]
        return sort_items(
            items,
            filters.sort_key,
            date=lambda item: item.sort_date,
            name=lambda item: item.student_name,
        )

    def pending_counts(self) -> Dict[str, int]:
        return {
            "joining": sum(1 for item in self.items("joining") if not item.verified),
            "internship": sum(1 for item in self.items("internship") if not item.supervisor_feedback),
            "weekly": sum(1 for item in self.items("weekly") if not item.supervisor_feedback),
        }

    # ------------------------------------------------------------------ detail and actions
    def select(self, document: Any) -> None:
        self._open(DETAIL_MODAL, document, title=f"{document.student_name or 'Student'} Report", size="lg")

    def open_verify(self, report: Optional[JoiningReport] = None) -> None:
        target = report or self.selection.value.item
        if isinstance(target, JoiningReport) and not target.verified:
            self._open(VERIFY_MODAL, target, action="verify", title="Verify Joining Report", size="sm")

    def open_feedback(self, report: Any = None) -> None:
        target = report or self.selection.value.item
        if isinstance(target, (InternshipReport, WeeklyReport)):
            self.grade.set(None)
            self._open(FEEDBACK_MODAL, target, action="feedback", title="Add Feedback")

    def set_grade(self, grade: Optional[str]) -> None:
        self.grade.set(grade if grade in GRADES else None)

    def verify(self) -> None:
        self._spawn(self._verify())

    async def _verify(self) -> bool:
        report = self.selection.value.item
        if not isinstance(report, JoiningReport):
            return False

        def apply(_result) -> None:
            self._patch("joining", report.id, status="Verified", verified=True)
            self._finish_action()
            self._refresh_dashboard()

        return await self._mutate(
            f"verify.{report.id}",
            self.api.verify_joining_report,
            report.id,
            error_message="Failed to verify joining report",
            on_success=apply,
            success_message="Joining report verified",
        )

    def submit_feedback(self) -> None:
        self._spawn(self._submit_feedback())

    async def _submit_feedback(self) -> bool:
        selection = self.selection.value
        report = selection.item
        if not isinstance(report, (InternshipReport, WeeklyReport)):
            return False
        if not self._require(selection.feedback, "Feedback is required"):
            return False
        feedback = selection.feedback.strip()

        if isinstance(report, InternshipReport):
            grade = self.grade.value

            def apply(_result) -> None:
                self._patch("internship", report.id, supervisor_feedback=feedback, supervisor_grade=grade or "")
                self._finish_action()
                self._refresh_dashboard()

            return await self._mutate(
                f"feedback.{report.id}",
                self.api.add_internship_feedback,
                report.id,
                feedback,
                grade,
                error_message="Failed to add feedback",
                on_success=apply,
                success_message="Feedback added successfully",
            )

        def apply_weekly(_result) -> None:
            self._patch("weekly", report.id, supervisor_feedback=feedback, status="reviewed")
            self._finish_action()
            self._refresh_dashboard()

        return await self._mutate(
            f"feedback.{report.id}",
            self.api.add_weekly_feedback,
            report.id,
            feedback,
            selection.rating,
            error_message="Failed to add feedback",
            on_success=apply_weekly,
            success_message="Feedback added successfully",
        )

    def _patch(self, kind: str, item_id: str, **changes: Any) -> None:
        target = self.lists[kind]
        target.set(ListState(items=patch_item(target.value.items, item_id, **changes), loaded=True))

    def download_pdf(self, kind: str, document: Any) -> None:
        self._spawn(self._download(f"{kind}.pdf", self.api.download_document_pdf, kind, document.id))
