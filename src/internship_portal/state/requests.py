"""Supervision requests tab: student job applications awaiting review."""

from __future__ import annotations

from typing import List, Optional, Sequence

import solara

from internship_portal.models.listing import ALL_SORT_KEYS
from internship_portal.models.portal import Application, ApplicationStats, RejectionFeedback
from internship_portal.services.api import AuthenticationError
from internship_portal.services.tasks import TaskCancelled
from internship_portal.state.base import ListController, PortalServices, update_reactive
from internship_portal.state.listing import filter_items, is_justified, sort_items

RESOURCE = "applications"
STATUS_FILTERS = ("all", "pending", "approved", "rejected", "pending_company", "hired")
EDITABLE_FIELDS = ("coverLetter", "cvUrl", "certificates", "answers")
SORT_KEYS = ALL_SORT_KEYS

DETAIL_MODAL = "requests.detail"
REJECT_MODAL = "requests.reject"
FEEDBACK_MODAL = "requests.feedback"


def application_search_fields(application: Application) -> tuple:
    return (
        application.student_name,
        application.company_name,
        application.job_title,
        application.roll_number,
        application.department,
    )


def matches_status(application: Application, status: str) -> bool:
    if status == "all":
        return True
    if status in ("pending", "approved", "rejected"):
        return application.supervisor_status == status
    if status == "pending_company":
        return application.overall_status == "pending_company"
    if status == "hired":
        return application.application_status == "hired"
    return False


class RequestsController(ListController):
    name = "requests"

    def __init__(self, services: PortalServices) -> None:
        super().__init__(services)
        self._register(RESOURCE)
        self.stats: solara.Reactive[ApplicationStats] = solara.reactive(ApplicationStats())
        self.rejection: solara.Reactive[RejectionFeedback] = solara.reactive(RejectionFeedback())

    # ------------------------------------------------------------------ fetch
    async def refresh(self) -> None:
        token = self.scope.token()
        target = self.lists[RESOURCE]
        update_reactive(target, lambda prev: {"loading": True, "error": None})
        try:
            applications, stats = await self.tasks.run(
                "requests.applications.fetch", self.api.list_supervisor_applications, token=token
            )
        except TaskCancelled:
            return
        except AuthenticationError:
            update_reactive(target, lambda prev: {"loading": False})
            self._session_expired()
            return
        except Exception as error:  # noqa: BLE001 - keep last known good items
            self.logger.error("requests.applications.fetch.failed", error=str(error))
            self.notifier.error("Failed to load applications")
            update_reactive(target, lambda prev: {"loading": False, "error": str(error), "loaded": True})
            return
        update_reactive(target, lambda prev: {"items": tuple(applications), "loading": False, "loaded": True})
        self.stats.set(stats or ApplicationStats.from_applications(applications))

    # ------------------------------------------------------------------ derived views
    def visible(self) -> List[Application]:
        filters = self.filters[RESOURCE].value
        items = filter_items(self.items(RESOURCE), filters.search_term, application_search_fields)
        items = [app for app in items if matches_status(app, filters.status)]
        if filters.department != "all":
            department = filters.department.casefold()
            items = [app for app in items if app.department.casefold() == department]
        return sort_items(
            items,
            filters.sort_key,
            date=lambda app: app.sort_date,
            name=lambda app: app.student_name,
            rating=lambda app: app.cgpa,
        )

    def departments(self) -> List[str]:
        return sorted({app.department for app in self.items(RESOURCE) if app.department and app.department != "Unknown"})

    # ------------------------------------------------------------------ detail and actions
    def select(self, application: Application) -> None:
        self._open(DETAIL_MODAL, application, title="Application Details", size="lg")

    def open_reject(self, application: Optional[Application] = None) -> None:
        target = application or self.selection.value.item
        if isinstance(target, Application):
            self._open(REJECT_MODAL, target, action="reject", title="Reject Application")

    def open_feedback(self, application: Optional[Application] = None) -> None:
        target = application or self.selection.value.item
        if isinstance(target, Application):
            self.rejection.set(RejectionFeedback())
            self._open(FEEDBACK_MODAL, target, action="feedback", title="Request Changes", size="lg")

    def update_rejection(
        self,
        *,
        reason: Optional[str] = None,
        details: Optional[str] = None,
        requested_fixes: Optional[Sequence[str]] = None,
        fields_to_edit: Optional[Sequence[str]] = None,
    ) -> None:
        def updater(prev: RejectionFeedback):
            changes = {}
            if reason is not None:
                changes["reason"] = reason
            if details is not None:
                changes["details"] = details
            if requested_fixes is not None:
                changes["requested_fixes"] = tuple(fix.strip() for fix in requested_fixes if fix.strip())
            if fields_to_edit is not None:
                changes["fields_to_edit"] = tuple(field for field in fields_to_edit if field in EDITABLE_FIELDS)
            return changes

        update_reactive(self.rejection, updater)

    def toggle_field_to_edit(self, field: str) -> None:
        current = self.rejection.value.fields_to_edit
        fields = tuple(f for f in current if f != field) if field in current else current + (field,)
        self.update_rejection(fields_to_edit=fields)

    @property
    def feedback_ready(self) -> bool:
        feedback = self.rejection.value
        return is_justified(feedback.reason) and is_justified(feedback.details)

    def approve(self, application: Application) -> None:
        self._spawn(self._approve(application))

    async def _approve(self, application: Application) -> bool:
        ok = await self._mutate(
            f"approve.{application.id}",
            self.api.approve_application,
            application.id,
            error_message="Failed to approve application",
            on_success=lambda _result: self._after_review(),
            success_message="Application approved successfully",
        )
        if ok:
            await self.refresh()
        return ok

    def submit_reject(self) -> None:
        self._spawn(self._submit_reject())

    async def _submit_reject(self) -> bool:
        selection = self.selection.value
        application = selection.item
        if not isinstance(application, Application):
            return False
        if not self._require(selection.comments, "Please provide a reason for rejection"):
            return False
        ok = await self._mutate(
            f"reject.{application.id}",
            self.api.review_application,
            application.id,
            "rejected",
            selection.comments.strip(),
            error_message="Failed to reject application",
            on_success=lambda _result: self._after_review(),
            success_message="Application rejected successfully!",
        )
        if ok:
            await self.refresh()
        return ok

    def submit_feedback(self) -> None:
        self._spawn(self._submit_feedback())

    async def _submit_feedback(self) -> bool:
        application = self.selection.value.item
        if not isinstance(application, Application):
            return False
        if not self.feedback_ready:
            self.notifier.error("Please provide both reason and details for rejection")
            return False
        ok = await self._mutate(
            f"feedback.{application.id}",
            self.api.reject_with_feedback,
            application.id,
            self.rejection.value,
            error_message="Failed to reject application",
            on_success=lambda _result: self._after_review(),
            success_message="Application rejected with feedback",
        )
        if ok:
            await self.refresh()
        return ok

    def _after_review(self) -> None:
        self.rejection.set(RejectionFeedback())
        self._finish_action()
        self._refresh_dashboard()

    # ------------------------------------------------------------------ student files
    def download_file(self, application: Application, file_type: str) -> None:
        file_name = application.cv_file if file_type == "cv" else application.certificate_file
        if not file_name:
            self.notifier.error("File not available")
            return
        self._spawn(
            self._download(f"download.{file_type}", self.api.download_student_file, application.id, file_type, file_name)
        )

    def preview_url(self, application: Application, file_type: str) -> Optional[str]:
        file_name = application.cv_file if file_type == "cv" else application.certificate_file
        if not file_name:
            return None
        return self.api.student_file_preview_url(application.id, file_type, file_name)
