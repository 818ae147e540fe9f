"""Messages tab: chat threads between the supervisor and supervised students."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Sequence, Tuple

import solara

from internship_portal.models.portal import ChatHistory, ProgressUpdate, SupervisedStudent
from internship_portal.services.api import ALLOWED_ATTACHMENT_EXTENSIONS, AuthenticationError, Upload
from internship_portal.services.tasks import Poller, TaskCancelled
from internship_portal.state.base import ListController, PortalServices, update_reactive
from internship_portal.state.listing import filter_items, is_justified

RESOURCE = "students"
PRIORITIES = ("Low", "Normal", "High", "Urgent")
PROGRESS_MODAL = "messages.progress"


def student_search_fields(student: SupervisedStudent) -> tuple:
    return (student.name, student.email, student.roll_number, student.company_name)


class MessagesController(ListController):
    """Chat with supervised students plus the polled unread badge counts."""

    name = "messages"

    def __init__(self, services: PortalServices) -> None:
        super().__init__(services)
        self._register(RESOURCE)
        self.unread: solara.Reactive[Dict[str, int]] = solara.reactive({})
        self.active_student: solara.Reactive[Optional[SupervisedStudent]] = solara.reactive(None)
        self.history: solara.Reactive[Optional[ChatHistory]] = solara.reactive(None)
        self.history_loading: solara.Reactive[bool] = solara.reactive(False)
        self.draft: solara.Reactive[str] = solara.reactive("")
        self.attachments: solara.Reactive[Tuple[Upload, ...]] = solara.reactive(())
        self.progress: solara.Reactive[ProgressUpdate] = solara.reactive(ProgressUpdate())
        self._poller: Optional[Poller] = None

    # ------------------------------------------------------------------ fetch
    async def refresh(self) -> None:
        await asyncio.gather(
            self._fetch(RESOURCE, self.api.list_supervised_students, error_message="Failed to load supervised students"),
            self.fetch_unread(),
        )

    async def fetch_unread(self) -> None:
        token = self.scope.token()
        try:
            counts = await self.tasks.run("messages.unread.fetch", self.api.get_unread_counts, token=token)
        except TaskCancelled:
            return
        except AuthenticationError:
            self._session_expired()
            return
        except Exception as error:  # noqa: BLE001 - badge counts are best effort
            self.logger.warning("messages.unread.fetch.failed", error=str(error))
            return
        self.unread.set(dict(counts))

    def unread_for(self, student: SupervisedStudent) -> int:
        return self.unread.value.get(student.id, 0)

    @property
    def unread_total(self) -> int:
        return sum(self.unread.value.values())

    # ------------------------------------------------------------------ polling
    def start_polling(self) -> Poller:
        if self._poller is None or not self._poller.running:
            self._poller = Poller(
                self.settings.unread_poll_seconds,
                self.poll_unread,
                logger=self.logger,
                name="messages.unread",
            ).start()
        return self._poller

    def stop_polling(self) -> None:
        """Stop ticking without waiting for a request already in flight."""

        poller, self._poller = self._poller, None
        if poller is not None:
            poller.stop(wait=False)

    def poll_unread(self) -> None:
        if self.disposed:
            return
        self._spawn(self.fetch_unread())

    def dispose(self) -> None:
        # Cancel first so a tick still in flight is discarded.
        super().dispose()
        self.stop_polling()

    # ------------------------------------------------------------------ students and history
    def visible(self) -> List[SupervisedStudent]:
        return filter_items(self.items(RESOURCE), self.filters[RESOURCE].value.search_term, student_search_fields)

    def select_student(self, student: SupervisedStudent) -> None:
        self._spawn(self._select_student(student))

    async def _select_student(self, student: SupervisedStudent) -> bool:
        self.active_student.set(student)
        self.history.set(None)
        self.draft.set("")
        self.attachments.set(())
        self.history_loading.set(True)
        token = self.scope.token()
        try:
            history = await self.tasks.run(
                "messages.history.fetch", self.api.get_chat_history, student.id, token=token, student_id=student.id
            )
            # Marking read waits for the history so unseen messages are never flagged.
            await self.tasks.run(
                "messages.mark_read", self.api.mark_messages_read, student.id, token=token, student_id=student.id
            )
        except TaskCancelled:
            return False
        except AuthenticationError:
            self.history_loading.set(False)
            self._session_expired()
            return False
        except Exception as error:  # noqa: BLE001 - surfaced as a toast
            self.logger.error("messages.history.fetch.failed", student_id=student.id, error=str(error))
            self.notifier.error("Failed to load chat history")
            self.history_loading.set(False)
            return False
        current = self.active_student.value
        if current is None or current.id != student.id:
            return False
        self.history.set(history)
        self.history_loading.set(False)
        counts = dict(self.unread.value)
        counts[student.id] = 0
        self.unread.set(counts)
        return True

    # ------------------------------------------------------------------ composing
    def set_draft(self, text: str) -> None:
        self.draft.set(text)

    def add_attachments(self, uploads: Sequence[Upload]) -> List[str]:
        """Queue ``uploads``; returns the names rejected for their extension."""

        accepted = tuple(upload for upload in uploads if upload.allowed)
        rejected = [upload.filename for upload in uploads if not upload.allowed]
        if rejected:
            allowed = " ".join(sorted(ALLOWED_ATTACHMENT_EXTENSIONS))
            self.notifier.error(f"Unsupported file type: {', '.join(rejected)}. Allowed: {allowed}")
        if accepted:
            self.attachments.set(self.attachments.value + accepted)
        return rejected

    def remove_attachment(self, index: int) -> None:
        self.attachments.set(tuple(upload for i, upload in enumerate(self.attachments.value) if i != index))

    @property
    def can_send(self) -> bool:
        return self.active_student.value is not None and (is_justified(self.draft.value) or bool(self.attachments.value))

    def send(self) -> None:
        self._spawn(self._send())

    async def _send(self) -> bool:
        student = self.active_student.value
        if student is None or not self.can_send:
            return False
        text = self.draft.value.strip()
        uploads = self.attachments.value

        def apply(history: ChatHistory) -> None:
            self.history.set(history)
            self.draft.set("")
            self.attachments.set(())

        if uploads:
            ok = await self._mutate(
                "send",
                self.api.send_message_with_files,
                student.id,
                text,
                list(uploads),
                error_message="Failed to send message",
                on_success=apply,
            )
        else:
            ok = await self._mutate(
                "send",
                self.api.send_message,
                student.id,
                text,
                error_message="Failed to send message",
                on_success=apply,
            )
        if ok:
            await self.fetch_unread()
        return ok

    # ------------------------------------------------------------------ progress updates
    def open_progress_update(self) -> None:
        if self.active_student.value is None:
            return
        self.progress.set(ProgressUpdate())
        self.modals.open(PROGRESS_MODAL, title="Send Progress Update")

    def update_progress(
        self,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> None:
        def updater(prev: ProgressUpdate):
            changes = {}
            if title is not None:
                changes["title"] = title
            if description is not None:
                changes["description"] = description
            if priority is not None and priority in PRIORITIES:
                changes["priority"] = priority
            return changes

        update_reactive(self.progress, updater)

    @property
    def progress_ready(self) -> bool:
        update = self.progress.value
        return is_justified(update.title) and is_justified(update.description)

    def send_progress_update(self) -> None:
        self._spawn(self._send_progress_update())

    async def _send_progress_update(self) -> bool:
        student = self.active_student.value
        if student is None:
            return False
        if not self.progress_ready:
            self.notifier.error("Title and description are required")
            return False

        def apply(history: ChatHistory) -> None:
            self.history.set(history)
            self.progress.set(ProgressUpdate())
            self.modals.close(PROGRESS_MODAL)

        return await self._mutate(
            "progress",
            self.api.send_progress_update,
            student.id,
            self.progress.value,
            error_message="Failed to send progress update",
            on_success=apply,
            success_message="Progress update sent successfully",
        )

    def export_chat(self) -> None:
        student = self.active_student.value
        if student is None:
            return
        self._spawn(
            self._mutate(
                "export",
                self.api.export_chat_pdf,
                student.id,
                error_message="Failed to export chat",
                on_success=self.download.set,
                success_message="Chat exported successfully",
            )
        )
