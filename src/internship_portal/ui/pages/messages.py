"""Chat with supervised students."""

from __future__ import annotations

import mimetypes
from typing import Any, Dict, List

import solara

from internship_portal.models.portal import ChatMessage, SupervisedStudent
from internship_portal.services.api import Upload
from internship_portal.state import MessagesController, PortalController
from internship_portal.state.messages import PRIORITIES, PROGRESS_MODAL, RESOURCE
from internship_portal.ui.components.cards import DownloadReady, EmptyState, ListStatus
from internship_portal.ui.components.modal import StackedModal


def uploads_from_files(files: List[Dict[str, Any]]) -> List[Upload]:
    """Convert the file dicts handed over by the drop zone."""

    uploads = []
    for info in files:
        name = info["name"]
        content = info.get("data")
        if content is None:
            content = info["file_obj"].read()
        content_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
        uploads.append(Upload(filename=name, content=content, content_type=content_type))
    return uploads


@solara.component
def StudentRow(messages: MessagesController, student: SupervisedStudent, active: bool) -> None:
    unread = messages.unread_for(student)
    with solara.Row(style={"alignItems": "center", "justifyContent": "space-between"}):
        solara.Button(
            student.name or student.email or "Student",
            text=not active,
            color="primary" if active else None,
            on_click=lambda: messages.select_student(student),
            style={"flex": "1 1 auto", "justifyContent": "flex-start"},
        )
        if unread:
            solara.Text(str(unread), classes=["ip-badge"])


@solara.component
def MessageBubble(message: ChatMessage) -> None:
    classes = ["ip-chat__message", f"ip-chat__message--{message.sender_type}"]
    if message.message_type == "progress_update":
        classes.append("ip-chat__message--progress")
    with solara.Column(classes=classes, style={"gap": "0.25rem"}):
        if message.progress_title:
            solara.Text(f"{message.progress_title} ({message.progress_priority or 'Normal'})", classes=["ip-card__title"])
        if message.message:
            solara.Text(message.message)
        for attachment in message.attachments:
            solara.Text(f"Attachment: {attachment.filename}", classes=["ip-meta"])
        if message.timestamp is not None:
            solara.Text(message.timestamp.strftime("%b %d, %H:%M"), classes=["ip-meta"])


@solara.component
def Composer(messages: MessagesController) -> None:
    attachments = messages.attachments.value
    sending = messages.is_pending("send")
    solara.InputTextArea(
        "Type your message",
        value=messages.draft.value,
        on_value=messages.set_draft,
        continuous_update=True,
        rows=2,
    )
    for index, upload in enumerate(attachments):
        with solara.Row(style={"alignItems": "center", "gap": "0.25rem"}):
            solara.Text(upload.filename, classes=["ip-meta"])
            solara.Button(icon_name="mdi-close", icon=True, small=True, on_click=lambda index=index: messages.remove_attachment(index))
    solara.FileDropMultiple(
        label="Drop attachments here",
        on_file=lambda files: messages.add_attachments(uploads_from_files(files)),
        lazy=False,
    )
    with solara.Row(style={"gap": "0.5rem", "justifyContent": "flex-end"}):
        solara.Button("Progress update", text=True, on_click=messages.open_progress_update)
        if messages.settings.chat_export:
            solara.Button("Export PDF", text=True, icon_name="mdi-file-pdf-box", on_click=messages.export_chat)
        solara.Button(
            "Sending..." if sending else "Send",
            color="primary",
            icon_name="mdi-send",
            disabled=sending or not messages.can_send,
            on_click=messages.send,
        )


@solara.component
def ProgressUpdateForm(messages: MessagesController) -> None:
    update = messages.progress.value
    sending = messages.is_pending("progress")
    solara.InputText(
        "Title",
        value=update.title,
        on_value=lambda value: messages.update_progress(title=value),
        continuous_update=True,
    )
    solara.InputTextArea(
        "Description",
        value=update.description,
        on_value=lambda value: messages.update_progress(description=value),
        continuous_update=True,
        rows=4,
    )
    solara.Select(
        "Priority",
        value=update.priority,
        values=list(PRIORITIES),
        on_value=lambda value: messages.update_progress(priority=value),
    )
    with solara.Row(classes=["ip-modal__footer"]):
        solara.Button("Cancel", text=True, on_click=lambda: messages.close_modal(PROGRESS_MODAL))
        solara.Button(
            "Sending..." if sending else "Send update",
            color="primary",
            disabled=sending or not messages.progress_ready,
            on_click=messages.send_progress_update,
        )


@solara.component
def View(controller: PortalController) -> None:
    messages = controller.messages

    def mount():
        messages.load()
        messages.start_polling()
        return messages.dispose

    solara.use_effect(mount, [messages])

    unread_total = messages.unread_total
    solara.use_effect(lambda: controller.set_unread_total(unread_total), [unread_total])

    students = messages.visible()
    active = messages.active_student.value
    history = messages.history.value

    with solara.Row(classes=["ip-chat"]):
        with solara.Column(classes=["ip-chat__students"]):
            solara.InputText(
                "Search students",
                value=messages.filters[RESOURCE].value.search_term,
                on_value=lambda term: messages.set_search(RESOURCE, term),
                continuous_update=True,
            )
            ListStatus(messages.lists[RESOURCE].value, "No supervised students yet.", len(students))
            for student in students:
                StudentRow(messages, student, active is not None and active.id == student.id).key(f"student-{student.id}")
        with solara.Column(style={"flex": "1 1 auto", "gap": "0.75rem"}):
            if active is None:
                EmptyState("Select a student to start chatting.")
            else:
                solara.Text(active.name or active.email, classes=["ip-title"])
                if active.company_name:
                    solara.Text(active.company_name, classes=["ip-meta"])
                if messages.history_loading.value:
                    solara.ProgressLinear(True)
                with solara.Column(classes=["ip-chat__thread"]):
                    if history is not None and not history.messages:
                        EmptyState("No messages yet.")
                    for message in history.messages if history is not None else ():
                        MessageBubble(message).key(f"message-{message.id}")
                Composer(messages)
                DownloadReady(messages.download.value, messages.clear_download)

    with StackedModal(
        messages.modals,
        PROGRESS_MODAL,
        on_close=lambda: messages.close_modal(PROGRESS_MODAL),
        scroll_lock=controller.scroll_lock,
    ):
        if active is not None:
            ProgressUpdateForm(messages)
