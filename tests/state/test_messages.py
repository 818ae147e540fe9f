import threading
import time

import pytest

from internship_portal.models import ChatHistory, ChatMessage, SupervisedStudent
from internship_portal.services.api import Upload
from internship_portal.state.messages import PROGRESS_MODAL, MessagesController

AYESHA = SupervisedStudent(id="s1", name="Ayesha", company_name="Acme")
BILAL = SupervisedStudent(id="s2", name="Bilal")


def history(student_id, *texts):
    return ChatHistory(
        id=f"chat-{student_id}",
        student_id=student_id,
        messages=tuple(ChatMessage(id=f"m{i}", sender_type="student", message=text) for i, text in enumerate(texts)),
    )


@pytest.fixture
def messages(api, services):
    api.responses["list_supervised_students"] = (AYESHA, BILAL)
    api.responses["get_unread_counts"] = {"s1": 2, "s2": 1}
    api.responses["get_chat_history"] = lambda student_id: history(student_id, "hello")
    api.responses["send_message"] = lambda student_id, text: history(student_id, "hello", text)
    api.responses["send_message_with_files"] = lambda student_id, text, uploads: history(student_id, "file")
    api.responses["send_progress_update"] = lambda student_id, update: history(student_id, update.title)
    controller = MessagesController(services)
    controller.load()
    yield controller
    controller.dispose()


def test_load_students_and_unread(messages):
    assert [s.id for s in messages.visible()] == ["s1", "s2"]
    assert messages.unread_for(AYESHA) == 2
    assert messages.unread_total == 3


def test_selecting_student_marks_read_after_history(api, messages):
    messages.select_student(AYESHA)

    names = api.names()
    assert names.index("get_chat_history") < names.index("mark_messages_read")
    assert messages.history.value.messages[0].message == "hello"
    assert messages.unread_for(AYESHA) == 0
    assert messages.unread_for(BILAL) == 1


def test_history_failure_does_not_mark_read(api, services, messages):
    api.failures["get_chat_history"] = RuntimeError("timeout")
    messages.select_student(AYESHA)

    assert "mark_messages_read" not in api.names()
    assert messages.unread_for(AYESHA) == 2
    assert "Failed to load chat history" in services.notifier.messages


def test_send_text_then_attachments(api, messages):
    messages.select_student(AYESHA)
    assert not messages.can_send

    messages.set_draft("  Please upload the report ")
    messages.send()
    assert ("send_message", ("s1", "Please upload the report")) in api.calls
    assert messages.draft.value == ""

    rejected = messages.add_attachments([Upload("plan.docx", b"doc"), Upload("run.sh", b"#!")])
    assert rejected == ["run.sh"]
    assert [u.filename for u in messages.attachments.value] == ["plan.docx"]
    assert messages.can_send
    messages.send()
    assert "send_message_with_files" in api.names()
    assert messages.attachments.value == ()


def test_remove_attachment(messages):
    messages.add_attachments([Upload("a.pdf", b"1"), Upload("b.pdf", b"2")])
    messages.remove_attachment(0)
    assert [u.filename for u in messages.attachments.value] == ["b.pdf"]


def test_progress_update_requires_title_and_description(api, services, messages):
    messages.select_student(AYESHA)
    messages.open_progress_update()
    assert messages.modals.is_open(PROGRESS_MODAL)

    messages.update_progress(title="Midterm check-in", priority="Urgent")
    messages.send_progress_update()
    assert "send_progress_update" not in api.names()
    assert "Title and description are required" in services.notifier.messages

    messages.update_progress(description="Please submit the weekly reports", priority="Whenever")
    assert messages.progress.value.priority == "Urgent"
    messages.send_progress_update()
    assert "send_progress_update" in api.names()
    assert not messages.modals.is_open(PROGRESS_MODAL)


def test_unread_poll_failures_are_silent(api, services, messages):
    before = services.notifier.messages
    api.failures["get_unread_counts"] = RuntimeError("offline")
    messages.poll_unread()
    assert services.notifier.messages == before
    assert messages.unread_total == 3


def test_polling_stops_on_dispose(api, wait_for, messages):
    messages.start_polling()
    assert wait_for(lambda: api.names().count("get_unread_counts") >= 3)

    messages.dispose()
    count = api.names().count("get_unread_counts")
    time.sleep(0.1)
    assert api.names().count("get_unread_counts") == count


def test_dispose_does_not_wait_for_a_slow_poll(api, services, messages):
    in_flight = threading.Event()

    def slow_counts():
        in_flight.set()
        time.sleep(0.5)
        return {"s1": 9}

    before = services.notifier.messages
    api.responses["get_unread_counts"] = slow_counts
    messages.start_polling()
    assert in_flight.wait(2.0)

    began = time.monotonic()
    messages.dispose()
    assert time.monotonic() - began < 0.3

    time.sleep(0.6)
    assert messages.unread_for(AYESHA) == 2
    assert services.notifier.messages == before
