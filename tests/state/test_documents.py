import pytest

from internship_portal.models import InternshipReport, JoiningReport, WeeklyReport
from internship_portal.state.documents import FEEDBACK_MODAL, VERIFY_MODAL, DocumentsController


@pytest.fixture
def documents(api, services):
    api.responses["list_joining_reports"] = (
        JoiningReport(id="j1", student_name="Ayesha"),
        JoiningReport(id="j2", student_name="Bilal", status="Verified", verified=True),
    )
    api.responses["list_internship_reports"] = (InternshipReport(id="i1", student_name="Chen"),)
    api.responses["list_weekly_reports"] = (
        WeeklyReport(id="w1", student_name="Dana", week_number=3),
        WeeklyReport(id="w2", student_name="Eli", week_number=4, supervisor_feedback="Nice"),
    )
    controller = DocumentsController(services)
    controller.load()
    return controller


def test_pending_counts(documents):
    assert documents.pending_counts() == {"joining": 1, "internship": 1, "weekly": 1}


def test_verify_joining_report(api, services, documents):
    documents.open_verify(documents.items("joining")[0])
    assert documents.modals.is_open(VERIFY_MODAL)
    documents.verify()

    assert ("verify_joining_report", ("j1",)) in api.calls
    report = documents.items("joining")[0]
    assert report.verified and report.status == "Verified"
    assert documents.modals.stack.value == ()
    assert "Joining report verified" in services.notifier.messages


def test_verified_report_cannot_be_reopened_for_verification(documents):
    documents.open_verify(documents.items("joining")[1])
    assert not documents.modals.is_open(VERIFY_MODAL)


def test_internship_feedback_with_grade(api, documents):
    documents.open_feedback(documents.items("internship")[0])
    documents.set_grade("B")
    documents.set_feedback("Well structured report")
    documents.submit_feedback()

    assert ("add_internship_feedback", ("i1", "Well structured report", "B")) in api.calls
    report = documents.items("internship")[0]
    assert report.supervisor_feedback == "Well structured report"
    assert report.supervisor_grade == "B"


def test_weekly_feedback_with_rating_marks_reviewed(api, services, documents):
    documents.open_feedback(documents.items("weekly")[0])
    assert documents.modals.is_open(FEEDBACK_MODAL)

    documents.submit_feedback()
    assert "add_weekly_feedback" not in api.names()
    assert "Feedback is required" in services.notifier.messages

    documents.set_feedback("Good week")
    documents.set_rating(4)
    documents.submit_feedback()

    assert ("add_weekly_feedback", ("w1", "Good week", 4)) in api.calls
    assert documents.items("weekly")[0].status == "reviewed"


def test_invalid_grade_is_ignored(documents):
    documents.set_grade("A+")
    assert documents.grade.value is None


def test_search_includes_week_number(documents):
    documents.set_search("weekly", "week 4")
    assert [d.id for d in documents.visible("weekly")] == ["w2"]
