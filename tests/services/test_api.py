import json

import httpx
import pytest

from internship_portal.models import MisconductReport, ProgressUpdate, RejectionFeedback
from internship_portal.services.api import (
    ApiError,
    AuthenticationError,
    PortalClient,
    Upload,
    filename_from_disposition,
)


def make_client(handler, token="token-1"):
    session = httpx.Client(transport=httpx.MockTransport(handler))
    return PortalClient("http://portal.test/api/", token=token, session=session)


def envelope(data=None, **extra):
    return httpx.Response(200, json={"success": True, "data": data, **extra})


def test_requests_carry_bearer_token_and_unwrap_reports():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return envelope(
            {
                "reports": [
                    {
                        "_id": "r1",
                        "studentName": "Ayesha",
                        "companyName": "Acme",
                        "issueType": "Absence",
                        "status": "Pending",
                        "incidentDate": "2024-03-01T09:00:00Z",
                    }
                ]
            }
        )

    client = make_client(handler)
    reports = client.list_reports("misconduct")

    assert seen[0].url == httpx.URL("http://portal.test/api/misconduct-reports/supervisor")
    assert seen[0].headers["Authorization"] == "Bearer token-1"
    assert len(reports) == 1
    report = reports[0]
    assert isinstance(report, MisconductReport)
    assert report.kind == "misconduct"
    assert report.issue_type == "Absence"
    assert report.incident_date.year == 2024


def test_supervisor_applications_include_stats():
    def handler(request):
        return envelope(
            [{"_id": "a1", "studentId": {"name": "Bilal"}, "studentProfile": {"department": "CS", "cgpa": "3.4"}}],
            stats={"total": 1, "pending": 1},
        )

    applications, stats = make_client(handler).list_supervisor_applications()
    assert applications[0].student_name == "Bilal"
    assert applications[0].cgpa == pytest.approx(3.4)
    assert stats.total == 1 and stats.pending == 1


def test_expired_token_raises_authentication_error():
    def handler(request):
        return httpx.Response(401, json={"success": False, "message": "jwt expired"})

    with pytest.raises(AuthenticationError) as info:
        make_client(handler).get_dashboard_stats()
    assert info.value.status_code == 401


def test_plain_401_is_a_regular_api_error():
    def handler(request):
        return httpx.Response(401, json={"success": False, "message": "Not your student"})

    with pytest.raises(ApiError) as info:
        make_client(handler).get_dashboard_stats()
    assert not isinstance(info.value, AuthenticationError)
    assert info.value.message == "Not your student"


def test_non_json_bodies_are_reported():
    def ok_html(request):
        return httpx.Response(200, text="<html>oops</html>")

    def broken(request):
        return httpx.Response(502, text="Bad gateway")

    with pytest.raises(ApiError, match="Invalid response format"):
        make_client(ok_html).list_supervised_students()
    with pytest.raises(ApiError, match=r"Server error \(502\)"):
        make_client(broken).list_supervised_students()


def test_success_flag_false_is_an_error():
    def handler(request):
        return httpx.Response(200, json={"success": False, "message": "Report already closed"})

    with pytest.raises(ApiError, match="Report already closed"):
        make_client(handler).update_misconduct_status("r1", "Resolved", "done")


def test_network_failures_become_api_errors():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ApiError, match="Network error"):
        make_client(handler).get_unread_counts()


def test_mutation_payloads():
    bodies = {}

    def handler(request):
        bodies[(request.method, request.url.path)] = json.loads(request.content or b"{}")
        return envelope({})

    client = make_client(handler)
    client.update_misconduct_status("r1", "Warning Issued", "Second absence")
    client.review_application("a1", "rejected", "Missing CV")
    client.reject_with_feedback("a2", RejectionFeedback(reason="CV", details="Outdated", fields_to_edit=("cvUrl",)))
    client.add_internship_feedback("i1", "Solid work", "A")
    client.add_weekly_feedback("w1", "Keep going", 4)

    assert bodies[("PATCH", "/api/misconduct-reports/r1/status")] == {
        "status": "Warning Issued",
        "supervisorComments": "Second absence",
    }
    assert bodies[("PUT", "/api/applications/a1/supervisor-review")] == {"status": "rejected", "rejectionNote": "Missing CV"}
    assert bodies[("PATCH", "/api/applications/a2/supervisor/reject")]["fieldsToEdit"] == ["cvUrl"]
    assert bodies[("PUT", "/api/internship-reports/i1/feedback")] == {"feedback": "Solid work", "grade": "A"}
    assert bodies[("PUT", "/api/weekly-reports/supervisor/reports/w1/feedback")] == {"feedback": "Keep going", "rating": 4}


def test_company_listing_drops_empty_filters():
    seen = []

    def handler(request):
        seen.append(request)
        return envelope({"companies": [{"_id": "c1", "companyName": "Acme"}], "currentPage": 2, "totalPages": 5})

    page = make_client(handler).list_companies(
        page=2,
        limit=12,
        search="ac",
        filters={"industry": "", "location": "Lahore", "hasActiveJobs": True, "companySize": None},
    )
    params = seen[0].url.params
    assert params["page"] == "2"
    assert params["location"] == "Lahore"
    assert params["hasActiveJobs"] == "true"
    assert "industry" not in params
    assert "companySize" not in params
    assert page.current_page == 2 and page.total_pages == 5
    assert page.companies[0].name == "Acme"


def test_download_uses_content_disposition_filename():
    def handler(request):
        return httpx.Response(
            200,
            content=b"%PDF-1.4",
            headers={"content-type": "application/pdf", "content-disposition": 'attachment; filename="chat-ayesha.pdf"'},
        )

    downloaded = make_client(handler).export_chat_pdf("s1")
    assert downloaded.filename == "chat-ayesha.pdf"
    assert downloaded.content == b"%PDF-1.4"
    assert downloaded.content_type == "application/pdf"
    assert filename_from_disposition(None, "fallback.pdf") == "fallback.pdf"


def test_download_errors_reuse_the_json_message():
    def handler(request):
        return httpx.Response(404, json={"success": False, "message": "File not found"})

    with pytest.raises(ApiError, match="File not found"):
        make_client(handler).download_student_file("a1", "cv", "cv.pdf")


def test_message_with_files_is_multipart_and_checks_extensions():
    seen = []

    def handler(request):
        seen.append(request)
        return envelope({"_id": "chat-1", "messages": [{"_id": "m1", "senderType": "supervisor", "message": "See attached"}]})

    client = make_client(handler)
    history = client.send_message_with_files("s1", "See attached", [Upload("notes.pdf", b"%PDF", "application/pdf")])

    body = seen[0].content
    assert seen[0].headers["content-type"].startswith("multipart/form-data")
    assert b'name="message"' in body
    assert b'name="attachments"; filename="notes.pdf"' in body
    assert history.messages[0].message == "See attached"

    with pytest.raises(ApiError, match="Unsupported attachment type"):
        client.send_message_with_files("s1", "", [Upload("virus.exe", b"MZ")])
    assert len(seen) == 1


def test_progress_update_and_preview_url():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return envelope({"_id": "chat-1", "messages": []})

    client = make_client(handler)
    client.send_progress_update("s1", ProgressUpdate(title="Week 3", description="Finished API", priority="High"))
    assert seen[0] == {"title": "Week 3", "description": "Finished API", "priority": "High"}
    assert client.student_file_preview_url("a1", "cv", "my cv.pdf") == (
        "http://portal.test/api/applications/a1/preview/cv/my%20cv.pdf"
    )
