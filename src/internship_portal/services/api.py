"""HTTP client for the portal REST backend."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx

from ..models import (
    Application,
    ApplicationStats,
    ChatHistory,
    Company,
    CompanyPage,
    DashboardStats,
    InternshipReport,
    Job,
    JoiningReport,
    ProgressUpdate,
    RejectionFeedback,
    Report,
    ReportKind,
    SupervisedStudent,
    WeeklyReport,
    parse_report,
)

ALLOWED_ATTACHMENT_EXTENSIONS = frozenset({".pdf", ".doc", ".docx", ".jpg", ".jpeg", ".png", ".txt"})
AUTH_EXPIRY_MARKERS = ("expired", "jwt", "invalid token", "tokenexpirederror")

_REPORT_PATHS: Dict[str, str] = {
    "misconduct": "misconduct-reports",
    "progress": "progress-reports",
    "appraisal": "internship-appraisals",
}
_DOCUMENT_PDF_PATHS: Dict[str, str] = {
    "joining": "joining-reports/{id}/pdf",
    "internship": "internship-reports/{id}/pdf",
    "weekly": "weekly-reports/reports/{id}/pdf",
}
_FILENAME_PATTERN = re.compile(r"filename\*?=(?:UTF-8'')?(?:\"([^\"]*)\"|([^;\n]*))", re.IGNORECASE)


class ApiError(Exception):
    """Raised when the backend rejects a request or cannot be reached."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class AuthenticationError(ApiError):
    """The session token was rejected as expired or invalid."""


@dataclass
class ApiResponse:
    success: bool
    data: Any = None
    message: Optional[str] = None
    stats: Optional[Dict[str, Any]] = None
    status_code: int = 200

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiResponse":
        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError):
            if response.is_success:
                raise ApiError("Invalid response format", status_code=response.status_code, payload=response.text)
            raise ApiError(
                f"Server error ({response.status_code}): {response.reason_phrase}",
                status_code=response.status_code,
                payload=response.text,
            )
        if not isinstance(payload, Mapping):
            payload = {"success": response.is_success, "data": payload}
        message = payload.get("message") or payload.get("error")
        if not response.is_success:
            _raise_for_failure(response.status_code, payload, message)
        if payload.get("success") is not True:
            raise ApiError(str(message or "Something went wrong"), status_code=response.status_code, payload=payload)
        stats = payload.get("stats")
        return cls(
            success=True,
            data=payload.get("data"),
            message=str(message) if message else None,
            stats=dict(stats) if isinstance(stats, Mapping) else None,
            status_code=response.status_code,
        )


def _raise_for_failure(status_code: int, payload: Mapping[str, Any], message: Any) -> None:
    text = str(message or "Something went wrong")
    if status_code == 401:
        lowered = " ".join(str(payload.get(key, "")) for key in ("message", "error")).lower()
        if any(marker in lowered for marker in AUTH_EXPIRY_MARKERS):
            raise AuthenticationError(text, status_code=status_code, payload=dict(payload))
    raise ApiError(text, status_code=status_code, payload=dict(payload))


@dataclass(frozen=True)
class DownloadedFile:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class Upload:
    """A file picked by the user, ready for a multipart request."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lower()

    @property
    def allowed(self) -> bool:
        return self.extension in ALLOWED_ATTACHMENT_EXTENSIONS


def filename_from_disposition(header: Optional[str], default: str) -> str:
    if not header:
        return default
    match = _FILENAME_PATTERN.search(header)
    if not match:
        return default
    value = (match.group(1) or match.group(2) or "").strip().strip("'\"")
    return value or default


def _items(data: Any, *keys: str) -> List[Mapping[str, Any]]:
    """Return the list of records in ``data``, unwrapping ``{key: [...]}`` shapes."""

    if isinstance(data, Mapping):
        for key in keys:
            value = data.get(key)
            if isinstance(value, list):
                data = value
                break
        else:
            return []
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, Mapping)]


@dataclass
class PortalClient:
    """Synchronous wrapper around :class:`httpx.Client` for the portal API.

    Every call returns typed models or raises :class:`ApiError`; callers run
    it through ``asyncio.to_thread`` so the UI loop never blocks.
    """

    base_url: str
    timeout: float = 30.0
    token: Optional[str] = None
    session: Optional[httpx.Client] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        if self.session is None:
            self.session = httpx.Client(timeout=self.timeout)

    # ------------------------------------------------------------------ transport
    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        assert self.session is not None
        try:
            return self.session.request(method, self.url(path), headers=self._headers(), **kwargs)
        except httpx.TimeoutException as error:
            raise ApiError("Request timed out") from error
        except httpx.HTTPError as error:
            raise ApiError(f"Network error: {error}") from error

    def request(self, method: str, path: str, **kwargs: Any) -> ApiResponse:
        return ApiResponse.from_response(self._send(method, path, **kwargs))

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self.request("POST", path, json=payload or {})

    def put(self, path: str, payload: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self.request("PUT", path, json=payload or {})

    def patch(self, path: str, payload: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self.request("PATCH", path, json=payload or {})

    def download(self, path: str, default_filename: str) -> DownloadedFile:
        response = self._send("GET", path)
        if not response.is_success:
            # Error bodies are JSON envelopes; reuse their message.
            ApiResponse.from_response(response)
        return DownloadedFile(
            filename=filename_from_disposition(response.headers.get("content-disposition"), default_filename),
            content=response.content,
            content_type=response.headers.get("content-type", "application/octet-stream"),
        )

    def close(self) -> None:
        if self.session is not None:
            self.session.close()

    # ------------------------------------------------------------------ applications
    def list_supervisor_applications(self) -> Tuple[Tuple[Application, ...], Optional[ApplicationStats]]:
        response = self.get("applications/supervisor")
        applications = tuple(Application.from_api(item) for item in _items(response.data, "applications"))
        stats = ApplicationStats.from_api(response.stats) if response.stats else None
        return applications, stats

    def list_my_applications(self) -> Tuple[Application, ...]:
        response = self.get("applications/my-applications")
        return tuple(Application.from_api(item) for item in _items(response.data, "applications"))

    def review_application(self, application_id: str, status: str, rejection_note: str = "") -> ApiResponse:
        payload: Dict[str, Any] = {"status": status}
        if status == "rejected" and rejection_note:
            payload["rejectionNote"] = rejection_note
        return self.put(f"applications/{application_id}/supervisor-review", payload)

    def approve_application(self, application_id: str) -> ApiResponse:
        return self.patch(f"applications/{application_id}/supervisor/approve")

    def reject_with_feedback(self, application_id: str, feedback: RejectionFeedback) -> ApiResponse:
        return self.patch(f"applications/{application_id}/supervisor/reject", feedback.to_api())

    def download_student_file(self, application_id: str, file_type: str, file_name: str) -> DownloadedFile:
        return self.download(
            f"applications/{application_id}/download/{file_type}/{quote(file_name)}",
            default_filename=file_name,
        )

    def student_file_preview_url(self, application_id: str, file_type: str, file_name: str) -> str:
        return self.url(f"applications/{application_id}/preview/{file_type}/{quote(file_name)}")

    # ------------------------------------------------------------------ company reports
    def list_reports(self, kind: ReportKind) -> Tuple[Report, ...]:
        response = self.get(f"{_REPORT_PATHS[kind]}/supervisor")
        return tuple(parse_report(kind, item) for item in _items(response.data, "reports", "appraisals"))

    def update_misconduct_status(self, report_id: str, status: str, supervisor_comments: str) -> ApiResponse:
        return self.patch(
            f"misconduct-reports/{report_id}/status",
            {"status": status, "supervisorComments": supervisor_comments},
        )

    def review_progress_report(self, report_id: str, supervisor_feedback: str) -> ApiResponse:
        return self.patch(f"progress-reports/{report_id}/review", {"supervisorFeedback": supervisor_feedback})

    def download_report_pdf(self, kind: ReportKind, report_id: str) -> DownloadedFile:
        return self.download(f"{_REPORT_PATHS[kind]}/{report_id}/pdf", default_filename=f"{kind}-report-{report_id}.pdf")

    # ------------------------------------------------------------------ student documents
    def list_joining_reports(self) -> Tuple[JoiningReport, ...]:
        response = self.get("joining-reports/supervisor")
        return tuple(JoiningReport.from_api(item) for item in _items(response.data, "reports"))

    def verify_joining_report(self, report_id: str) -> ApiResponse:
        return self.patch(f"joining-reports/{report_id}/verify")

    def list_internship_reports(self) -> Tuple[InternshipReport, ...]:
        response = self.get("internship-reports/supervisor")
        return tuple(InternshipReport.from_api(item) for item in _items(response.data, "reports"))

    def add_internship_feedback(self, report_id: str, feedback: str, grade: Optional[str] = None) -> ApiResponse:
        payload: Dict[str, Any] = {"feedback": feedback}
        if grade:
            payload["grade"] = grade
        return self.put(f"internship-reports/{report_id}/feedback", payload)

    def list_weekly_reports(self) -> Tuple[WeeklyReport, ...]:
        response = self.get("weekly-reports/supervisor/reports")
        return tuple(WeeklyReport.from_api(item) for item in _items(response.data, "reports"))

    def add_weekly_feedback(self, report_id: str, feedback: str, rating: Optional[int] = None) -> ApiResponse:
        payload: Dict[str, Any] = {"feedback": feedback}
        if rating is not None:
            payload["rating"] = rating
        return self.put(f"weekly-reports/supervisor/reports/{report_id}/feedback", payload)

    def download_document_pdf(self, kind: str, report_id: str) -> DownloadedFile:
        try:
            template = _DOCUMENT_PDF_PATHS[kind]
        except KeyError as error:
            raise ValueError(f"Unknown document kind: {kind}") from error
        return self.download(template.format(id=report_id), default_filename=f"{kind}-report-{report_id}.pdf")

    # ------------------------------------------------------------------ supervisor chat
    def list_supervised_students(self) -> Tuple[SupervisedStudent, ...]:
        response = self.get("supervisor-chat/students")
        return tuple(SupervisedStudent.from_api(item) for item in _items(response.data, "students"))

    def get_chat_history(self, student_id: str) -> ChatHistory:
        response = self.get(f"supervisor-chat/chat/{student_id}")
        data = response.data if isinstance(response.data, Mapping) else {}
        return ChatHistory.from_api(data, student_id)

    def mark_messages_read(self, student_id: str) -> ApiResponse:
        return self.put(f"supervisor-chat/chat/{student_id}/read")

    def get_unread_counts(self) -> Dict[str, int]:
        response = self.get("supervisor-chat/unread-counts")
        data = response.data if isinstance(response.data, Mapping) else {}
        return {str(key): int(value or 0) for key, value in data.items()}

    def send_message(self, student_id: str, message: str) -> ChatHistory:
        response = self.post(f"supervisor-chat/chat/{student_id}/message", {"message": message})
        data = response.data if isinstance(response.data, Mapping) else {}
        return ChatHistory.from_api(data, student_id)

    def send_message_with_files(self, student_id: str, message: str, uploads: Sequence[Upload]) -> ChatHistory:
        rejected = [upload.filename for upload in uploads if not upload.allowed]
        if rejected:
            raise ApiError(f"Unsupported attachment type: {', '.join(rejected)}")
        files = [("attachments", (upload.filename, upload.content, upload.content_type)) for upload in uploads]
        response = self.request(
            "POST",
            f"supervisor-chat/chat/{student_id}/message-with-files",
            data={"message": message or "File attachment"},
            files=files,
        )
        data = response.data if isinstance(response.data, Mapping) else {}
        return ChatHistory.from_api(data, student_id)

    def send_progress_update(self, student_id: str, update: ProgressUpdate) -> ChatHistory:
        response = self.post(f"supervisor-chat/chat/{student_id}/progress", update.to_api())
        data = response.data if isinstance(response.data, Mapping) else {}
        return ChatHistory.from_api(data, student_id)

    def export_chat_pdf(self, student_id: str) -> DownloadedFile:
        return self.download(f"supervisor-chat/chat/{student_id}/export", default_filename=f"chat-{student_id}.pdf")

    # ------------------------------------------------------------------ dashboard
    def get_dashboard_stats(self) -> DashboardStats:
        response = self.get("supervisors/dashboard-stats")
        data = response.data if isinstance(response.data, Mapping) else {}
        return DashboardStats.from_api(data)

    # ------------------------------------------------------------------ companies and jobs
    def list_companies(
        self,
        *,
        page: int = 1,
        limit: int = 12,
        search: str = "",
        filters: Optional[Mapping[str, Any]] = None,
    ) -> CompanyPage:
        params: Dict[str, Any] = {"page": page, "limit": limit, "search": search}
        for key, value in (filters or {}).items():
            if value in (None, "", False):
                continue
            params[key] = "true" if value is True else value
        response = self.get("companies", params=params)
        data = response.data if isinstance(response.data, Mapping) else {}
        return CompanyPage.from_api(data)

    def get_company(self, company_id: str) -> Company:
        response = self.get(f"companies/{company_id}")
        data = response.data if isinstance(response.data, Mapping) else {}
        return Company.from_api(data)

    def list_company_jobs(self, company_id: str) -> Tuple[Job, ...]:
        response = self.get(f"companies/{company_id}/jobs")
        return tuple(Job.from_api(item) for item in _items(response.data, "jobs"))

    def list_jobs(self, **filters: Any) -> Tuple[Job, ...]:
        params = {key: value for key, value in filters.items() if value not in (None, "")}
        response = self.get("jobs", params=params or None)
        return tuple(Job.from_api(item) for item in _items(response.data, "jobs"))
