"""Typed entities hydrated from the portal REST payloads."""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Literal, Mapping, Optional, Sequence, Tuple, Union

ReportKind = Literal["misconduct", "progress", "appraisal"]
_UTC = _dt.timezone.utc


def parse_timestamp(value: Any) -> Optional[_dt.datetime]:
    """Parse an ISO-8601 timestamp from the API into an aware datetime."""

    if value is None or value == "":
        return None
    if isinstance(value, _dt.datetime):
        parsed = value
    elif isinstance(value, _dt.date):
        parsed = _dt.datetime.combine(value, _dt.time.min)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = _dt.datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_UTC)
    return parsed


def _text(payload: Mapping[str, Any], *keys: str, default: str = "") -> str:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return default


def _nested(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, Mapping) else {}


def _number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _identifier(payload: Mapping[str, Any]) -> str:
    return str(payload.get("_id") or payload.get("id") or "")


# ---------------------------------------------------------------------- company reports
@dataclass(frozen=True, slots=True)
class MisconductReport:
    kind: ClassVar[ReportKind] = "misconduct"

    id: str
    student_name: str = ""
    company_name: str = ""
    issue_type: str = ""
    description: str = ""
    status: str = "Pending"
    incident_date: Optional[_dt.datetime] = None
    created_at: Optional[_dt.datetime] = None
    supervisor_comments: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "MisconductReport":
        return cls(
            id=_identifier(payload),
            student_name=_text(payload, "studentName"),
            company_name=_text(payload, "companyName"),
            issue_type=_text(payload, "issueType"),
            description=_text(payload, "description"),
            status=_text(payload, "status", default="Pending"),
            incident_date=parse_timestamp(payload.get("incidentDate")),
            created_at=parse_timestamp(payload.get("createdAt")),
            supervisor_comments=_text(payload, "supervisorComments"),
            raw=dict(payload),
        )

    @property
    def sort_date(self) -> Optional[_dt.datetime]:
        return self.incident_date or self.created_at


@dataclass(frozen=True, slots=True)
class ProgressReport:
    kind: ClassVar[ReportKind] = "progress"

    id: str
    student_name: str = ""
    company_name: str = ""
    status: str = "Submitted"
    report_date: Optional[_dt.datetime] = None
    created_at: Optional[_dt.datetime] = None
    tasks_completed: str = ""
    current_tasks: str = ""
    challenges: str = ""
    overall_progress: str = ""
    supervisor_feedback: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "ProgressReport":
        return cls(
            id=_identifier(payload),
            student_name=_text(payload, "studentName"),
            company_name=_text(payload, "companyName"),
            status=_text(payload, "status", default="Submitted"),
            report_date=parse_timestamp(payload.get("reportDate")),
            created_at=parse_timestamp(payload.get("createdAt")),
            tasks_completed=_text(payload, "tasksCompleted"),
            current_tasks=_text(payload, "currentTasks"),
            challenges=_text(payload, "challenges", "challengesFaced"),
            overall_progress=_text(payload, "overallProgress"),
            supervisor_feedback=_text(payload, "supervisorFeedback"),
            raw=dict(payload),
        )

    @property
    def sort_date(self) -> Optional[_dt.datetime]:
        return self.report_date or self.created_at


@dataclass(frozen=True, slots=True)
class AppraisalReport:
    kind: ClassVar[ReportKind] = "appraisal"

    id: str
    student_name: str = ""
    company_name: str = ""
    status: str = "Submitted"
    overall_performance: str = ""
    overall_rating: Optional[float] = None
    comments: str = ""
    submitted_at: Optional[_dt.datetime] = None
    created_at: Optional[_dt.datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "AppraisalReport":
        return cls(
            id=_identifier(payload),
            student_name=_text(payload, "studentName"),
            company_name=_text(payload, "companyName"),
            status=_text(payload, "status", default="Submitted"),
            overall_performance=_text(payload, "overallPerformance"),
            overall_rating=_number(payload.get("overallRating")),
            comments=_text(payload, "comments", "keyStrengths"),
            submitted_at=parse_timestamp(payload.get("submittedAt")),
            created_at=parse_timestamp(payload.get("createdAt")),
            raw=dict(payload),
        )

    @property
    def sort_date(self) -> Optional[_dt.datetime]:
        return self.submitted_at or self.created_at


Report = Union[MisconductReport, ProgressReport, AppraisalReport]

REPORT_TYPES: Dict[ReportKind, type] = {
    "misconduct": MisconductReport,
    "progress": ProgressReport,
    "appraisal": AppraisalReport,
}


def parse_report(kind: ReportKind, payload: Mapping[str, Any]) -> Report:
    """Build the report variant for ``kind``; the tag comes from the endpoint."""

    try:
        report_type = REPORT_TYPES[kind]
    except KeyError as error:
        raise ValueError(f"Unknown report kind: {kind}") from error
    return report_type.from_api(payload)


# ---------------------------------------------------------------------- applications
@dataclass(frozen=True, slots=True)
class Application:
    id: str
    student_name: str = ""
    roll_number: str = ""
    department: str = ""
    cgpa: Optional[float] = None
    company_name: str = ""
    job_title: str = ""
    supervisor_status: str = "pending"
    overall_status: str = ""
    application_status: str = ""
    rejection_note: str = ""
    cv_file: str = ""
    certificate_file: str = ""
    applied_at: Optional[_dt.datetime] = None
    created_at: Optional[_dt.datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Application":
        student = _nested(payload, "studentId")
        profile = _nested(payload, "studentProfile")
        job = _nested(payload, "jobId")
        return cls(
            id=_identifier(payload),
            student_name=_text(payload, "studentName") or _text(student, "name"),
            roll_number=_text(profile, "rollNumber"),
            department=_text(profile, "department"),
            cgpa=_number(profile.get("cgpa")),
            company_name=_text(payload, "companyName") or _text(job, "company"),
            job_title=_text(payload, "jobTitle") or _text(job, "title"),
            supervisor_status=_text(payload, "supervisorStatus", default="pending"),
            overall_status=_text(payload, "overallStatus"),
            application_status=_text(payload, "applicationStatus"),
            rejection_note=_text(payload, "rejectionNote"),
            cv_file=_text(profile, "cv", "cvFile"),
            certificate_file=_text(profile, "certificate", "certificateFile"),
            applied_at=parse_timestamp(payload.get("appliedAt")),
            created_at=parse_timestamp(payload.get("createdAt")),
            raw=dict(payload),
        )

    @property
    def sort_date(self) -> Optional[_dt.datetime]:
        return self.applied_at or self.created_at


@dataclass(frozen=True, slots=True)
class ApplicationStats:
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    pending_company: int = 0
    hired: int = 0

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "ApplicationStats":
        return cls(
            total=int(payload.get("total", 0) or 0),
            pending=int(payload.get("pending", 0) or 0),
            approved=int(payload.get("approved", 0) or 0),
            rejected=int(payload.get("rejected", 0) or 0),
            pending_company=int(payload.get("pendingCompany", 0) or 0),
            hired=int(payload.get("hired", 0) or 0),
        )

    @classmethod
    def from_applications(cls, applications: Sequence[Application]) -> "ApplicationStats":
        return cls(
            total=len(applications),
            pending=sum(1 for app in applications if app.supervisor_status == "pending"),
            approved=sum(1 for app in applications if app.supervisor_status == "approved"),
            rejected=sum(1 for app in applications if app.supervisor_status == "rejected"),
            pending_company=sum(1 for app in applications if app.overall_status == "pending_company"),
            hired=sum(1 for app in applications if app.application_status == "hired"),
        )


@dataclass(frozen=True, slots=True)
class RejectionFeedback:
    """Structured feedback sent when a supervisor requests changes."""

    reason: str = ""
    details: str = ""
    requested_fixes: Tuple[str, ...] = ()
    fields_to_edit: Tuple[str, ...] = ()

    def to_api(self) -> Dict[str, Any]:
        return {
            "reason": self.reason,
            "details": self.details,
            "requestedFixes": list(self.requested_fixes),
            "fieldsToEdit": list(self.fields_to_edit),
        }


# ---------------------------------------------------------------------- student documents
@dataclass(frozen=True, slots=True)
class JoiningReport:
    id: str
    student_name: str = ""
    company_name: str = ""
    status: str = "Pending Verification"
    joining_date: Optional[_dt.datetime] = None
    created_at: Optional[_dt.datetime] = None
    verified: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "JoiningReport":
        status = _text(payload, "status", default="Pending Verification")
        return cls(
            id=_identifier(payload),
            student_name=_text(payload, "studentName"),
            company_name=_text(payload, "companyName"),
            status=status,
            joining_date=parse_timestamp(payload.get("joiningDate")),
            created_at=parse_timestamp(payload.get("createdAt")),
            verified=bool(payload.get("isVerified")) or status == "Verified",
            raw=dict(payload),
        )

    @property
    def sort_date(self) -> Optional[_dt.datetime]:
        return self.joining_date or self.created_at


@dataclass(frozen=True, slots=True)
class InternshipReport:
    id: str
    student_name: str = ""
    company_name: str = ""
    status: str = "submitted"
    submitted_at: Optional[_dt.datetime] = None
    created_at: Optional[_dt.datetime] = None
    supervisor_feedback: str = ""
    supervisor_grade: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "InternshipReport":
        feedback = payload.get("supervisorFeedback")
        if isinstance(feedback, Mapping):
            feedback_text = _text(feedback, "feedback")
            grade = _text(feedback, "grade")
        else:
            feedback_text = feedback if isinstance(feedback, str) else ""
            grade = _text(payload, "grade")
        return cls(
            id=_identifier(payload),
            student_name=_text(payload, "studentName") or _text(_nested(payload, "studentId"), "name"),
            company_name=_text(payload, "companyName"),
            status=_text(payload, "status", default="submitted"),
            submitted_at=parse_timestamp(payload.get("submittedAt")),
            created_at=parse_timestamp(payload.get("createdAt")),
            supervisor_feedback=feedback_text,
            supervisor_grade=grade,
            raw=dict(payload),
        )

    @property
    def sort_date(self) -> Optional[_dt.datetime]:
        return self.submitted_at or self.created_at


@dataclass(frozen=True, slots=True)
class WeeklyReport:
    id: str
    student_name: str = ""
    company_name: str = ""
    week_number: int = 0
    status: str = "submitted"
    submitted_at: Optional[_dt.datetime] = None
    created_at: Optional[_dt.datetime] = None
    supervisor_feedback: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "WeeklyReport":
        feedback = payload.get("supervisorFeedback")
        if isinstance(feedback, Mapping):
            feedback_text = _text(feedback, "feedback")
        else:
            feedback_text = feedback if isinstance(feedback, str) else ""
        return cls(
            id=_identifier(payload),
            student_name=_text(payload, "studentName") or _text(_nested(payload, "studentId"), "name"),
            company_name=_text(payload, "companyName"),
            week_number=int(payload.get("weekNumber", 0) or 0),
            status=_text(payload, "status", default="submitted"),
            submitted_at=parse_timestamp(payload.get("submittedAt")),
            created_at=parse_timestamp(payload.get("createdAt")),
            supervisor_feedback=feedback_text,
            raw=dict(payload),
        )

    @property
    def sort_date(self) -> Optional[_dt.datetime]:
        return self.submitted_at or self.created_at


# ---------------------------------------------------------------------- chat
@dataclass(frozen=True, slots=True)
class SupervisedStudent:
    id: str
    name: str = ""
    email: str = ""
    roll_number: str = ""
    company_name: str = ""

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "SupervisedStudent":
        return cls(
            id=_identifier(payload),
            name=_text(payload, "name", "studentName"),
            email=_text(payload, "email"),
            roll_number=_text(payload, "rollNumber"),
            company_name=_text(payload, "companyName"),
        )


@dataclass(frozen=True, slots=True)
class ChatAttachment:
    filename: str
    url: str = ""
    size: int = 0


@dataclass(frozen=True, slots=True)
class ChatMessage:
    id: str
    sender_type: str
    message: str = ""
    message_type: str = "text"
    timestamp: Optional[_dt.datetime] = None
    is_read: bool = False
    attachments: Tuple[ChatAttachment, ...] = ()
    progress_title: str = ""
    progress_priority: str = ""

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "ChatMessage":
        progress = _nested(payload, "progressUpdate")
        attachments = tuple(
            ChatAttachment(
                filename=_text(item, "originalName", "filename"),
                url=_text(item, "path", "url"),
                size=int(item.get("size", 0) or 0),
            )
            for item in payload.get("attachments") or []
            if isinstance(item, Mapping)
        )
        return cls(
            id=_identifier(payload),
            sender_type=_text(payload, "senderType", default="supervisor"),
            message=_text(payload, "message"),
            message_type=_text(payload, "messageType", default="text"),
            timestamp=parse_timestamp(payload.get("timestamp") or payload.get("createdAt")),
            is_read=bool(payload.get("isRead", False)),
            attachments=attachments,
            progress_title=_text(progress, "title"),
            progress_priority=_text(progress, "priority"),
        )


@dataclass(frozen=True, slots=True)
class ChatHistory:
    id: str
    student_id: str
    messages: Tuple[ChatMessage, ...] = ()

    @classmethod
    def from_api(cls, payload: Mapping[str, Any], student_id: str) -> "ChatHistory":
        return cls(
            id=_identifier(payload),
            student_id=student_id,
            messages=tuple(
                ChatMessage.from_api(item)
                for item in payload.get("messages") or []
                if isinstance(item, Mapping)
            ),
        )


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    title: str = ""
    description: str = ""
    priority: str = "Normal"

    def to_api(self) -> Dict[str, Any]:
        return {"title": self.title, "description": self.description, "priority": self.priority}


# ---------------------------------------------------------------------- companies and jobs
@dataclass(frozen=True, slots=True)
class Company:
    id: str
    name: str = ""
    industry: str = ""
    location: str = ""
    company_size: str = ""
    description: str = ""
    website: str = ""
    logo: str = ""
    banner: str = ""
    active_jobs: int = 0
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Company":
        return cls(
            id=_identifier(payload),
            name=_text(payload, "companyName", "name"),
            industry=_text(payload, "industry"),
            location=_text(payload, "location", "address"),
            company_size=_text(payload, "companySize"),
            description=_text(payload, "about", "description"),
            website=_text(payload, "website"),
            logo=_text(payload, "logoImage", "logo"),
            banner=_text(payload, "bannerImage", "banner"),
            active_jobs=int(payload.get("activeJobsCount", payload.get("jobsCount", 0)) or 0),
            raw=dict(payload),
        )


@dataclass(frozen=True, slots=True)
class CompanyPage:
    companies: Tuple[Company, ...] = ()
    current_page: int = 1
    total_pages: int = 1

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "CompanyPage":
        return cls(
            companies=tuple(
                Company.from_api(item) for item in payload.get("companies") or [] if isinstance(item, Mapping)
            ),
            current_page=int(payload.get("currentPage", 1) or 1),
            total_pages=max(1, int(payload.get("totalPages", 1) or 1)),
        )


@dataclass(frozen=True, slots=True)
class Job:
    id: str
    title: str = ""
    company_name: str = ""
    location: str = ""
    work_type: str = ""
    description: str = ""
    salary: str = ""
    application_deadline: Optional[_dt.datetime] = None
    created_at: Optional[_dt.datetime] = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Job":
        company = _nested(payload, "companyId")
        creator = _nested(payload, "createdBy")
        return cls(
            id=_identifier(payload),
            title=_text(payload, "jobTitle", "title"),
            company_name=(
                _text(payload, "companyName")
                or _text(company, "name", "companyName")
                or _text(payload, "company")
                or _text(creator, "name", "companyName")
            ),
            location=_text(payload, "location"),
            work_type=_text(payload, "workType", "jobType"),
            description=_text(payload, "jobDescription", "description"),
            salary=str(payload.get("salary") or ""),
            application_deadline=parse_timestamp(payload.get("applicationDeadline")),
            created_at=parse_timestamp(payload.get("createdAt")),
        )

    @property
    def sort_date(self) -> Optional[_dt.datetime]:
        return self.created_at


# ---------------------------------------------------------------------- dashboard
@dataclass(frozen=True, slots=True)
class DashboardStats:
    students_count: int = 0
    active_students: int = 0
    completed_students: int = 0
    reports_pending: int = 0
    reports_reviewed: int = 0
    evaluations_pending: int = 0
    supervision_requests: int = 0
    applications: int = 0
    unread_messages: int = 0

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "DashboardStats":
        reports = _nested(payload, "reportsCount")
        evaluations = _nested(payload, "evaluationsCount")
        return cls(
            students_count=int(payload.get("studentsCount", 0) or 0),
            active_students=int(payload.get("activeStudents", 0) or 0),
            completed_students=int(payload.get("completedStudents", 0) or 0),
            reports_pending=int(reports.get("pending", 0) or 0),
            reports_reviewed=int(reports.get("reviewed", 0) or 0),
            evaluations_pending=int(evaluations.get("pending", 0) or 0),
            supervision_requests=int(payload.get("supervisionRequests", 0) or 0),
            applications=int(payload.get("jobApplications", 0) or 0),
            unread_messages=int(payload.get("unreadMessages", 0) or 0),
        )
