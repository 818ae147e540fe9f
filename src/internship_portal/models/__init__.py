"""Data contracts used across the application."""

from .app import AppState, SessionState, UIState
from .listing import FilterState, ListState, SelectionState, SortKey
from .portal import (
    Application,
    ApplicationStats,
    AppraisalReport,
    ChatHistory,
    ChatMessage,
    Company,
    CompanyPage,
    DashboardStats,
    InternshipReport,
    Job,
    JoiningReport,
    MisconductReport,
    ProgressReport,
    ProgressUpdate,
    RejectionFeedback,
    Report,
    ReportKind,
    SupervisedStudent,
    WeeklyReport,
    parse_report,
)

__all__ = [
    "AppState",
    "SessionState",
    "UIState",
    "FilterState",
    "ListState",
    "SelectionState",
    "SortKey",
    "Application",
    "ApplicationStats",
    "AppraisalReport",
    "ChatHistory",
    "ChatMessage",
    "Company",
    "CompanyPage",
    "DashboardStats",
    "InternshipReport",
    "Job",
    "JoiningReport",
    "MisconductReport",
    "ProgressReport",
    "ProgressUpdate",
    "RejectionFeedback",
    "Report",
    "ReportKind",
    "SupervisedStudent",
    "WeeklyReport",
    "parse_report",
]
