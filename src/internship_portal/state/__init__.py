"""Reactive state controllers for the portal."""

from .app import PortalController, use_portal_state
from .base import ListController, PortalServices
from .companies import CompaniesController
from .dashboard import DashboardController
from .documents import DocumentsController
from .jobs import JobsController
from .messages import MessagesController
from .modal import ModalManager, ScrollLock
from .reports import ReportsController
from .requests import RequestsController

__all__ = [
    "CompaniesController",
    "DashboardController",
    "DocumentsController",
    "JobsController",
    "ListController",
    "MessagesController",
    "ModalManager",
    "PortalController",
    "PortalServices",
    "ReportsController",
    "RequestsController",
    "ScrollLock",
    "use_portal_state",
]
