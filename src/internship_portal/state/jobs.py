"""Jobs tab for students."""

from __future__ import annotations

from typing import Callable, List, Optional

from internship_portal.models.listing import DATE_AND_NAME_KEYS
from internship_portal.models.portal import Job
from internship_portal.services.navigation import NavigationTarget
from internship_portal.state.base import ListController, PortalServices
from internship_portal.state.listing import filter_items, sort_items

RESOURCE = "jobs"
SORT_KEYS = DATE_AND_NAME_KEYS
DETAIL_MODAL = "jobs.detail"


def job_search_fields(job: Job) -> tuple:
    return (job.title, job.company_name, job.location, job.work_type)


class JobsController(ListController):
    name = "jobs"

    def __init__(self, services: PortalServices) -> None:
        super().__init__(services)
        self._register(RESOURCE)
        self._unlisten: Optional[Callable[[], None]] = None

    def activate(self) -> None:
        """Apply any pending navigation payload and follow later ones."""

        self._apply_payload(self.navigator.consume("jobs"))
        if self._unlisten is None:
            self._unlisten = self.navigator.on_navigate(self._on_navigate)

    def _on_navigate(self, target: NavigationTarget) -> None:
        if target.tab == "jobs":
            self._apply_payload(self.navigator.consume("jobs"))

    def _apply_payload(self, payload: Optional[str]) -> None:
        if payload:
            self.logger.info("jobs.navigation.applied", search=payload)
            self.set_search(RESOURCE, payload)

    async def refresh(self) -> None:
        await self._fetch(RESOURCE, self.api.list_jobs, error_message="Failed to fetch jobs")

    def visible(self) -> List[Job]:
        filters = self.filters[RESOURCE].value
        items = filter_items(self.items(RESOURCE), filters.search_term, job_search_fields)
        return sort_items(items, filters.sort_key, date=lambda job: job.sort_date, name=lambda job: job.title)

    def select(self, job: Job) -> None:
        self._open(DETAIL_MODAL, job, title=job.title or "Job", size="lg")

    def dispose(self) -> None:
        unlisten, self._unlisten = self._unlisten, None
        if unlisten is not None:
            unlisten()
        super().dispose()
