"""Registered companies tab for students: paginated search and company detail."""

from __future__ import annotations

import asyncio
import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import solara

from internship_portal.models.listing import ListState
from internship_portal.models.portal import Company, Job
from internship_portal.services.api import AuthenticationError
from internship_portal.services.navigation import NavigationTarget
from internship_portal.services.tasks import Debouncer, TaskCancelled
from internship_portal.state.base import ListController, PortalServices, update_reactive

RESOURCE = "companies"
APPLIED = "applied"
COMPANY_SIZES = ("1-10", "11-50", "51-200", "201-500", "500+")

DETAIL_MODAL = "companies.detail"
JOB_MODAL = "companies.job"


@dataclass(frozen=True, slots=True)
class CompanyFilters:
    industry: str = ""
    location: str = ""
    company_size: str = ""
    has_active_jobs: bool = False

    def to_params(self) -> Dict[str, Any]:
        return {
            "industry": self.industry,
            "location": self.location,
            "companySize": self.company_size,
            "hasActiveJobs": self.has_active_jobs,
        }


@dataclass(frozen=True, slots=True)
class Pagination:
    current_page: int = 1
    total_pages: int = 1

    def contains(self, page: int) -> bool:
        return 1 <= page <= self.total_pages


@dataclass(frozen=True, slots=True)
class CompanyDetail:
    company: Optional[Company] = None
    jobs: Tuple[Job, ...] = ()
    loading: bool = False


class CompaniesController(ListController):
    """Server-side paginated company directory.

    Search and filter changes re-fetch page 1 after a short quiet period;
    the page itself is never sliced client-side.
    """

    name = "companies"

    def __init__(self, services: PortalServices) -> None:
        super().__init__(services)
        self._register(RESOURCE)
        self._register(APPLIED)
        self.pagination: solara.Reactive[Pagination] = solara.reactive(Pagination())
        self.company_filters: solara.Reactive[CompanyFilters] = solara.reactive(CompanyFilters())
        self.detail: solara.Reactive[CompanyDetail] = solara.reactive(CompanyDetail())
        self.view_mode: solara.Reactive[str] = solara.reactive("companies")
        self.selected_job: solara.Reactive[Optional[Job]] = solara.reactive(None)
        self.page_size = services.settings.companies_page_size
        self._debouncer = Debouncer(services.settings.search_debounce_seconds)

    # ------------------------------------------------------------------ fetch
    async def refresh(self) -> None:
        await asyncio.gather(self.fetch_page(1), self.fetch_applied())

    async def fetch_page(self, page: int) -> bool:
        target = self.lists[RESOURCE]
        token = self.scope.token()
        if token.cancelled:
            return False
        search = self.filters[RESOURCE].value.search_term.strip()
        params = self.company_filters.value.to_params()
        update_reactive(target, lambda prev: {"loading": True, "error": None})

        def call():
            return self.api.list_companies(page=page, limit=self.page_size, search=search, filters=params)

        try:
            result = await self.tasks.run("companies.page.fetch", call, token=token, page=page)
        except TaskCancelled:
            return False
        except AuthenticationError:
            update_reactive(target, lambda prev: {"loading": False})
            self._session_expired()
            return False
        except Exception as error:  # noqa: BLE001 - keep the current page
            self.logger.error("companies.page.fetch.failed", page=page, error=str(error))
            self.notifier.error("Failed to fetch companies")
            update_reactive(target, lambda prev: {"loading": False, "error": str(error), "loaded": True})
            return False
        target.set(ListState(items=result.companies, loaded=True))
        self.pagination.set(Pagination(current_page=result.current_page, total_pages=result.total_pages))
        return True

    async def fetch_applied(self) -> bool:
        return await self._fetch(APPLIED, self.api.list_my_applications, error_message="Failed to fetch applied jobs")

    # ------------------------------------------------------------------ paging and search
    def go_to_page(self, page: int) -> bool:
        """Fetch ``page``; pages outside ``1..total_pages`` are ignored."""

        if not self.pagination.value.contains(page):
            return False
        self._spawn(self.fetch_page(page))
        return True

    def search(self, term: str) -> None:
        self.set_search(RESOURCE, term)
        self._schedule_search()

    def set_company_filter(self, **changes: Any) -> None:
        fields = {f.name for f in dataclasses.fields(CompanyFilters)}
        unknown = set(changes) - fields
        if unknown:
            raise ValueError(f"Unknown company filters: {', '.join(sorted(unknown))}")
        self.company_filters.set(dataclasses.replace(self.company_filters.value, **changes))
        self._schedule_search()

    def clear_company_filters(self) -> None:
        self.clear_filters(RESOURCE)
        self.company_filters.set(CompanyFilters())
        self._schedule_search()

    def _schedule_search(self) -> None:
        self._debouncer(lambda: self._spawn(self.fetch_page(1)))

    def dispose(self) -> None:
        self._debouncer.cancel()
        super().dispose()

    def set_view_mode(self, mode: str) -> None:
        self.view_mode.set(mode if mode in ("companies", "applied") else "companies")

    # ------------------------------------------------------------------ detail
    def open_company(self, company: Company) -> None:
        self._open(DETAIL_MODAL, company, title=company.name or "Company", size="xl")
        self._spawn(self.fetch_detail(company.id))

    async def fetch_detail(self, company_id: str) -> bool:
        token = self.scope.token()
        update_reactive(self.detail, lambda prev: {"loading": True})
        try:
            company, jobs = await asyncio.gather(
                self.tasks.run("companies.detail.fetch", self.api.get_company, company_id, token=token),
                self.tasks.run("companies.jobs.fetch", self.api.list_company_jobs, company_id, token=token),
            )
        except TaskCancelled:
            return False
        except AuthenticationError:
            update_reactive(self.detail, lambda prev: {"loading": False})
            self._session_expired()
            return False
        except Exception as error:  # noqa: BLE001 - surfaced as a toast
            self.logger.error("companies.detail.fetch.failed", company_id=company_id, error=str(error))
            self.notifier.error("Failed to fetch company details")
            update_reactive(self.detail, lambda prev: {"loading": False})
            return False
        self.detail.set(CompanyDetail(company=company, jobs=tuple(jobs), loading=False))
        return True

    def close_company(self) -> None:
        self.close_modal(DETAIL_MODAL)
        self.detail.set(CompanyDetail())

    def open_job(self, job: Job) -> None:
        self.selected_job.set(job)
        self.modals.open(JOB_MODAL, title=job.title or "Job", size="lg")

    # ------------------------------------------------------------------ navigation
    def view_jobs(self, company: Company) -> None:
        """Jump to the jobs tab filtered to ``company``."""

        self._finish_action()
        self.detail.set(CompanyDetail())
        self.navigator.navigate(NavigationTarget(tab="jobs", payload=company.name))

    def apply_for_job(self, job: Job) -> None:
        self._finish_action()
        self.selected_job.set(None)
        self.detail.set(CompanyDetail())
        self.navigator.navigate(NavigationTarget(tab="jobs", payload=job.title))
