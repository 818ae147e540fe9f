"""Registered companies directory for students."""

from __future__ import annotations

import solara

from internship_portal.models.portal import Application, Company, Job
from internship_portal.state import CompaniesController, PortalController
from internship_portal.state.companies import APPLIED, COMPANY_SIZES, DETAIL_MODAL, JOB_MODAL, RESOURCE
from internship_portal.ui.components.cards import EmptyState, InfoRow, ListStatus, StatusChip, format_date
from internship_portal.ui.components.modal import StackedModal


@solara.component
def CompanyCard(companies: CompaniesController, company: Company) -> None:
    with solara.Card(classes=["ip-card"]):
        solara.Text(company.name or "Company", classes=["ip-card__title"])
        solara.Text(" · ".join(part for part in (company.industry, company.location) if part), classes=["ip-card__subtitle"])
        solara.Text(f"{company.active_jobs} active jobs", classes=["ip-meta"])
        with solara.Row(style={"gap": "0.5rem"}):
            solara.Button("Details", text=True, on_click=lambda: companies.open_company(company))
            solara.Button("View jobs", color="primary", outlined=True, on_click=lambda: companies.view_jobs(company))


@solara.component
def CompanyFilterPanel(companies: CompaniesController) -> None:
    filters = companies.company_filters.value
    with solara.Row(classes=["ip-filter-bar"]):
        solara.InputText(
            "Industry",
            value=filters.industry,
            on_value=lambda value: companies.set_company_filter(industry=value),
        )
        solara.InputText(
            "Location",
            value=filters.location,
            on_value=lambda value: companies.set_company_filter(location=value),
        )
        solara.Select(
            "Company size",
            value=filters.company_size,
            values=["", *COMPANY_SIZES],
            on_value=lambda value: companies.set_company_filter(company_size=value or ""),
        )
        solara.Checkbox(
            label="Hiring now",
            value=filters.has_active_jobs,
            on_value=lambda value: companies.set_company_filter(has_active_jobs=bool(value)),
        )
        solara.Button("Clear", text=True, on_click=companies.clear_company_filters)


@solara.component
def PaginationBar(companies: CompaniesController) -> None:
    pagination = companies.pagination.value
    if pagination.total_pages <= 1:
        return
    with solara.Row(classes=["ip-pagination"]):
        solara.Button(
            icon_name="mdi-chevron-left",
            icon=True,
            disabled=pagination.current_page <= 1,
            on_click=lambda: companies.go_to_page(pagination.current_page - 1),
        )
        solara.Text(f"Page {pagination.current_page} of {pagination.total_pages}")
        solara.Button(
            icon_name="mdi-chevron-right",
            icon=True,
            disabled=pagination.current_page >= pagination.total_pages,
            on_click=lambda: companies.go_to_page(pagination.current_page + 1),
        )


@solara.component
def AppliedList(companies: CompaniesController) -> None:
    state = companies.lists[APPLIED].value
    ListStatus(state, "You have not applied to any jobs yet.", len(state.items))
    with solara.Column(classes=["ip-list"]):
        for application in state.items:
            AppliedCard(application).key(f"applied-{application.id}")


@solara.component
def AppliedCard(application: Application) -> None:
    with solara.Card(classes=["ip-card"]):
        with solara.Row(style={"justifyContent": "space-between", "alignItems": "center"}):
            with solara.Column(style={"gap": "0.125rem"}):
                solara.Text(application.job_title or "Position", classes=["ip-card__title"])
                solara.Text(application.company_name, classes=["ip-card__subtitle"])
                solara.Text(f"Applied {format_date(application.sort_date)}", classes=["ip-meta"])
            StatusChip(application.application_status or application.supervisor_status)


@solara.component
def CompanyDetailBody(companies: CompaniesController) -> None:
    detail = companies.detail.value
    if detail.loading or detail.company is None:
        solara.ProgressLinear(True)
        return
    company = detail.company
    InfoRow("Industry", company.industry)
    InfoRow("Location", company.location)
    InfoRow("Company size", company.company_size)
    InfoRow("Website", company.website)
    if company.description:
        solara.Markdown(company.description)
    solara.Text(f"Open positions ({len(detail.jobs)})", classes=["ip-card__title"])
    if not detail.jobs:
        EmptyState("No open positions right now.")
    for job in detail.jobs:
        with solara.Row(style={"justifyContent": "space-between", "alignItems": "center"}).key(f"job-{job.id}"):
            solara.Text(f"{job.title} · {job.location or 'Remote'}")
            solara.Button("Details", text=True, on_click=lambda job=job: companies.open_job(job))
    with solara.Row(classes=["ip-modal__footer"]):
        solara.Button("View all jobs", color="primary", on_click=lambda: companies.view_jobs(company))


@solara.component
def JobSummary(job: Job, on_apply) -> None:
    InfoRow("Company", job.company_name)
    InfoRow("Location", job.location)
    InfoRow("Type", job.work_type)
    InfoRow("Salary", job.salary)
    InfoRow("Deadline", format_date(job.application_deadline))
    if job.description:
        solara.Markdown(job.description)
    with solara.Row(classes=["ip-modal__footer"]):
        solara.Button("Apply", color="primary", on_click=lambda: on_apply(job))


@solara.component
def View(controller: PortalController) -> None:
    companies = controller.companies

    def mount():
        companies.load()
        return companies.dispose

    solara.use_effect(mount, [companies])

    mode = companies.view_mode.value
    filters = companies.filters[RESOURCE].value
    state = companies.lists[RESOURCE].value
    job = companies.selected_job.value

    solara.ToggleButtonsSingle(
        value="Companies" if mode == "companies" else "My applications",
        values=["Companies", "My applications"],
        on_value=lambda label: companies.set_view_mode("companies" if label == "Companies" else "applied"),
    )
    if mode == "applied":
        AppliedList(companies)
    else:
        with solara.Row(classes=["ip-filter-bar"]):
            solara.InputText(
                "Search companies",
                value=filters.search_term,
                on_value=companies.search,
                continuous_update=True,
            )
            solara.Button(
                "Hide filters" if filters.panel_open else "Filters",
                icon_name="mdi-filter-variant",
                text=True,
                on_click=lambda: companies.toggle_filter_panel(RESOURCE),
            )
        if filters.panel_open:
            CompanyFilterPanel(companies)
        ListStatus(state, "No companies found.", len(state.items))
        with solara.Row(style={"gap": "1rem", "flexWrap": "wrap"}):
            for company in state.items:
                CompanyCard(companies, company).key(f"company-{company.id}")
        PaginationBar(companies)

    lock = controller.scroll_lock
    with StackedModal(companies.modals, DETAIL_MODAL, on_close=companies.close_company, scroll_lock=lock):
        CompanyDetailBody(companies)
    with StackedModal(companies.modals, JOB_MODAL, on_close=lambda: companies.close_modal(JOB_MODAL), scroll_lock=lock):
        if job is not None:
            JobSummary(job, companies.apply_for_job)
