"""Search box, sort selector and the collapsible filter panel."""

from __future__ import annotations

from typing import Sequence

import solara

from internship_portal.models.listing import SortKey
from internship_portal.state.base import ListController


def _titled(value: str) -> str:
    return value.replace("_", " ").title()


@solara.component
def FilterBar(
    controller: ListController,
    resource: str,
    sort_keys: Sequence[SortKey],
    placeholder: str = "Search...",
    statuses: Sequence[str] = (),
    departments: Sequence[str] = (),
    on_search=None,
) -> None:
    filters = controller.filters[resource].value
    labels = {key.label: key for key in sort_keys}

    def handle_search(term: str) -> None:
        if on_search is not None:
            on_search(term)
        else:
            controller.set_search(resource, term)

    with solara.Row(classes=["ip-filter-bar"]):
        solara.InputText(
            placeholder,
            value=filters.search_term,
            on_value=handle_search,
            continuous_update=True,
        )
        solara.Select(
            "Sort by",
            value=filters.sort_key.label if filters.sort_key in sort_keys else None,
            values=list(labels),
            on_value=lambda label: controller.set_sort(resource, labels[label]),
        )
        if statuses or departments:
            solara.Button(
                "Hide filters" if filters.panel_open else "Filters",
                icon_name="mdi-filter-variant",
                text=True,
                on_click=lambda: controller.toggle_filter_panel(resource),
            )
        if filters.is_active:
            solara.Button("Clear", text=True, on_click=lambda: controller.clear_filters(resource))
    if filters.panel_open:
        with solara.Row(classes=["ip-filter-bar"]):
            if statuses:
                status_labels = {_titled(status): status for status in statuses}
                solara.Select(
                    "Status",
                    value=_titled(filters.status),
                    values=list(status_labels),
                    on_value=lambda label: controller.set_status_filter(resource, status_labels[label]),
                )
            if departments:
                solara.Select(
                    "Department",
                    value=filters.department if filters.department != "all" else "All",
                    values=["All", *departments],
                    on_value=lambda value: controller.set_department_filter(resource, "all" if value == "All" else value),
                )
