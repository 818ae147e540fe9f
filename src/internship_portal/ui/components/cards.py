"""Small presentational building blocks."""

from __future__ import annotations

import datetime as _dt
from typing import Optional

import solara

from internship_portal.models.listing import ListState
from internship_portal.services.api import DownloadedFile


def format_date(value: Optional[_dt.datetime]) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%b %d, %Y")


def format_rating(value: Optional[float], scale: int = 5) -> str:
    if value is None:
        return "N/A"
    return f"{value:g}/{scale}"


def status_class(status: str) -> str:
    slug = "-".join(status.strip().lower().replace("_", " ").split())
    return f"ip-status--{slug}" if slug else ""


@solara.component
def StatusChip(status: str) -> None:
    solara.Text(status or "Unknown", classes=["ip-status", status_class(status)])


@solara.component
def InfoRow(label: str, value) -> None:
    with solara.Row(classes=["ip-info-row"]):
        solara.Text(label, classes=["ip-info-row__label"])
        solara.Text(str(value) if value not in (None, "") else "N/A")


@solara.component
def EmptyState(message: str) -> None:
    solara.Text(message, classes=["ip-empty"])


@solara.component
def StatCard(label: str, value, caption: str = "") -> None:
    with solara.Card(classes=["ip-card", "ip-stat"]):
        solara.Text(str(value), classes=["ip-stat__value"])
        solara.Text(label, classes=["ip-card__title"])
        if caption:
            solara.Text(caption, classes=["ip-meta"])


@solara.component
def ListStatus(state: ListState, empty_message: str, visible_count: int) -> None:
    """Loading bar, last error and empty message for a list."""

    if state.loading:
        solara.ProgressLinear(True)
    if state.error and not state.items:
        solara.Error(f"Could not load: {state.error}", dense=True)
    elif state.loaded and visible_count == 0 and not state.loading:
        EmptyState(empty_message)


@solara.component
def DownloadReady(download: Optional[DownloadedFile], on_clear) -> None:
    """Save button for the most recently fetched file."""

    if download is None:
        return
    with solara.Row(style={"alignItems": "center", "gap": "0.5rem"}):
        solara.FileDownload(
            download.content,
            filename=download.filename,
            label=f"Save {download.filename}",
            mime_type=download.content_type or "application/octet-stream",
        )
        solara.Button("Dismiss", text=True, on_click=on_clear)
