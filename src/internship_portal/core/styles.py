"""Helpers for loading global CSS assets."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Iterable

import solara

_BASE = Path(__file__).resolve().parent.parent
CSS_ASSETS = [
    _BASE / "ui" / "styles" / "portal.css",
    _BASE / "ui" / "styles" / "modal.css",
]


@functools.lru_cache(maxsize=None)
def _read_css(path: Path) -> str:
    return path.read_text() if path.exists() else ""


@solara.component
def GlobalStyles(extra_assets: Iterable[Path] | None = None) -> None:
    """Inject the portal stylesheets into the current page."""

    assets = list(CSS_ASSETS)
    if extra_assets:
        assets.extend(Path(asset) for asset in extra_assets)
    css = "\n".join(_read_css(asset) for asset in assets)
    solara.Style(css)
