"""Application-level state containers shared across the UI."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True, slots=True)
class SessionState:
    """Who is signed in and whether the backend still accepts the session."""

    authenticated: bool = True
    expired: bool = False
    user_id: Optional[str] = None
    display_name: Optional[str] = None
    role: str = "supervisor"
    public_config: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UIState:
    active_tab: str = "overview"
    unread_total: int = 0


@dataclass(frozen=True, slots=True)
class AppState:
    session: SessionState = field(default_factory=SessionState)
    ui: UIState = field(default_factory=UIState)
