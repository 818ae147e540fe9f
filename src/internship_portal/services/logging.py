"""Event-named structured logging for the portal.

Every record is an event name plus keyword fields, e.g.
``logger.error("reports.fetch.failed", kind="progress", error="timeout")``.
Records go through the standard :mod:`logging` machinery and are rendered as a
human readable line, a JSON document, or both (``PORTAL_LOG_FORMAT``).
"""

from __future__ import annotations

import copy
import datetime as _dt
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet

FORMAT_ENV_VAR = "PORTAL_LOG_FORMAT"
DISABLE_CONSOLE_ENV_VAR = "PORTAL_DISABLE_CONSOLE_LOGS"

SEVERITIES: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def severity_level(severity: str) -> int:
    return SEVERITIES.get(severity.lower(), logging.INFO)


def _output_formats(value: str) -> FrozenSet[str]:
    value = value.strip().lower()
    if value == "both":
        return frozenset({"human", "json"})
    if value == "json":
        return frozenset({"json"})
    return frozenset({"human"})


@dataclass(slots=True)
class SessionContext:
    """Who is using the portal and where; merged into every JSON record."""

    app_name: str = "internship-portal"
    environment: str = "local"
    user_id: str | None = None
    role: str | None = None
    page: str = "overview"

    @classmethod
    def from_environment(cls) -> "SessionContext":
        return cls(
            app_name=os.getenv("PORTAL_APP_NAME", "internship-portal"),
            environment=os.getenv("PORTAL_ENVIRONMENT", "local").lower(),
            user_id=os.getenv("PORTAL_USER_ID") or None,
            role=os.getenv("PORTAL_USER_ROLE") or None,
        )

    def as_fields(self) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"app": self.app_name, "environment": self.environment, "page": self.page}
        if self.user_id:
            fields["user_id"] = self.user_id
        if self.role:
            fields["role"] = self.role
        return fields


def render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "-"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(render_value(item) for item in value)
    return str(value)


def render_human(record: Dict[str, Any]) -> str:
    """``[timestamp] LEVEL event (tab) - key=value ...`` with the keys sorted."""

    data = dict(record)
    parts = [f"[{data.pop('timestamp', '-')}]", str(data.pop("severity", "info")).upper(), str(data.pop("event", "unknown"))]
    tab = data.pop("tab", None)
    if tab:
        parts.append(f"({tab})")
    if data:
        parts.append("- " + " ".join(f"{key}={render_value(value)}" for key, value in sorted(data.items())))
    return " ".join(parts)


class StructuredLogger:
    """Thin wrapper over a stdlib logger that speaks in events and fields.

    Use :meth:`bind` to get a child logger that stamps extra fields (such as
    the tab name) on each record; children share the parent's output and
    session context.
    """

    def __init__(self, name: str = "internship-portal") -> None:
        self._logger = logging.getLogger(name)
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)
        self._logger.setLevel(logging.INFO)
        self._console_enabled = os.getenv(DISABLE_CONSOLE_ENV_VAR, "0") != "1"
        self._formats = _output_formats(os.getenv(FORMAT_ENV_VAR, "human"))
        self._context = SessionContext.from_environment()
        self._bound: Dict[str, Any] = {}

    def bind(self, **fields: Any) -> "StructuredLogger":
        child = copy.copy(self)
        child._bound = {**self._bound, **fields}
        return child

    def log(self, event: str, *, severity: str = "info", **fields: Any) -> None:
        if not self._console_enabled:
            return
        level = severity_level(severity)
        if not self._logger.isEnabledFor(level):
            return
        record: Dict[str, Any] = {
            "timestamp": _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds"),
            "event": event,
            "severity": severity,
            **self._bound,
            **fields,
        }
        if "json" in self._formats:
            self._logger.log(level, json.dumps({**self._context.as_fields(), **record}, default=str))
        if "human" in self._formats:
            self._logger.log(level, render_human(record))

    def debug(self, event: str, **fields: Any) -> None:
        self.log(event, severity="debug", **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.log(event, severity="info", **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.log(event, severity="warning", **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.log(event, severity="error", **fields)

    # ------------------------------------------------------------------ context configuration
    def configure_context(self, **changes: Any) -> None:
        """Update the session context; ``None`` clears ``user_id`` and ``role`` only."""

        for key, value in changes.items():
            if key not in SessionContext.__slots__:
                raise TypeError(f"Unknown log context field: {key}")
            if value is None and key not in ("user_id", "role"):
                continue
            if key == "environment":
                value = value.lower()
            setattr(self._context, key, value)

    def set_page(self, page: str) -> None:
        self._context.page = page

    def set_level(self, level: str) -> None:
        self._logger.setLevel(severity_level(level))
