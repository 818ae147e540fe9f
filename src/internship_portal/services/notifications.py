"""Fire-and-forget toast notifications."""

from __future__ import annotations

import datetime as _dt
import itertools
from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

import solara

from .logging import StructuredLogger

ToastKind = Literal["success", "error", "info", "warning"]
MAX_TOASTS = 5

_ids = itertools.count(1)


@dataclass(frozen=True, slots=True)
class Toast:
    id: int
    kind: ToastKind
    message: str
    created_at: _dt.datetime = field(default_factory=lambda: _dt.datetime.now(_dt.timezone.utc))


class Notifier:
    """Reactive toast queue rendered by ``ToastStack``."""

    def __init__(self, logger: Optional[StructuredLogger] = None, *, limit: int = MAX_TOASTS) -> None:
        self._logger = logger
        self._limit = limit
        self.toasts: solara.Reactive[Tuple[Toast, ...]] = solara.reactive(())

    def notify(self, kind: ToastKind, message: str) -> Toast:
        toast = Toast(id=next(_ids), kind=kind, message=message)
        self.toasts.set((self.toasts.value + (toast,))[-self._limit :])
        if self._logger is not None:
            self._logger.debug("toast.shown", kind=kind, message=message)
        return toast

    def success(self, message: str) -> Toast:
        return self.notify("success", message)

    def error(self, message: str) -> Toast:
        return self.notify("error", message)

    def info(self, message: str) -> Toast:
        return self.notify("info", message)

    def warning(self, message: str) -> Toast:
        return self.notify("warning", message)

    def dismiss(self, toast_id: int) -> None:
        self.toasts.set(tuple(toast for toast in self.toasts.value if toast.id != toast_id))

    def clear(self) -> None:
        self.toasts.set(())

    @property
    def messages(self) -> Tuple[str, ...]:
        return tuple(toast.message for toast in self.toasts.value)
