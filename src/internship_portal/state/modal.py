"""Modal stack and page scroll lock."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

import solara

ModalSize = Literal["sm", "md", "lg", "xl"]

MODAL_WIDTHS = {
    "sm": 448,
    "md": 512,
    "lg": 672,
    "xl": 896,
}


def modal_width(size: str) -> int:
    return MODAL_WIDTHS.get(size, MODAL_WIDTHS["md"])


class ScrollLockLease:
    """One holder of the page scroll lock; releasing twice is a no-op."""

    def __init__(self, lock: "ScrollLock") -> None:
        self._lock = lock
        self.released = False

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        self._lock._release()


class ScrollLock:
    """Counted lock on page scrolling.

    The page is locked while at least one lease is held, so nested modals
    keep it locked until the last of them closes.
    """

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self.count: solara.Reactive[int] = solara.reactive(0)

    @property
    def locked(self) -> bool:
        return self.count.value > 0

    def acquire(self) -> ScrollLockLease:
        with self._mutex:
            self.count.set(self.count.value + 1)
        return ScrollLockLease(self)

    def _release(self) -> None:
        with self._mutex:
            self.count.set(max(0, self.count.value - 1))


@dataclass(frozen=True, slots=True)
class ModalDescriptor:
    modal_id: str
    title: Optional[str] = None
    size: ModalSize = "md"


class ModalManager:
    """Explicit stack of open modals.

    Opening pushes onto the stack; closing a modal also closes everything
    stacked above it. Only the top modal is interactive.
    """

    def __init__(self) -> None:
        self.stack: solara.Reactive[Tuple[ModalDescriptor, ...]] = solara.reactive(())

    def open(self, modal_id: str, *, title: Optional[str] = None, size: ModalSize = "md") -> ModalDescriptor:
        existing = self.get(modal_id)
        if existing is not None:
            return existing
        descriptor = ModalDescriptor(modal_id=modal_id, title=title, size=size)
        self.stack.set(self.stack.value + (descriptor,))
        return descriptor

    def close(self, modal_id: str) -> None:
        stack = self.stack.value
        for index, descriptor in enumerate(stack):
            if descriptor.modal_id == modal_id:
                self.stack.set(stack[:index])
                return

    def dismiss_top(self) -> Optional[ModalDescriptor]:
        stack = self.stack.value
        if not stack:
            return None
        self.stack.set(stack[:-1])
        return stack[-1]

    def close_all(self) -> None:
        if self.stack.value:
            self.stack.set(())

    def get(self, modal_id: str) -> Optional[ModalDescriptor]:
        for descriptor in self.stack.value:
            if descriptor.modal_id == modal_id:
                return descriptor
        return None

    def is_open(self, modal_id: str) -> bool:
        return self.get(modal_id) is not None

    @property
    def top(self) -> Optional[ModalDescriptor]:
        stack = self.stack.value
        return stack[-1] if stack else None

    def is_top(self, modal_id: str) -> bool:
        top = self.top
        return top is not None and top.modal_id == modal_id

    def depth(self, modal_id: str) -> int:
        for index, descriptor in enumerate(self.stack.value):
            if descriptor.modal_id == modal_id:
                return index
        return -1
