"""Background work: API calls off the UI loop, polling, debouncing and cancellation."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, List, Optional, TypeVar

from solara.server import kernel_context

from . import telemetry
from .logging import StructuredLogger

T = TypeVar("T")


class TaskCancelled(Exception):
    """The owning scope was disposed while the task was in flight."""


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise TaskCancelled()


class LifetimeScope:
    """Issues cancellation tokens that are all cancelled by :meth:`dispose`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens: List[CancellationToken] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def token(self) -> CancellationToken:
        token = CancellationToken()
        with self._lock:
            if self._disposed:
                token.cancel()
            else:
                self._tokens = [existing for existing in self._tokens if not existing.cancelled]
                self._tokens.append(token)
        return token

    def dispose(self) -> None:
        with self._lock:
            self._disposed = True
            tokens, self._tokens = self._tokens, []
        for token in tokens:
            token.cancel()


def bind_context(callback: Callable[..., T]) -> Callable[..., T]:
    """Run ``callback`` inside the Solara kernel context active at bind time.

    Outside a Solara session (tests, scripts) the callback is returned as-is.
    """

    try:
        context = kernel_context.get_current_context()
    except RuntimeError:
        return callback

    def wrapper(*args: Any, **kwargs: Any) -> T:
        with context:
            return callback(*args, **kwargs)

    return wrapper


class Poller:
    """Fixed-interval background ticker.

    No tick starts once ``stop`` has been called. ``stop()`` also joins the
    worker thread, so a tick already in progress has finished when it
    returns; ``stop(wait=False)`` leaves that tick to finish on its own.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Any],
        *,
        logger: Optional[StructuredLogger] = None,
        name: str = "poller",
    ) -> None:
        self.interval = interval
        self._callback = bind_context(callback)
        self._logger = logger
        self._name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "Poller":
        if self.running:
            return self
        # Each worker owns its stop event, so an unjoined one never resumes.
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._stop,), name=self._name, daemon=True)
        self._thread.start()
        return self

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval):
            try:
                self._callback()
            except Exception as error:  # noqa: BLE001 - keep polling after a bad tick
                if self._logger is not None:
                    self._logger.warning("poller.tick.failed", poller=self._name, error=str(error))
            self.ticks += 1

    def stop(self, *, wait: bool = True) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join()


class Debouncer:
    """Collapses bursts of calls into one call after ``delay`` seconds of quiet."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    def __call__(self, callback: Callable[[], Any]) -> None:
        bound = bind_context(callback)
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, bound)
            self._timer.daemon = True
            self._timer.start()

    @property
    def pending(self) -> bool:
        timer = self._timer
        return timer is not None and timer.is_alive()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class PortalTasks:
    """Runs blocking API calls in worker threads with telemetry spans."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger = logger

    async def run(
        self,
        name: str,
        func: Callable[..., T],
        *args: Any,
        token: Optional[CancellationToken] = None,
        **metadata: Any,
    ) -> T:
        if token is not None:
            token.raise_if_cancelled()
        try:
            with telemetry.telemetry_span(self._logger, name, **metadata):
                result = await asyncio.to_thread(func, *args)
        except Exception as error:
            # Failures of a disposed owner are as stale as its results.
            if token is not None and token.cancelled:
                self._logger.debug("task.stale", task=name, error=str(error))
                raise TaskCancelled(name) from error
            raise
        if token is not None and token.cancelled:
            self._logger.debug("task.stale", task=name)
            raise TaskCancelled(name)
        return result
