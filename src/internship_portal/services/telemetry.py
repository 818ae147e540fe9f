"""Timing spans around backend calls."""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from .logging import StructuredLogger

SLOW_CALL_MS = 2000


@dataclass
class TelemetrySpan:
    name: str
    metadata: Dict[str, Any]
    started: float = field(default_factory=time.perf_counter)
    finished: Optional[float] = None
    outcome: str = "ok"

    @property
    def elapsed_ms(self) -> int:
        end = self.finished if self.finished is not None else time.perf_counter()
        return int((end - self.started) * 1000)


@contextlib.contextmanager
def telemetry_span(
    logger: StructuredLogger,
    name: str,
    *,
    slow_ms: int = SLOW_CALL_MS,
    **metadata: Any,
) -> Iterator[TelemetrySpan]:
    """Log start, failure and finish of ``name``; calls slower than ``slow_ms`` finish as warnings."""

    span = TelemetrySpan(name=name, metadata=metadata)
    logger.debug("telemetry.span.start", span=name, **metadata)
    try:
        yield span
    except Exception as error:
        span.outcome = "error"
        logger.warning("telemetry.span.error", span=name, error=str(error), error_type=type(error).__name__, **metadata)
        raise
    finally:
        span.finished = time.perf_counter()
        slow = span.outcome == "ok" and span.elapsed_ms >= slow_ms
        finish = logger.warning if slow else logger.info
        finish("telemetry.span.finish", span=name, outcome=span.outcome, duration_ms=span.elapsed_ms, slow=slow, **metadata)
