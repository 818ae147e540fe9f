"""In-process publish/subscribe channel between tabs."""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, List

from .logging import StructuredLogger

DASHBOARD_REFRESH = "dashboard.refresh"

Handler = Callable[[Dict[str, Any]], None]


class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`; calling it unsubscribes."""

    def __init__(self, bus: "EventBus", topic: str, handler: Handler) -> None:
        self._bus = bus
        self.topic = topic
        self.handler = handler
        self.active = True

    def __call__(self) -> None:
        self.unsubscribe()

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._bus._remove(self)


class EventBus:
    """Topic based bus.

    Each publish delivers to a snapshot of the current subscribers, so a
    handler that subscribes or unsubscribes while being called does not
    receive the same event twice. Handler failures are logged and never
    reach the publisher.
    """

    def __init__(self, logger: StructuredLogger | None = None) -> None:
        self._logger = logger
        self._lock = threading.Lock()
        self._subscribers: DefaultDict[str, List[Subscription]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> Subscription:
        subscription = Subscription(self, topic, handler)
        with self._lock:
            self._subscribers[topic].append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.topic, [])
            if subscription in subscribers:
                subscribers.remove(subscription)

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, []))

    def publish(self, topic: str, **payload: Any) -> int:
        """Deliver ``payload`` to every subscriber of ``topic``; returns the delivery count."""

        with self._lock:
            snapshot = list(self._subscribers.get(topic, []))
        delivered = 0
        for subscription in snapshot:
            if not subscription.active:
                continue
            try:
                subscription.handler(dict(payload))
            except Exception as error:  # noqa: BLE001 - subscribers never break publishers
                if self._logger is not None:
                    self._logger.error("events.handler.failed", topic=topic, error=str(error))
                continue
            delivered += 1
        if self._logger is not None:
            self._logger.debug("events.published", topic=topic, delivered=delivered)
        return delivered
