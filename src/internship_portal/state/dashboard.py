"""Supervisor overview: headline counts refreshed after other tabs mutate."""

from __future__ import annotations

from typing import Any, Dict, Optional

import solara

from internship_portal.models.portal import DashboardStats
from internship_portal.services.api import AuthenticationError
from internship_portal.services.events import DASHBOARD_REFRESH, Subscription
from internship_portal.services.tasks import Debouncer, TaskCancelled
from internship_portal.state.base import ListController, PortalServices


class DashboardController(ListController):
    name = "dashboard"

    def __init__(self, services: PortalServices) -> None:
        super().__init__(services)
        self.stats: solara.Reactive[DashboardStats] = solara.reactive(DashboardStats())
        self.loading: solara.Reactive[bool] = solara.reactive(False)
        self.refresh_count = 0
        self._subscription: Optional[Subscription] = None
        # Bursts of refresh requests collapse into one fetch off the publisher's loop.
        self._refresher = Debouncer(0.05)

    def activate(self) -> None:
        """Listen for refresh requests until :meth:`dispose`."""

        if self._subscription is None or not self._subscription.active:
            self._subscription = self.bus.subscribe(DASHBOARD_REFRESH, self._on_refresh)

    def _on_refresh(self, payload: Dict[str, Any]) -> None:
        if self.disposed:
            return
        self.refresh_count += 1
        self.logger.debug("dashboard.refresh.requested", source=payload.get("source"))
        self._refresher(self.load)

    async def refresh(self) -> None:
        token = self.scope.token()
        self.loading.set(True)
        try:
            stats = await self.tasks.run("dashboard.stats.fetch", self.api.get_dashboard_stats, token=token)
        except TaskCancelled:
            return
        except AuthenticationError:
            self.loading.set(False)
            self._session_expired()
            return
        except Exception as error:  # noqa: BLE001 - zeroed stats keep the overview usable
            self.logger.error("dashboard.stats.fetch.failed", error=str(error))
            self.notifier.error("Failed to load dashboard statistics")
            self.stats.set(DashboardStats())
            self.loading.set(False)
            return
        self.stats.set(stats)
        self.loading.set(False)

    def dispose(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.unsubscribe()
        self._refresher.cancel()
        super().dispose()
