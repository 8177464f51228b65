"""
Dashboard application state

One AppState owns everything a dashboard view needs: the registry client,
the mirror, notifications, editing surfaces, the auto-refresh scheduler and
the current filter. It is created when a view mounts and torn down with
unmount() (or by leaving a `with` block), which stops the scheduler and
releases timers, listeners and the HTTP session.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Callable, List, Optional

from dashboard import config
from dashboard.filters import filter_services
from dashboard.formatting import format_heartbeat_age
from dashboard.mirror import ServiceMirror
from dashboard.models import RefreshConfig, STATUS_FILTER_ALL, ServiceInstance, Severity
from dashboard.notifications import NotificationQueue, STYLE_FOR_SEVERITY
from dashboard.operations import SyncOperations
from dashboard.scheduler import AutoRefreshScheduler
from dashboard.surfaces import Surfaces
from shared.registry_client import RegistryClient

logger = logging.getLogger(__name__)


class AppState:
    def __init__(
        self,
        client: Optional[RegistryClient] = None,
        base_url: str = config.REGISTRY_BASE_URL,
        timeout: float = config.REGISTRY_HTTP_TIMEOUT,
        refresh_interval_ms: int = config.REFRESH_INTERVAL_MS,
        notification_ms: int = config.NOTIFICATION_DURATION_MS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._owns_client = client is None
        self.client = client or RegistryClient(base_url, timeout=timeout)
        self._clock = clock

        self.mirror = ServiceMirror(clock=clock)
        self.notifications = NotificationQueue(duration_ms=notification_ms)
        self.surfaces = Surfaces()
        self.operations = SyncOperations(
            self.client,
            self.mirror,
            self.notifications,
            surfaces=self.surfaces,
            clock=clock,
        )
        self.scheduler = AutoRefreshScheduler(self._auto_refresh, interval_ms=refresh_interval_ms)

        self.search_query = ""
        self.status_filter = STATUS_FILTER_ALL
        self.mounted = False

    def _auto_refresh(self):
        self.operations.refresh(silent=True)

    # -------------------------------------------------
    # Lifecycle
    # -------------------------------------------------

    def mount(self, initial_refresh: bool = True):
        """Bring the view up; loads the mirror from the registry unless told not to."""
        self.mounted = True
        logger.info("Dashboard state mounted")
        if initial_refresh:
            self.operations.refresh()

    def unmount(self):
        """Tear the view down. Safe to call more than once."""
        self.scheduler.stop()
        self.notifications.close()
        self.surfaces.close_all()
        if self._owns_client:
            self.client.close()
        if self.mounted:
            logger.info("Dashboard state unmounted")
        self.mounted = False

    def __enter__(self) -> "AppState":
        self.mount()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unmount()
        return False

    # -------------------------------------------------
    # Auto refresh
    # -------------------------------------------------

    @property
    def refresh_config(self) -> RefreshConfig:
        return RefreshConfig(enabled=self.scheduler.running, interval_ms=self.scheduler.interval_ms)

    def toggle_auto_refresh(self) -> bool:
        """Flip auto refresh on/off. Returns the new enabled flag."""
        if self.scheduler.stop():
            self.notifications.emit("Auto refresh disabled", Severity.INFO)
            return False

        if self.scheduler.start():
            seconds = self.scheduler.interval_ms / 1000
            self.notifications.emit(f"Auto refresh enabled, every {seconds:g} seconds", Severity.SUCCESS)
            return True
        return self.scheduler.running

    # -------------------------------------------------
    # Filtered view
    # -------------------------------------------------

    def set_filter(self, search_query: Optional[str] = None, status_filter: Optional[str] = None):
        if search_query is not None:
            self.search_query = search_query
        if status_filter is not None:
            self.status_filter = status_filter or STATUS_FILTER_ALL

    def filtered_services(self) -> List[ServiceInstance]:
        return filter_services(self.mirror.instances(), self.search_query, self.status_filter)

    # -------------------------------------------------
    # Render-ready snapshot
    # -------------------------------------------------

    def _service_row(self, service: ServiceInstance, now: datetime, name_counts: Counter) -> dict:
        row = service.to_wire()
        row["instanceCount"] = name_counts[service.service_name]
        row["heartbeatAge"] = format_heartbeat_age(service.last_heartbeat, now) if service.last_heartbeat else ""
        return row

    def snapshot(self) -> dict:
        now = self._clock()
        notification = self.notifications.current
        css_class, icon = STYLE_FOR_SEVERITY[notification.severity]
        instances = self.mirror.instances()
        name_counts = Counter(s.service_name for s in instances)
        services = filter_services(instances, self.search_query, self.status_filter)
        return {
            "services": [self._service_row(s, now, name_counts) for s in services],
            "filter": {"searchQuery": self.search_query, "statusFilter": self.status_filter},
            "statistics": self.mirror.statistics.to_wire(),
            "notification": {**notification.to_wire(), "cssClass": css_class, "icon": icon},
            "autoRefresh": {**self.refresh_config.to_wire(), "state": self.scheduler.state.value},
            "surfaces": self.surfaces.to_wire(),
        }
