"""Derived statistics over the service mirror."""

from datetime import datetime
from typing import Iterable, Optional

from dashboard.models import AVG_RESPONSE_TIME_PLACEHOLDER_MS, ServiceInstance, Statistics


def compute_statistics(instances: Iterable[ServiceInstance], now: Optional[datetime] = None) -> Statistics:
    """
    Aggregate counts for the dashboard header.

    Service counts are by distinct service name; online services only count
    names that have at least one UP instance.
    """
    instances = list(instances)
    service_names = {s.service_name for s in instances}
    online_names = {s.service_name for s in instances if s.is_up}

    return Statistics(
        total_services=len(service_names),
        online_services=len(online_names),
        total_instances=len(instances),
        avg_response_time=AVG_RESPONSE_TIME_PLACEHOLDER_MS,
        last_update_time=now or datetime.now(),
    )
