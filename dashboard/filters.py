"""Filtered view of the mirror for the service table."""

from typing import Iterable, List

from dashboard.models import STATUS_FILTER_ALL, ServiceInstance


def matches(service: ServiceInstance, search_query: str = "", status_filter: str = STATUS_FILTER_ALL) -> bool:
    query = (search_query or "").lower()
    if query not in service.service_name.lower():
        return False
    return status_filter in (STATUS_FILTER_ALL, None, "") or service.status == status_filter


def filter_services(
    instances: Iterable[ServiceInstance],
    search_query: str = "",
    status_filter: str = STATUS_FILTER_ALL,
) -> List[ServiceInstance]:
    """Instances whose name contains search_query (any case) and whose status matches; order kept."""
    return [s for s in instances if matches(s, search_query, status_filter)]
