"""Shared fixtures: an in-memory stand-in for the registry API client."""

from typing import Any, Dict, List, Optional

import pytest

from dashboard.mirror import ServiceMirror
from dashboard.models import ServiceInstance
from dashboard.notifications import NotificationQueue
from dashboard.operations import SyncOperations
from dashboard.surfaces import Surfaces


def make_record(service_id: int, name: str = "order-service", status: str = "UP", **extra) -> Dict[str, Any]:
    record = {
        "id": service_id,
        "serviceName": name,
        "serviceVersion": "v1.0.0",
        "ip": "10.0.0.5",
        "port": 8081,
        "status": status,
        "registerTime": "2025-09-13T15:56:45",
        "lastHeartbeat": "2025-09-13T15:56:45",
    }
    record.update(extra)
    return record


def make_instance(service_id: int, name: str = "order-service", status: str = "UP", **extra) -> ServiceInstance:
    return ServiceInstance.model_validate(make_record(service_id, name, status, **extra))


class FakeRegistryClient:
    """
    Records every call. Set `fail_with` to an exception to make the next
    calls raise it; set per-method return values through attributes.
    """

    def __init__(self, services: Optional[List[Dict]] = None):
        self.services = services if services is not None else []
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None
        self.register_response: Optional[Dict] = None
        self.virtual_domain_response: Dict = {"success": True, "message": "ok"}
        self.resolve_response: Optional[Dict] = None
        self.closed = False

    def _record(self, name: str, *args):
        self.calls.append((name, *args))
        if self.fail_with is not None:
            raise self.fail_with

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def list_services(self):
        self._record("list_services")
        return self.services

    def register_service(self, service_name, service_version, ip, port):
        self._record("register_service", service_name, service_version, ip, port)
        if self.register_response is not None:
            return self.register_response
        return make_record(len(self.services) + 100, service_name, ip=ip, port=port, serviceVersion=service_version)

    def deregister_service(self, service_id):
        self._record("deregister_service", service_id)
        return {"success": True}

    def send_heartbeat(self, service_id):
        self._record("send_heartbeat", service_id)
        return {"success": True}

    def update_rate_limit(self, service_id, enabled, max_requests_per_second, error_message):
        self._record("update_rate_limit", service_id, enabled, max_requests_per_second, error_message)
        return {"success": True}

    def update_virtual_domain(self, service_id, virtual_domain):
        self._record("update_virtual_domain", service_id, virtual_domain)
        return self.virtual_domain_response

    def find_by_virtual_domain(self, virtual_domain):
        self._record("find_by_virtual_domain", virtual_domain)
        return self.resolve_response

    def close(self):
        self.closed = True


@pytest.fixture
def client():
    return FakeRegistryClient()


@pytest.fixture
def notifications():
    queue = NotificationQueue(duration_ms=60_000)
    yield queue
    queue.close()


@pytest.fixture
def mirror():
    return ServiceMirror()


@pytest.fixture
def operations(client, mirror, notifications):
    return SyncOperations(client, mirror, notifications, surfaces=Surfaces())
