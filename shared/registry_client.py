"""
Registry Client

HTTP client for the service registry REST API consumed by the dashboard.
Every failure leaves this module as a shared.errors.RegistryError subclass,
so callers never have to inspect requests exceptions or response bodies.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from shared.errors import (
    RegistryError,
    UnknownServerError,
    classify_error,
    error_from_response,
)

logger = logging.getLogger(__name__)


class RegistryClient:
    """
    Client for the service registry API.
    
    Usage:
        client = RegistryClient(base_url="http://127.0.0.1:8080")
        
        services = client.list_services()
        record = client.register_service("order-service", "v1", "10.0.0.5", 8081)
        client.send_heartbeat(record["id"])
        client.deregister_service(record["id"])
        client.close()
    """
    
    def __init__(self, base_url: str, timeout: float = 10, session: Optional[requests.Session] = None):
        """
        Initialize registry client.
        
        Args:
            base_url: Registry base URL (e.g., 'http://127.0.0.1:8080')
            timeout: Per-request timeout in seconds
            session: Optional pre-built requests session (tests, custom adapters)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
    
    def close(self):
        self._session.close()
    
    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise classify_error(e) from e
    
    def _call(self, method: str, path: str, **kwargs) -> Any:
        """Send a request, raise on non-2xx, return the decoded body (None if empty)."""
        response = self._send(method, path, **kwargs)
        if not response.ok:
            error = error_from_response(response)
            logger.warning(f"{method} {path} rejected: {error}")
            raise error
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UnknownServerError(f"Malformed response from {path}: {e}") from e
    
    def list_services(self) -> List[Dict]:
        """
        Fetch every registered service instance.
        
        Returns:
            List of service instance dicts (empty when the registry returns nothing)
        """
        payload = self._call("GET", "/api/services")
        if not payload:
            return []
        if not isinstance(payload, list):
            raise UnknownServerError(f"Expected a list of services, got {type(payload).__name__}")
        return payload
    
    def register_service(self, service_name: str, service_version: str, ip: str, port: int) -> Dict:
        """
        Register a new service instance.
        
        Returns:
            The stored record, including the server-assigned id
        
        Raises:
            ConflictError: Service already registered (HTTP 409)
        """
        payload = self._call("POST", "/api/services", json={
            "serviceName": service_name,
            "serviceVersion": service_version,
            "ip": ip,
            "port": port,
        })
        if not isinstance(payload, dict):
            raise UnknownServerError("Registration response did not contain a service record")
        logger.info(f"Registered {service_name} at {ip}:{port} (id={payload.get('id')})")
        return payload
    
    def deregister_service(self, service_id: int) -> Any:
        result = self._call("DELETE", f"/api/services/{service_id}")
        logger.info(f"Deregistered service {service_id}")
        return result
    
    def send_heartbeat(self, service_id: int) -> Any:
        return self._call("PUT", f"/api/services/{service_id}/heartbeat")
    
    def update_rate_limit(self, service_id: int, enabled: bool, max_requests_per_second: float, error_message: str) -> Any:
        """Store a service's rate-limit settings; values travel as query parameters."""
        return self._call("PUT", f"/api/rate-limit/{service_id}", params={
            "enabled": "true" if enabled else "false",
            "maxRequestsPerSecond": max_requests_per_second,
            "errorMessage": error_message,
        })
    
    def update_virtual_domain(self, service_id: int, virtual_domain: Optional[str]) -> Dict:
        """
        Set or clear (empty string) the virtual domain of a service.
        
        The registry reports the outcome in the body's "success" flag, so error
        statuses are not raised here; the decoded body is returned as-is.
        Connection failures and undecodable bodies still raise RegistryError.
        """
        response = self._send(
            "PUT",
            f"/api/services/{service_id}/virtual-domain",
            params={"virtualDomain": virtual_domain or ""},
        )
        try:
            payload = response.json()
        except ValueError as e:
            raise UnknownServerError(
                f"HTTP {response.status_code}: virtual domain response was not JSON",
                status_code=response.status_code,
            ) from e
        if not isinstance(payload, dict):
            raise UnknownServerError("Virtual domain response was not an object", status_code=response.status_code)
        return payload
    
    def find_by_virtual_domain(self, virtual_domain: str) -> Dict:
        """
        Look up the online instance registered under a virtual domain.
        
        Raises:
            NotFoundError: No UP service uses this domain
        """
        payload = self._call("GET", f"/api/services/domain/{virtual_domain}")
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise UnknownServerError("Virtual domain lookup returned no service record")
        return payload["data"]


__all__ = ["RegistryClient", "RegistryError"]
