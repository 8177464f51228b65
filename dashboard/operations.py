"""
Sync Operations

Every user- or scheduler-triggered action runs the same way:
validate -> "in progress" notice -> registry call -> mirror update + success
notice, or a classified error notice. No RegistryError leaves this module.
"""

import logging
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pydantic

from dashboard.mirror import ServiceMirror
from dashboard.models import RegistrationForm, ServiceInstance, Severity, STATUS_UP
from dashboard.notifications import NotificationQueue
from dashboard.surfaces import Surfaces
from shared.errors import (
    RegistryError,
    UnknownServerError,
    ValidationError,
    describe_error,
)
from shared.registry_client import RegistryClient

logger = logging.getLogger(__name__)

IPV4_PATTERN = re.compile(
    r"^((25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)\.){3}(25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)$"
)

ConfirmGate = Callable[[ServiceInstance], bool]


def parse_port(value: Any) -> int:
    try:
        port = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Please enter a valid port number (1-65535)") from None
    if port < 1 or port > 65535:
        raise ValidationError("Please enter a valid port number (1-65535)")
    return port


def validate_registration(form: RegistrationForm) -> Tuple[str, str, str, int]:
    """
    Check a register form before anything is sent.
    
    Returns:
        (service_name, service_version, ip, port) trimmed and typed
    
    Raises:
        ValidationError: With the message to show the user
    """
    fields = [form.service_name, form.service_version, form.ip, form.port]
    if not all(str(value).strip() for value in fields):
        raise ValidationError("Please fill in all service fields")
    
    port = parse_port(form.port)
    
    ip = form.ip.strip()
    if not IPV4_PATTERN.match(ip):
        raise ValidationError("Please enter a valid IPv4 address")
    
    return form.service_name.strip(), form.service_version.strip(), ip, port


def parse_instance(payload: Any) -> ServiceInstance:
    try:
        return ServiceInstance.model_validate(payload)
    except pydantic.ValidationError as e:
        raise UnknownServerError(f"Unexpected service record: {e.error_count()} invalid field(s)") from e


class SyncOperations:
    """
    Orchestrates registry calls, mirror updates and notifications.
    """
    
    def __init__(
        self,
        client: RegistryClient,
        mirror: ServiceMirror,
        notifications: NotificationQueue,
        surfaces: Optional[Surfaces] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.mirror = mirror
        self.notifications = notifications
        self.surfaces = surfaces or Surfaces()
        self._clock = clock
    
    def _notify(self, message: str, severity: Severity = Severity.INFO, silent: bool = False):
        if not silent:
            self.notifications.emit(message, severity)
    
    def _fail(self, action: str, error: RegistryError, fallback: str, silent: bool = False):
        message, severity = describe_error(error, fallback)
        if silent:
            logger.warning(f"{action} failed (suppressed): {error}")
            return
        log = logger.warning if severity == "warning" else logger.error
        log(f"{action} failed: {error}")
        self.notifications.emit(message, severity)
    
    # -------------------------------------------------
    # Refresh
    # -------------------------------------------------
    
    def refresh(self, silent: bool = False) -> bool:
        """
        Replace the mirror with the registry's current list.
        
        Args:
            silent: Scheduler-triggered; no notifications at all, failures are only logged
        """
        self._notify("Refreshing service status...", silent=silent)
        try:
            payload = self.client.list_services()
        except RegistryError as e:
            self._fail("Refresh", e, "Failed to refresh service status, please retry", silent=silent)
            return False
        
        instances = self._parse_listing(payload or [])
        self.mirror.replace_all(instances)
        logger.debug(f"Refreshed {len(instances)} instances (silent={silent})")
        self._notify("Service status refreshed", Severity.SUCCESS, silent=silent)
        return True

    def _parse_listing(self, payload: List[Any]) -> List[ServiceInstance]:
        """Parse a service listing, skipping records that do not validate."""
        instances = []
        for item in payload:
            try:
                instances.append(parse_instance(item))
            except UnknownServerError as e:
                record_id = item.get("id") if isinstance(item, dict) else None
                logger.warning(f"Skipping service record {record_id}: {e}")
        return instances

    # -------------------------------------------------
    # Register / deregister
    # -------------------------------------------------
    
    def register(self, form: Union[RegistrationForm, Dict, None] = None) -> Optional[ServiceInstance]:
        """
        Register a service from a form (defaults to the register surface's form).
        
        Returns:
            The server's record, or None if validation or the call failed
        """
        if form is None:
            form = self.surfaces.register.form
        elif not isinstance(form, RegistrationForm):
            try:
                form = RegistrationForm.model_validate(form)
            except pydantic.ValidationError:
                error = ValidationError("Please fill in all service fields")
                self._fail("Register", error, str(error))
                return None
        
        try:
            service_name, service_version, ip, port = validate_registration(form)
        except ValidationError as e:
            self._fail("Register", e, str(e))
            return None
        
        self._notify("Registering service...")
        try:
            payload = self.client.register_service(service_name, service_version, ip, port)
            instance = parse_instance(payload)
        except RegistryError as e:
            self._fail("Register", e, "Failed to register service, please retry")
            return None
        
        self.mirror.insert(instance)
        self._notify(f"Service '{service_name}' registered", Severity.SUCCESS)
        self.surfaces.register.close()
        return instance
    
    def deregister(self, service: ServiceInstance, confirm: ConfirmGate) -> bool:
        """
        Remove a service after the user confirms.
        
        Args:
            service: Instance to remove
            confirm: Yes/no gate; returning False cancels without any call
        """
        if not confirm(service):
            logger.debug(f"Deregister of {service.id} cancelled by user")
            return False
        
        self._notify(f"Deregistering service '{service.service_name}'...")
        try:
            self.client.deregister_service(service.id)
        except RegistryError as e:
            self._fail("Deregister", e, "Failed to deregister service, please retry")
            return False
        
        self.mirror.remove_by_id(service.id)
        self._notify(f"Service '{service.service_name}' deregistered", Severity.SUCCESS)
        return True
    
    # -------------------------------------------------
    # In-place updates
    # -------------------------------------------------
    
    def heartbeat(self, service: ServiceInstance) -> bool:
        """Send a heartbeat; on success mark the record UP with a fresh timestamp."""
        self._notify(f"Sending heartbeat to service '{service.service_name}'...")
        try:
            self.client.send_heartbeat(service.id)
        except RegistryError as e:
            self._fail("Heartbeat", e, "Failed to send heartbeat, please retry")
            return False
        
        self.mirror.update_by_id(service.id, {
            "last_heartbeat": self._clock(),
            "status": STATUS_UP,
        })
        self._notify(f"Heartbeat for service '{service.service_name}' updated", Severity.SUCCESS)
        return True
    
    def save_rate_limit(self) -> bool:
        """Save the rate-limit surface's settings for its service, then close it."""
        surface = self.surfaces.rate_limit
        if surface.service is None:
            return False
        
        service_id = surface.service.id
        config = surface.config
        self._notify("Saving rate limit settings...")
        try:
            self.client.update_rate_limit(
                service_id,
                enabled=config.enabled,
                max_requests_per_second=config.max_requests_per_second,
                error_message=config.error_message,
            )
        except RegistryError as e:
            self._fail("Rate limit save", e, "Failed to save rate limit settings, please retry")
            return False
        
        self.mirror.update_by_id(service_id, {
            "rate_limit_enabled": config.enabled,
            "max_requests_per_second": config.max_requests_per_second,
            "rate_limit_error_message": config.error_message,
        })
        self._notify("Rate limit settings saved", Severity.SUCCESS)
        surface.close()
        return True
    
    def save_virtual_domain(self) -> bool:
        """
        Save the virtual-domain surface's value; an empty value clears the domain.
        
        The registry answers with {"success": bool, "message": ...}; the flag,
        not the HTTP status, decides the outcome. The surface closes either way.
        """
        surface = self.surfaces.virtual_domain
        if surface.service is None or surface.service.id is None:
            self._notify("Invalid service information", Severity.ERROR)
            return False
        
        with surface.closing():
            service_id = surface.service.id
            virtual_domain = surface.virtual_domain.strip() or None
            try:
                result = self.client.update_virtual_domain(service_id, virtual_domain or "")
                if not result.get("success"):
                    raise UnknownServerError(
                        "Registry rejected virtual domain",
                        server_message=result.get("message"),
                    )
            except RegistryError as e:
                self._fail("Virtual domain save", e, "Failed to set virtual domain")
                return False
            
            self.mirror.update_by_id(service_id, {"virtual_domain": virtual_domain})
            self._notify("Virtual domain saved", Severity.SUCCESS)
            return True
    
    # -------------------------------------------------
    # Lookups
    # -------------------------------------------------
    
    def resolve_virtual_domain(self, virtual_domain: str) -> Optional[ServiceInstance]:
        """Find the online instance behind a virtual domain and report it."""
        virtual_domain = (virtual_domain or "").strip()
        if not virtual_domain:
            self._fail("Resolve", ValidationError("Please enter a virtual domain"), "")
            return None
        
        try:
            instance = parse_instance(self.client.find_by_virtual_domain(virtual_domain))
        except RegistryError as e:
            self._fail("Resolve", e, "Failed to resolve virtual domain")
            return None
        
        self._notify(
            f"{virtual_domain} -> {instance.service_name} at {instance.ip}:{instance.port}",
            Severity.SUCCESS,
        )
        return instance
