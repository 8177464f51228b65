"""
Dashboard Models

Pydantic models for everything the dashboard renders. The registry speaks
camelCase JSON; attributes here are snake_case and mapped through aliases, so
records round-trip unchanged with model_validate()/to_wire().
"""

import enum
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

STATUS_UP = "UP"
STATUS_FILTER_ALL = "all"

# No latency data is reported by the registry yet; shown as-is until it is.
AVG_RESPONSE_TIME_PLACEHOLDER_MS = 41

DEFAULT_RATE_LIMIT_MESSAGE = "Service is busy, please try again later"


# ============================================================================
# ENUM DEFINITIONS
# ============================================================================

class Severity(str, enum.Enum):
    """Notification severity"""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class SchedulerState(str, enum.Enum):
    """Auto-refresh scheduler state"""
    STOPPED = "STOPPED"
    RUNNING = "RUNNING"


# ============================================================================
# MODEL DEFINITIONS
# ============================================================================

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class ServiceInstance(CamelModel):
    """One registered service instance as stored by the registry"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: int
    service_name: str
    service_version: str = ""
    ip: str = ""
    port: int = 0
    status: Optional[str] = STATUS_UP  # Anything other than UP, None included, counts as offline
    register_time: Optional[datetime] = None
    last_heartbeat: Optional[datetime] = None
    rate_limit_enabled: Optional[bool] = None
    max_requests_per_second: Optional[int] = Field(default=None, ge=0)
    rate_limit_error_message: Optional[str] = None
    virtual_domain: Optional[str] = None

    @property
    def is_up(self) -> bool:
        return self.status == STATUS_UP


class Statistics(CamelModel):
    """Aggregate counters derived from the mirror"""
    total_services: int = 0
    online_services: int = 0
    total_instances: int = 0
    avg_response_time: int = AVG_RESPONSE_TIME_PLACEHOLDER_MS
    last_update_time: datetime = Field(default_factory=datetime.now)


class Notification(CamelModel):
    """Snapshot of the single transient message shown to the user"""
    message: str = ""
    severity: Severity = Severity.INFO
    sequence: int = 0
    visible: bool = False


class RegistrationForm(CamelModel):
    """Register form fields exactly as typed by the user"""
    service_name: str = ""
    service_version: str = ""
    ip: str = ""
    port: Union[str, int] = ""


class RateLimitConfig(CamelModel):
    enabled: bool = False
    max_requests_per_second: int = Field(default=0, ge=0)
    error_message: str = DEFAULT_RATE_LIMIT_MESSAGE

    @classmethod
    def for_service(cls, service: ServiceInstance) -> "RateLimitConfig":
        return cls(
            enabled=service.rate_limit_enabled or False,
            max_requests_per_second=service.max_requests_per_second or 0,
            error_message=service.rate_limit_error_message or DEFAULT_RATE_LIMIT_MESSAGE,
        )


class RefreshConfig(CamelModel):
    enabled: bool = False
    interval_ms: int = Field(default=5000, gt=0)
