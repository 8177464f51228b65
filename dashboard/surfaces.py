"""
Editing surfaces

State of the dialogs the user edits through: register form, rate-limit
editor, virtual-domain editor and the read-only detail view. Each surface
remembers the service it was opened for.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from dashboard.models import RateLimitConfig, RegistrationForm, ServiceInstance


class EditingSurface:
    name = "surface"

    def __init__(self):
        self.is_open = False
        self.service: Optional[ServiceInstance] = None
        self._reset()

    def _reset(self):
        pass

    def open(self, service: Optional[ServiceInstance] = None):
        self.service = service
        self.is_open = True

    def close(self):
        self.is_open = False
        self.service = None
        self._reset()

    @contextmanager
    def closing(self) -> Iterator["EditingSurface"]:
        """Close the surface when the block exits, whatever the outcome."""
        try:
            yield self
        finally:
            self.close()

    def to_wire(self) -> dict:
        return {
            "open": self.is_open,
            "service": self.service.to_wire() if self.service else None,
        }


class RegisterSurface(EditingSurface):
    name = "register"

    def _reset(self):
        self.form = RegistrationForm()

    def to_wire(self) -> dict:
        data = super().to_wire()
        data["form"] = self.form.to_wire()
        return data


class RateLimitSurface(EditingSurface):
    name = "rate_limit"

    def _reset(self):
        self.config = RateLimitConfig()

    def open(self, service: Optional[ServiceInstance] = None):
        super().open(service)
        self.config = RateLimitConfig.for_service(service) if service else RateLimitConfig()

    def to_wire(self) -> dict:
        data = super().to_wire()
        data["config"] = self.config.to_wire()
        return data


class VirtualDomainSurface(EditingSurface):
    name = "virtual_domain"

    def _reset(self):
        self.virtual_domain = ""

    def open(self, service: Optional[ServiceInstance] = None):
        super().open(service)
        self.virtual_domain = (service.virtual_domain if service else None) or ""

    def to_wire(self) -> dict:
        data = super().to_wire()
        data["virtualDomain"] = self.virtual_domain
        return data


class DetailSurface(EditingSurface):
    name = "detail"


class Surfaces:
    def __init__(self):
        self.register = RegisterSurface()
        self.rate_limit = RateLimitSurface()
        self.virtual_domain = VirtualDomainSurface()
        self.detail = DetailSurface()

    def all(self):
        return [self.register, self.rate_limit, self.virtual_domain, self.detail]

    def close_all(self):
        for surface in self.all():
            surface.close()

    def to_wire(self) -> dict:
        return {surface.name: surface.to_wire() for surface in self.all()}
