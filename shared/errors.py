"""
Registry error taxonomy.

Every failure of a registry call is turned into one of the RegistryError
subclasses below at the API boundary (RegistryClient). Dashboard operations
only ever catch RegistryError and turn it into a user-facing message with
describe_error().
"""

from typing import Any, Optional, Tuple

import requests

CONFLICT_MESSAGE = "Service already exists, do not register it twice"
NOT_FOUND_MESSAGE = "Service not found"
CONNECTIVITY_MESSAGE = "Network connection failed, please check your network settings"
GENERIC_FAILURE_MESSAGE = "Operation failed, please retry"


class RegistryError(Exception):
    """Base class for every registry failure surfaced to the dashboard."""

    severity = "error"

    def __init__(self, detail: str = "", status_code: Optional[int] = None, server_message: Optional[str] = None):
        super().__init__(detail or server_message or self.__class__.__name__)
        self.status_code = status_code
        self.server_message = server_message


class ValidationError(RegistryError):
    """Client-side pre-flight check failed; the registry was never called."""

    severity = "warning"


class ConflictError(RegistryError):
    """Duplicate registration (HTTP 409)."""


class NotFoundError(RegistryError):
    """Target service vanished between view and action (HTTP 404)."""


class ConnectivityError(RegistryError):
    """Request was sent but no response came back."""


class UnknownServerError(RegistryError):
    """Any other non-2xx status or an unexpected response body."""


def _server_message(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        message = payload.get("message")
        if message:
            return str(message)
    return None


def error_from_response(response: requests.Response) -> RegistryError:
    """Build the error for a response that arrived with a non-2xx status."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    status = response.status_code
    message = _server_message(payload)
    detail = f"HTTP {status}: {message or response.reason or 'error'}"

    if status == 409:
        return ConflictError(detail, status_code=status, server_message=message)
    if status == 404:
        return NotFoundError(detail, status_code=status, server_message=message)
    return UnknownServerError(detail, status_code=status, server_message=message)


def classify_error(exc: BaseException) -> RegistryError:
    """
    Map any exception raised while talking to the registry onto the taxonomy.

    - a response came back with an error status -> Conflict/NotFound/UnknownServer
    - the request went out but nothing came back -> ConnectivityError
    - anything else -> UnknownServerError
    """
    if isinstance(exc, RegistryError):
        return exc

    response = getattr(exc, "response", None)
    if isinstance(exc, requests.RequestException) and response is not None:
        return error_from_response(response)

    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return ConnectivityError(str(exc))

    return UnknownServerError(str(exc))


def describe_error(error: RegistryError, fallback: str = GENERIC_FAILURE_MESSAGE) -> Tuple[str, str]:
    """
    Return (message, severity) for showing an error to the user.

    Args:
        error: Classified registry error
        fallback: Operation-specific message used when the server gave none
    """
    if isinstance(error, ValidationError):
        return str(error), "warning"
    if isinstance(error, ConflictError):
        return CONFLICT_MESSAGE, "error"
    if isinstance(error, NotFoundError):
        return error.server_message or NOT_FOUND_MESSAGE, "error"
    if isinstance(error, ConnectivityError):
        return CONNECTIVITY_MESSAGE, "error"
    if isinstance(error, UnknownServerError):
        return error.server_message or fallback, "error"
    return fallback, "error"
