from __future__ import annotations

from typing import Any


class ProspectError(Exception):
    """Base class for prospect submission failures."""


class ValidationError(ProspectError, ValueError):
    """Raised when a record is not ready to be submitted."""

    def __init__(self, message: str, *, missing: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.missing = missing


class ServerError(ProspectError):
    """The endpoint answered with a 4xx/5xx status."""

    def __init__(self, status_code: int, body: Any = None) -> None:
        super().__init__(f"server responded with status {status_code}")
        self.status_code = status_code
        self.body = body


class ResponseParseError(ServerError):
    """The endpoint answered with a body that is not valid JSON."""

    def __init__(self, status_code: int, text: str = "") -> None:
        ProspectError.__init__(self, f"unparseable response body for status {status_code}")
        self.status_code = status_code
        self.body = text


class ServiceUnavailable(ProspectError):
    """The request never completed at the transport level."""

    status_code = 503

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StorageUnavailable(ProspectError):
    """Raised by identifier stores when the backing storage cannot be used."""


__all__ = [
    "ProspectError",
    "ValidationError",
    "ServerError",
    "ResponseParseError",
    "ServiceUnavailable",
    "StorageUnavailable",
]
