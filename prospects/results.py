from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union

from .errors import ProspectError, ResponseParseError, ServerError, ServiceUnavailable

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .record import ProspectRecord

SERVICE_UNAVAILABLE_CODE = 503
SERVICE_UNAVAILABLE_MESSAGE = "Service unavailable"


class Outcome(str, Enum):
    SUCCESS = "success"
    INFORMATIONAL = "informational"
    REDIRECTION = "redirection"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    PARSE_ERROR = "parse_error"
    UNAVAILABLE = "unavailable"


def _is_between(value: int, low: int, high: int) -> bool:
    return low <= value <= high


def is_informational(code: int) -> bool:
    return _is_between(code, 100, 199)


def is_success(code: int) -> bool:
    return _is_between(code, 200, 299)


def is_redirection(code: int) -> bool:
    return _is_between(code, 300, 399)


def is_client_error(code: int) -> bool:
    return _is_between(code, 400, 499)


def is_server_error(code: int) -> bool:
    return _is_between(code, 500, 599)


def is_error(code: int) -> bool:
    return is_client_error(code) or is_server_error(code)


def classify_status(code: int) -> Outcome:
    if is_success(code):
        return Outcome.SUCCESS
    if is_informational(code):
        return Outcome.INFORMATIONAL
    if is_redirection(code):
        return Outcome.REDIRECTION
    if is_client_error(code):
        return Outcome.CLIENT_ERROR
    return Outcome.SERVER_ERROR


def service_unavailable_body(message: str) -> dict[str, Any]:
    return {
        "code": SERVICE_UNAVAILABLE_CODE,
        "code_message": SERVICE_UNAVAILABLE_MESSAGE,
        "message": message,
    }


@dataclass(frozen=True)
class Success:
    body: Any
    status_code: int
    record: "ProspectRecord"

    ok = True
    outcome = Outcome.SUCCESS


@dataclass(frozen=True)
class Failure:
    """Any completed submission that did not succeed.

    ``body`` is the parsed response body, the raw text when it could not be
    parsed, or the synthesized service-unavailable document.
    """

    outcome: Outcome
    status_code: int
    body: Any
    record: "ProspectRecord"
    error: Optional[ProspectError] = None

    ok = False

    def raise_error(self) -> None:
        if self.error is not None:
            raise self.error
        raise ServerError(self.status_code, self.body)


SubmitResult = Union[Success, Failure]


def unavailable(record: "ProspectRecord", message: str) -> Failure:
    return Failure(
        outcome=Outcome.UNAVAILABLE,
        status_code=SERVICE_UNAVAILABLE_CODE,
        body=service_unavailable_body(message),
        record=record,
        error=ServiceUnavailable(message),
    )


def unparseable(record: "ProspectRecord", status_code: int, text: str) -> Failure:
    return Failure(
        outcome=Outcome.PARSE_ERROR,
        status_code=status_code,
        body=text,
        record=record,
        error=ResponseParseError(status_code, text),
    )


def from_status(record: "ProspectRecord", status_code: int, body: Any) -> SubmitResult:
    outcome = classify_status(status_code)
    if outcome is Outcome.SUCCESS:
        return Success(body=body, status_code=status_code, record=record)
    error = ServerError(status_code, body) if is_error(status_code) else None
    return Failure(outcome=outcome, status_code=status_code, body=body, record=record, error=error)


__all__ = [
    "Outcome",
    "Success",
    "Failure",
    "SubmitResult",
    "SERVICE_UNAVAILABLE_CODE",
    "SERVICE_UNAVAILABLE_MESSAGE",
    "classify_status",
    "from_status",
    "unavailable",
    "unparseable",
    "service_unavailable_body",
    "is_informational",
    "is_success",
    "is_redirection",
    "is_client_error",
    "is_server_error",
    "is_error",
]
