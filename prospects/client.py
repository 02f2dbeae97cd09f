from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Tuple

import httpx

from .config import prospects_config
from .environment import Environment, SystemEnvironment
from .errors import ValidationError
from .metrics import REJECTION_COUNTER, SUBMISSION_COUNTER
from .payload import build_body, build_headers
from .record import Callback, LeadSource, ProspectRecord
from .results import Failure, Outcome, SubmitResult, Success, from_status, unavailable, unparseable

logger = logging.getLogger("prospects.client")

# Shared jar so cookies set by the endpoint go out with later submissions.
_COOKIES = httpx.Cookies()
_COOKIES_LOCK = threading.Lock()

# Errors raised while building or sending the request; each becomes a 503 result.
_REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL, UnicodeError, ValueError, TypeError)

_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


def _default_timeout() -> httpx.Timeout:
    config = prospects_config()
    return httpx.Timeout(
        connect=config.connect_timeout,
        read=config.timeout,
        write=config.timeout,
        pool=config.connect_timeout,
    )


def _background_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=prospects_config().max_workers,
                thread_name_prefix="prospects-submit",
            )
        return _executor


def shutdown_executor(wait: bool = True) -> None:
    global _executor
    with _executor_lock:
        executor, _executor = _executor, None
    if executor is not None:
        executor.shutdown(wait=wait)


def _client_cookies() -> httpx.Cookies:
    with _COOKIES_LOCK:
        return httpx.Cookies(_COOKIES)


def _remember_cookies(cookies: httpx.Cookies) -> None:
    with _COOKIES_LOCK:
        _COOKIES.update(cookies)


def _lead_source_label(record: ProspectRecord) -> str:
    return LeadSource(record.lead_source).value


def prepare_request(
    record: ProspectRecord, environment: Environment | None = None
) -> Tuple[str, str, dict[str, str]]:
    """Validate ``record`` and return ``(url, body, headers)`` for the POST."""

    missing = record.missing_fields()
    if missing:
        REJECTION_COUNTER.labels(_lead_source_label(record)).inc()
        logger.warning(
            "event=prospect_rejected lead_source=%s missing=%s",
            _lead_source_label(record),
            ",".join(missing),
        )
        raise ValidationError(
            "Prospect has missing required fields: " + ", ".join(missing),
            missing=tuple(missing),
        )
    env = environment if environment is not None else SystemEnvironment()
    body = build_body(record, env)
    return str(record.target_url), body, build_headers(record)


def interpret_response(record: ProspectRecord, response: httpx.Response) -> SubmitResult:
    status_code = response.status_code
    try:
        body = response.json()
    except ValueError:
        return unparseable(record, status_code, response.text)
    return from_status(record, status_code, body)


def _transport_failure(record: ProspectRecord, exc: Exception) -> Failure:
    message = str(exc) or type(exc).__name__
    return unavailable(record, message)


def _log_result(result: SubmitResult) -> None:
    record = result.record
    lead_source = _lead_source_label(record)
    SUBMISSION_COUNTER.labels(lead_source, result.outcome.value).inc()
    if isinstance(result, Success):
        logger.info(
            "event=prospect_submit status=%s outcome=%s app=%s lead_source=%s",
            result.status_code,
            result.outcome.value,
            record.application_name,
            lead_source,
        )
    elif result.outcome is Outcome.UNAVAILABLE:
        logger.error(
            "event=prospect_submit status=%s outcome=%s app=%s lead_source=%s error=%s",
            result.status_code,
            result.outcome.value,
            record.application_name,
            lead_source,
            result.error,
        )
    else:
        logger.warning(
            "event=prospect_submit status=%s outcome=%s app=%s lead_source=%s",
            result.status_code,
            result.outcome.value,
            record.application_name,
            lead_source,
        )


def _deliver(result: SubmitResult, on_success: Callback | None, on_error: Callback | None) -> None:
    callback = on_success if isinstance(result, Success) else on_error
    if callback is None:
        return
    try:
        callback(result.body, result.status_code, result.record)
    except Exception:
        logger.exception("event=prospect_callback_error outcome=%s", result.outcome.value)
        raise


def _post(
    record: ProspectRecord,
    url: str,
    body: str,
    headers: dict[str, str],
    client: httpx.Client | None,
) -> SubmitResult:
    try:
        if client is not None:
            response = client.post(url, content=body, headers=headers)
        else:
            with httpx.Client(
                timeout=_default_timeout(),
                follow_redirects=True,
                cookies=_client_cookies(),
            ) as owned:
                response = owned.post(url, content=body, headers=headers)
                _remember_cookies(owned.cookies)
    except _REQUEST_ERRORS as exc:
        result: SubmitResult = _transport_failure(record, exc)
    else:
        result = interpret_response(record, response)
    _log_result(result)
    return result


def _post_and_deliver(
    record: ProspectRecord,
    url: str,
    body: str,
    headers: dict[str, str],
    client: httpx.Client | None,
    on_success: Callback | None,
    on_error: Callback | None,
) -> SubmitResult:
    result = _post(record, url, body, headers, client)
    _deliver(result, on_success, on_error)
    return result


def submit_prospect(
    record: ProspectRecord,
    on_success: Callback | None = None,
    on_error: Callback | None = None,
    *,
    client: httpx.Client | None = None,
    environment: Environment | None = None,
) -> SubmitResult | Future[SubmitResult]:
    """Submit ``record`` once.

    Raises :class:`ValidationError` before any request when the record is not
    ready. Without callbacks the request blocks and the outcome is returned.
    With callbacks the request runs on a worker thread and a future is
    returned; exactly one of the callbacks matching the outcome is invoked.
    """

    url, body, headers = prepare_request(record, environment)
    if on_success is None and on_error is None:
        return _post(record, url, body, headers, client)
    return _background_executor().submit(
        _post_and_deliver, record, url, body, headers, client, on_success, on_error
    )


async def submit_prospect_async(
    record: ProspectRecord,
    on_success: Callback | None = None,
    on_error: Callback | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    environment: Environment | None = None,
) -> SubmitResult:
    url, body, headers = prepare_request(record, environment)
    try:
        if client is not None:
            response = await client.post(url, content=body, headers=headers)
        else:
            async with httpx.AsyncClient(
                timeout=_default_timeout(),
                follow_redirects=True,
                cookies=_client_cookies(),
            ) as owned:
                response = await owned.post(url, content=body, headers=headers)
                _remember_cookies(owned.cookies)
    except _REQUEST_ERRORS as exc:
        result: SubmitResult = _transport_failure(record, exc)
    else:
        result = interpret_response(record, response)
    _log_result(result)
    _deliver(result, on_success, on_error)
    return result


def reset_cookies() -> None:
    with _COOKIES_LOCK:
        _COOKIES.clear()


__all__ = [
    "prepare_request",
    "interpret_response",
    "submit_prospect",
    "submit_prospect_async",
    "shutdown_executor",
    "reset_cookies",
]
