"""Environment driven configuration for prospect submission."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 3.0
DEFAULT_ID_KEY = "uuid"
DEFAULT_ID_FILE = Path.home() / ".prospects" / "identity.json"
DEFAULT_MAX_WORKERS = 4
DEFAULT_LOG_LEVEL = "INFO"


def _coerce_int(value: str | None, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(str(value).strip() or default)
    except ValueError:
        return default


def _parse_duration(raw: str | None, *, default: float) -> float:
    if not raw:
        return default
    cleaned = raw.strip().lower()
    if not cleaned:
        return default
    if cleaned.endswith("s"):
        cleaned = cleaned[:-1]
    try:
        value = float(cleaned)
    except ValueError:
        return default
    if value <= 0:
        return default
    return value


def _normalize_url(raw: str | None) -> str:
    if not raw:
        return ""
    return raw.strip()


def _clean(raw: str | None) -> str:
    return (raw or "").strip()


@dataclass(frozen=True, slots=True)
class ProspectsConfig:
    target_url: str
    application_name: str
    timeout: float
    connect_timeout: float
    redis_url: str
    id_file: Path
    id_key: str
    language: str
    page_referrer: str
    max_workers: int
    log_level: str


def prospects_config() -> ProspectsConfig:
    """Read the current process environment into a :class:`ProspectsConfig`."""

    id_file_raw = _clean(os.getenv("PROSPECTS_ID_FILE"))
    max_workers = _coerce_int(os.getenv("PROSPECTS_MAX_WORKERS"), DEFAULT_MAX_WORKERS)
    if max_workers <= 0:
        max_workers = DEFAULT_MAX_WORKERS

    return ProspectsConfig(
        target_url=_normalize_url(os.getenv("PROSPECTS_URL")),
        application_name=_clean(os.getenv("PROSPECTS_APP_NAME")),
        timeout=_parse_duration(os.getenv("PROSPECTS_TIMEOUT"), default=DEFAULT_TIMEOUT_SECONDS),
        connect_timeout=_parse_duration(
            os.getenv("PROSPECTS_CONNECT_TIMEOUT"), default=DEFAULT_CONNECT_TIMEOUT_SECONDS
        ),
        redis_url=_clean(os.getenv("PROSPECTS_REDIS_URL")),
        id_file=Path(id_file_raw).expanduser() if id_file_raw else DEFAULT_ID_FILE,
        id_key=_clean(os.getenv("PROSPECTS_ID_KEY")) or DEFAULT_ID_KEY,
        language=_clean(os.getenv("PROSPECTS_LANGUAGE")),
        page_referrer=_clean(os.getenv("PROSPECTS_PAGE_REFERRER")),
        max_workers=max_workers,
        log_level=(_clean(os.getenv("LOG_LEVEL")) or DEFAULT_LOG_LEVEL).upper(),
    )


__all__ = [
    "ProspectsConfig",
    "prospects_config",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_CONNECT_TIMEOUT_SECONDS",
    "DEFAULT_ID_KEY",
    "DEFAULT_ID_FILE",
]
