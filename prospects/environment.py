from __future__ import annotations

import locale
import logging
from dataclasses import dataclass
from typing import Protocol, Tuple

from .config import prospects_config

logger = logging.getLogger("prospects.environment")

Position = Tuple[str, str]


class Environment(Protocol):
    """Best-effort reads of the client's ambient context."""

    def current_locale(self) -> str | None: ...

    def referring_page(self) -> str | None: ...

    def current_position(self) -> Position | None: ...


def _language_tag(raw: str | None) -> str | None:
    if not raw:
        return None
    # "en_US.UTF-8" -> "en-US"
    tag = raw.split(".", 1)[0].split("@", 1)[0].strip()
    if not tag or tag in {"C", "POSIX"}:
        return None
    return tag.replace("_", "-")


class SystemEnvironment:
    """Locale and referrer from configuration, falling back to the process locale."""

    def current_locale(self) -> str | None:
        configured = prospects_config().language
        if configured:
            return configured
        try:
            name = locale.getlocale()[0]
        except ValueError as exc:
            logger.debug("event=locale_unavailable error=%s", exc)
            return None
        return _language_tag(name)

    def referring_page(self) -> str | None:
        return prospects_config().page_referrer or None

    def current_position(self) -> Position | None:
        return None


@dataclass(frozen=True)
class StaticEnvironment:
    locale: str | None = None
    referrer: str | None = None
    position: Position | None = None

    def current_locale(self) -> str | None:
        return self.locale or None

    def referring_page(self) -> str | None:
        return self.referrer or None

    def current_position(self) -> Position | None:
        return self.position


__all__ = ["Environment", "Position", "SystemEnvironment", "StaticEnvironment"]
