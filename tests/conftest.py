"""Test configuration utilities."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable
from urllib.parse import parse_qsl

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:  # pragma: no cover - path setup
    sys.path.insert(0, str(ROOT))

from prospects import client as prospects_client
from prospects.identity import IdentityProvider, MemoryStore, set_identity_provider

FIXED_ID = "6f1c2a9e-3b7d-4c1e-9a2b-5d8e7f6a4b3c"

_ENV_KEYS = (
    "PROSPECTS_URL",
    "PROSPECTS_APP_NAME",
    "PROSPECTS_TIMEOUT",
    "PROSPECTS_CONNECT_TIMEOUT",
    "PROSPECTS_REDIS_URL",
    "PROSPECTS_ID_FILE",
    "PROSPECTS_ID_KEY",
    "PROSPECTS_LANGUAGE",
    "PROSPECTS_PAGE_REFERRER",
    "PROSPECTS_MAX_WORKERS",
    "LOG_LEVEL",
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PROSPECTS_ID_FILE", str(tmp_path / "identity.json"))
    store = MemoryStore({"uuid": FIXED_ID})
    set_identity_provider(IdentityProvider(store))
    prospects_client.reset_cookies()
    yield store
    set_identity_provider(None)
    prospects_client.reset_cookies()


class RecordingHandler:
    """httpx MockTransport handler that remembers every request it served."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self._respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def form(self, index: int = -1) -> list[tuple[str, str]]:
        return parse_qsl(self.requests[index].content.decode("ascii"), keep_blank_values=True)


def json_response(status_code: int, body: Any) -> Callable[[httpx.Request], httpx.Response]:
    def _respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body)

    return _respond


@pytest.fixture
def recording() -> Callable[..., RecordingHandler]:
    def _factory(respond: Callable[[httpx.Request], httpx.Response]) -> RecordingHandler:
        return RecordingHandler(respond)

    return _factory
