"""Stable per-device prospect identifier.

The identifier is read from a single named slot of a durable key-value
store and generated on first use. Stores only need ``get`` and ``set``; the
provider fails open when the store is unavailable, handing out an
identifier that is cached for the life of the process but not persisted.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Protocol

import redis as redis_sync
from redis import exceptions as redis_ex

from .config import DEFAULT_ID_KEY, prospects_config
from .errors import StorageUnavailable
from .metrics import IDENTITY_STORE_ERRORS_COUNTER

logger = logging.getLogger("prospects.identity")


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Process-local store, mostly useful for tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class FileStore:
    """JSON document on disk holding a flat string mapping."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageUnavailable(f"{self.path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("event=identity_file_corrupt path=%s", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".identity-", suffix=".json", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise StorageUnavailable(f"{self.path}: {exc}") from exc


class RedisStore:
    """Redis string keys; a dropped connection is retried once with a new client."""

    def __init__(self, url: str | None = None, *, client: redis_sync.Redis | None = None) -> None:
        if url is None and client is None:
            raise ValueError("RedisStore requires a url or a client")
        self.url = url
        self._client = client

    def _redis_client(self) -> redis_sync.Redis:
        if self._client is None:
            self._client = redis_sync.from_url(self.url, decode_responses=True)
        return self._client

    def _with_redis(self, func):
        last_error: Exception | None = None
        for _ in range(2):
            try:
                return func(self._redis_client())
            except redis_ex.ConnectionError as exc:
                last_error = exc
                if self.url is not None:
                    self._client = None
            except redis_ex.RedisError as exc:
                raise StorageUnavailable(str(exc)) from exc
        raise StorageUnavailable(str(last_error))

    def get(self, key: str) -> str | None:
        value = self._with_redis(lambda client: client.get(key))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        self._with_redis(lambda client: client.set(key, value))


def generate_id() -> str:
    """Return a random UUID version 4 string."""

    return str(uuid.uuid4())


class IdentityProvider:
    def __init__(self, store: KeyValueStore, *, key: str = DEFAULT_ID_KEY) -> None:
        self.store = store
        self.key = key
        self._cached: str | None = None

    def get_or_create_id(self) -> str:
        if self._cached:
            return self._cached

        try:
            existing = self.store.get(self.key)
        except StorageUnavailable as exc:
            IDENTITY_STORE_ERRORS_COUNTER.labels("get").inc()
            logger.warning("event=identity_store_unavailable operation=get error=%s", exc)
            self._cached = generate_id()
            return self._cached

        existing = (existing or "").strip()
        if existing:
            self._cached = existing
            return existing

        created = generate_id()
        try:
            self.store.set(self.key, created)
        except StorageUnavailable as exc:
            IDENTITY_STORE_ERRORS_COUNTER.labels("set").inc()
            logger.warning("event=identity_store_unavailable operation=set error=%s", exc)
        else:
            logger.info("event=identity_created key=%s", self.key)
        self._cached = created
        return created


def default_store() -> KeyValueStore:
    config = prospects_config()
    if config.redis_url:
        return RedisStore(config.redis_url)
    return FileStore(config.id_file)


_provider: IdentityProvider | None = None


def get_identity_provider() -> IdentityProvider:
    global _provider
    if _provider is None:
        _provider = IdentityProvider(default_store(), key=prospects_config().id_key)
    return _provider


def set_identity_provider(provider: IdentityProvider | None) -> None:
    global _provider
    _provider = provider


def reset_identity_provider() -> None:
    set_identity_provider(None)


def get_or_create_id() -> str:
    return get_identity_provider().get_or_create_id()


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "IdentityProvider",
    "generate_id",
    "default_store",
    "get_identity_provider",
    "set_identity_provider",
    "reset_identity_provider",
    "get_or_create_id",
]
