"""
Key-value store adapters for registration records.

The registration core only needs three primitives: point get, point set and
prefix scan. There are no transactions, so any check-then-write done on top
of these is racy unless the caller adds its own guard.

Values are JSON objects. Every backend failure surfaces as StorageError so
callers can decide whether it is fatal (writes) or tolerable (check scans).
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

import redis.asyncio as redis

from registration_api.core.exceptions import StorageError
from registration_api.core.logging import get_logger

logger = get_logger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class KeyValueStore(ABC):
    """Interface for the registration storage backend."""

    name: str = "abstract"

    @abstractmethod
    async def get(self, key: str) -> Optional[dict[str, Any]]:
        """Return the value stored at key, or None if absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: dict[str, Any]) -> None:
        """Store value at key, overwriting any previous value."""
        ...

    @abstractmethod
    async def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        """Return every value whose key starts with prefix, in backend order."""
        ...

    async def stats(self) -> dict[str, Any]:
        return {"backend": self.name, "status": "ok"}


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-backed store. One string key per record holding JSON.

    Prefix scan uses SCAN + MGET. SCAN order is arbitrary, so callers
    must not rely on insertion order.
    """

    name = "redis"

    def __init__(self, client: redis.Redis, scan_count: int = 500):
        self.redis = client
        self.scan_count = scan_count

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        try:
            raw = await self.redis.get(key)
        except redis.RedisError as e:
            raise StorageError(f"read failed for {key}") from e
        return _decode(key, raw) if raw is not None else None

    async def set(self, key: str, value: dict[str, Any]) -> None:
        try:
            await self.redis.set(key, json.dumps(value, ensure_ascii=False))
        except redis.RedisError as e:
            raise StorageError(f"write failed for {key}") from e

    async def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", prefix) + "*"
        try:
            keys = [key async for key in self.redis.scan_iter(match=pattern, count=self.scan_count)]
            if not keys:
                return []
            raws = await self.redis.mget(keys)
        except redis.RedisError as e:
            raise StorageError(f"prefix scan failed for {prefix}") from e

        # a key can expire or vanish between SCAN and MGET
        return _decode_scan((key, raw) for key, raw in zip(keys, raws) if raw is not None)

    async def stats(self) -> dict[str, Any]:
        try:
            await self.redis.ping()
            return {"backend": self.name, "status": "connected"}
        except redis.RedisError as e:
            return {"backend": self.name, "status": "error", "error": str(e)}


class MemoryKeyValueStore(KeyValueStore):
    """
    In-process store for development and tests.
    Preserves insertion order, so prefix scans come back chronological.
    """

    name = "memory"

    def __init__(self):
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        raw = self._data.get(key)
        return _decode(key, raw) if raw is not None else None

    async def set(self, key: str, value: dict[str, Any]) -> None:
        self._data[key] = json.dumps(value, ensure_ascii=False)

    async def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        return _decode_scan((key, raw) for key, raw in self._data.items() if key.startswith(prefix))

    def __len__(self) -> int:
        return len(self._data)


def _decode(key: str, raw: str) -> dict[str, Any]:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.error("store_value_corrupt", key=key, error=str(e))
        raise StorageError(f"corrupt value at {key}") from e


def _decode_scan(items: Iterable[tuple[str, str]]) -> list[dict[str, Any]]:
    """Decode scan results, dropping values that are not JSON objects."""
    values = []
    for key, raw in items:
        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.error("store_value_corrupt", key=key, error=str(e))
            continue
        if not isinstance(value, dict):
            logger.error("store_value_corrupt", key=key, error="not a JSON object")
            continue
        values.append(value)
    return values
