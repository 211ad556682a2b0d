"""
Tests for key-value store adapters.
"""

import json

import pytest
import redis.asyncio as redis

from registration_api.core.exceptions import StorageError
from registration_api.infrastructure.kv_store import MemoryKeyValueStore, RedisKeyValueStore


class FakeAsyncRedis:
    """Just enough of redis.asyncio.Redis for RedisKeyValueStore."""

    def __init__(self, data=None, error=None):
        self.data = dict(data or {})
        self.error = error
        self.scan_patterns = []

    async def get(self, key):
        if self.error:
            raise self.error
        return self.data.get(key)

    async def set(self, key, value):
        if self.error:
            raise self.error
        self.data[key] = value

    async def scan_iter(self, match=None, count=None):
        self.scan_patterns.append(match)
        if self.error:
            raise self.error
        prefix = match.rstrip("*")
        for key in list(self.data):
            if key.startswith(prefix):
                yield key

    async def mget(self, keys):
        # simulate a key deleted between SCAN and MGET
        return [self.data.get(key) if not key.endswith("gone") else None for key in keys]

    async def ping(self):
        if self.error:
            raise self.error
        return True


@pytest.mark.asyncio
async def test_memory_store_prefix_scan():
    store = MemoryKeyValueStore()
    await store.set("conference_registration:a", {"id": "a"})
    await store.set("other:b", {"id": "b"})
    await store.set("conference_registration:c", {"id": "c"})

    assert await store.get_by_prefix("conference_registration:") == [{"id": "a"}, {"id": "c"}]
    assert await store.get("other:b") == {"id": "b"}
    assert await store.get("missing") is None
    assert len(store) == 3


@pytest.mark.asyncio
async def test_redis_store_round_trip():
    client = FakeAsyncRedis()
    store = RedisKeyValueStore(client)

    await store.set("conference_registration:a", {"name": "Kovács János"})

    assert json.loads(client.data["conference_registration:a"]) == {"name": "Kovács János"}
    assert await store.get("conference_registration:a") == {"name": "Kovács János"}


@pytest.mark.asyncio
async def test_redis_prefix_scan_skips_vanished_keys():
    client = FakeAsyncRedis({
        "conference_registration:a": json.dumps({"id": "a"}),
        "conference_registration:gone": json.dumps({"id": "gone"}),
        "other:x": json.dumps({"id": "x"}),
    })
    store = RedisKeyValueStore(client)

    assert await store.get_by_prefix("conference_registration:") == [{"id": "a"}]
    assert client.scan_patterns == ["conference_registration:*"]


@pytest.mark.asyncio
async def test_redis_prefix_is_glob_escaped():
    client = FakeAsyncRedis()
    await RedisKeyValueStore(client).get_by_prefix("reg[1]*:")
    assert client.scan_patterns == [r"reg\[1\]\*:*"]


@pytest.mark.asyncio
async def test_redis_errors_become_storage_errors():
    store = RedisKeyValueStore(FakeAsyncRedis(error=redis.ConnectionError("down")))

    with pytest.raises(StorageError):
        await store.get_by_prefix("conference_registration:")
    with pytest.raises(StorageError):
        await store.set("conference_registration:a", {})
    with pytest.raises(StorageError):
        await store.get("conference_registration:a")


@pytest.mark.asyncio
async def test_corrupt_value_is_storage_error():
    store = RedisKeyValueStore(FakeAsyncRedis({"conference_registration:a": "{not json"}))

    with pytest.raises(StorageError):
        await store.get("conference_registration:a")


@pytest.mark.asyncio
async def test_redis_prefix_scan_skips_corrupt_values():
    client = FakeAsyncRedis({
        "conference_registration:a": json.dumps({"id": "a"}),
        "conference_registration:junk": "{not json",
        "conference_registration:list": json.dumps(["not", "an", "object"]),
    })

    records = await RedisKeyValueStore(client).get_by_prefix("conference_registration:")

    assert records == [{"id": "a"}]


@pytest.mark.asyncio
async def test_memory_prefix_scan_skips_corrupt_values():
    store = MemoryKeyValueStore()
    await store.set("conference_registration:a", {"id": "a"})
    store._data["conference_registration:junk"] = "{not json"

    assert await store.get_by_prefix("conference_registration:") == [{"id": "a"}]
    with pytest.raises(StorageError):
        await store.get("conference_registration:junk")


@pytest.mark.asyncio
async def test_redis_stats_reports_errors():
    healthy = await RedisKeyValueStore(FakeAsyncRedis()).stats()
    broken = await RedisKeyValueStore(FakeAsyncRedis(error=redis.ConnectionError("down"))).stats()

    assert healthy["status"] == "connected"
    assert broken["status"] == "error"
