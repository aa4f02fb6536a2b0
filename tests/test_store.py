import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

from sleepsync.database.connection import create_store
from sleepsync.database.store import InMemoryStore, RedisStore
from sleepsync.exceptions.errors import StoreUnavailable
from sleepsync.services.phase_service import PhaseService
from sleepsync.services.user_state_service import UserStateService


class DownRedis:
    """Client whose every command fails like an unreachable server."""

    def __init__(self, error):
        self.error = error

    def __getattr__(self, name):
        async def fail(*args, **kwargs):
            raise self.error
        return fail


class RecordingRedis:
    def __init__(self):
        self.calls = []

    async def hset(self, key, mapping=None):
        self.calls.append(("hset", key, mapping))
        return len(mapping)

    async def lset(self, key, index, value):
        self.calls.append(("lset", key, index, value))
        return True


@pytest.mark.parametrize("error", [RedisConnectionError("refused"), RedisTimeoutError("timed out")])
async def test_redis_errors_surface_as_store_unavailable(error):
    store = RedisStore(DownRedis(error))

    with pytest.raises(StoreUnavailable) as exc_info:
        await store.get("sleepPhase")
    assert exc_info.value.status_code == 503
    assert exc_info.value.__cause__ is error


async def test_store_failure_propagates_through_services():
    phases = PhaseService(RedisStore(DownRedis(RedisConnectionError("refused"))), None)
    with pytest.raises(StoreUnavailable):
        await phases.toggle()


async def test_redis_store_passes_commands_through():
    client = RecordingRedis()
    store = RedisStore(client)

    await store.hset("userState", {"alice": "asleep"})
    await store.lset("sleepHistory:alice", 0, "{}")

    assert client.calls == [
        ("hset", "userState", {"alice": "asleep"}),
        ("lset", "sleepHistory:alice", 0, "{}"),
    ]


async def test_in_memory_lists_are_newest_first():
    store = InMemoryStore()
    await store.lpush("sleepHistory:alice", "first")
    await store.lpush("sleepHistory:alice", "second")

    assert await store.lrange("sleepHistory:alice") == ["second", "first"]
    assert await store.lrange("sleepHistory:alice", 0, 0) == ["second"]
    assert await store.lindex("sleepHistory:alice", 0) == "second"
    assert await store.lindex("sleepHistory:alice", 5) is None

    await store.lset("sleepHistory:alice", 0, "replaced")
    assert await store.lrange("sleepHistory:alice") == ["replaced", "first"]


async def test_in_memory_lset_on_missing_key_fails():
    with pytest.raises(StoreUnavailable):
        await InMemoryStore().lset("sleepHistory:nobody", 0, "{}")


async def test_in_memory_hashes():
    store = InMemoryStore()
    await store.hset("userState", {"alice": "asleep"})
    await store.hset("userState", {"bob": "awake"})

    assert await store.hgetall("userState") == {"alice": "asleep", "bob": "awake"}
    assert await store.hget("userState", "carol") is None
    assert await UserStateService(store).get_raw_states() == {"alice": "asleep", "bob": "awake"}


def test_create_store_backends():
    assert isinstance(create_store("memory"), InMemoryStore)
    assert isinstance(create_store("redis", "redis://localhost:6379/1"), RedisStore)
