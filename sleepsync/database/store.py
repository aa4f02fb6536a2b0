"""
Key-value store adapters.

The core only needs strings, hashes and lists. None of the multi-step
read-modify-write sequences built on top of these calls are transactional.
"""

from abc import ABC, abstractmethod
from functools import wraps
from typing import Dict, List, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from sleepsync.core.logger import get_logger
from sleepsync.exceptions.errors import StoreUnavailable

logger = get_logger("store")


class KeyValueStore(ABC):
    """Interface the services depend on."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def hget(self, key: str, field: str) -> Optional[str]: ...

    @abstractmethod
    async def hset(self, key: str, mapping: Dict[str, str]) -> None: ...

    @abstractmethod
    async def hgetall(self, key: str) -> Dict[str, str]: ...

    @abstractmethod
    async def lpush(self, key: str, value: str) -> int: ...

    @abstractmethod
    async def lrange(self, key: str, start: int = 0, stop: int = -1) -> List[str]: ...

    @abstractmethod
    async def lindex(self, key: str, index: int) -> Optional[str]: ...

    @abstractmethod
    async def lset(self, key: str, index: int, value: str) -> None: ...

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


def _store_call(func):
    """Re-raise any redis failure as StoreUnavailable."""

    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except RedisError as e:
            logger.error(f"❌ Redis {func.__name__} failed: {e}")
            raise StoreUnavailable(f"Store operation '{func.__name__}' failed: {e}") from e

    return wrapper


class RedisStore(KeyValueStore):
    """Store backed by a redis.asyncio client created with decode_responses=True."""

    def __init__(self, client: Redis):
        self.client = client

    @_store_call
    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    @_store_call
    async def set(self, key: str, value: str) -> None:
        await self.client.set(key, value)

    @_store_call
    async def hget(self, key: str, field: str) -> Optional[str]:
        return await self.client.hget(key, field)

    @_store_call
    async def hset(self, key: str, mapping: Dict[str, str]) -> None:
        await self.client.hset(key, mapping=mapping)

    @_store_call
    async def hgetall(self, key: str) -> Dict[str, str]:
        return await self.client.hgetall(key)

    @_store_call
    async def lpush(self, key: str, value: str) -> int:
        return await self.client.lpush(key, value)

    @_store_call
    async def lrange(self, key: str, start: int = 0, stop: int = -1) -> List[str]:
        return await self.client.lrange(key, start, stop)

    @_store_call
    async def lindex(self, key: str, index: int) -> Optional[str]:
        return await self.client.lindex(key, index)

    @_store_call
    async def lset(self, key: str, index: int, value: str) -> None:
        await self.client.lset(key, index, value)

    @_store_call
    async def ping(self) -> bool:
        return await self.client.ping()

    async def close(self) -> None:
        await self.client.aclose()


class InMemoryStore(KeyValueStore):
    """Process-local store for development runs (STORE_BACKEND=memory) and tests."""

    def __init__(self):
        self.strings: Dict[str, str] = {}
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.lists: Dict[str, List[str]] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.strings.get(key)

    async def set(self, key: str, value: str) -> None:
        self.strings[key] = value

    async def hget(self, key: str, field: str) -> Optional[str]:
        return self.hashes.get(key, {}).get(field)

    async def hset(self, key: str, mapping: Dict[str, str]) -> None:
        self.hashes.setdefault(key, {}).update(mapping)

    async def hgetall(self, key: str) -> Dict[str, str]:
        return dict(self.hashes.get(key, {}))

    async def lpush(self, key: str, value: str) -> int:
        items = self.lists.setdefault(key, [])
        items.insert(0, value)
        return len(items)

    async def lrange(self, key: str, start: int = 0, stop: int = -1) -> List[str]:
        items = self.lists.get(key, [])
        end = len(items) if stop == -1 else stop + 1
        return list(items[start:end])

    async def lindex(self, key: str, index: int) -> Optional[str]:
        items = self.lists.get(key, [])
        if -len(items) <= index < len(items):
            return items[index]
        return None

    async def lset(self, key: str, index: int, value: str) -> None:
        items = self.lists.get(key)
        if not items:
            raise StoreUnavailable(f"no such key '{key}'")
        if not -len(items) <= index < len(items):
            raise StoreUnavailable(f"index {index} out of range for '{key}'")
        items[index] = value
