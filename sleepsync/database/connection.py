from fastapi import Request
from redis.asyncio import Redis

from sleepsync.core.config import settings
from sleepsync.core.logger import get_logger
from sleepsync.database.store import InMemoryStore, KeyValueStore, RedisStore

logger = get_logger("database")


def create_store(backend: str = None, url: str = None) -> KeyValueStore:
    """Build the configured store. Nothing connects until the first command."""
    backend = backend or settings.STORE_BACKEND
    if backend == "memory":
        logger.warning("Using in-memory store; state is lost on restart")
        return InMemoryStore()

    client = Redis.from_url(
        url or settings.REDIS_URL,
        decode_responses=True,
        socket_timeout=5,
        socket_connect_timeout=5,
        health_check_interval=30,
    )
    return RedisStore(client)


def get_store(request: Request) -> KeyValueStore:
    """Dependency returning the store owned by the running app."""
    return request.app.state.store
