"""
Database package for the application.
"""

from .store import KeyValueStore, RedisStore, InMemoryStore
from .connection import create_store, get_store

__all__ = [
    "KeyValueStore",
    "RedisStore",
    "InMemoryStore",
    "create_store",
    "get_store",
]
