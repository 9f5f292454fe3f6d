"""Coordination layer - lock client and backing stores."""

from .errors import LockContentionError, LockError, LockStoreError
from .locks import LockClient, LockRecord, LockStore
from .stores import DynamoDBLockStore, RedisLockStore, build_store

__all__ = [
    "DynamoDBLockStore",
    "LockClient",
    "LockContentionError",
    "LockError",
    "LockRecord",
    "LockStore",
    "LockStoreError",
    "RedisLockStore",
    "build_store",
]
