"""Lock client - single-attempt acquire and unconditional release."""

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Protocol

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class LockRecord:
    """Stored item representing a held lock."""
    key: str
    expiry: int  # unix timestamp, written but never enforced


class LockStore(Protocol):
    """Remote keyed store supporting a conditional put and a delete."""

    def put_if_absent(self, record: LockRecord) -> None:
        """Insert the record, raising LockContentionError if the key exists."""
        ...

    def delete(self, key: str) -> None:
        """Delete the record for key. Missing keys are not an error."""
        ...


class LockClient:
    """Acquires and releases named locks against a LockStore.

    There is no retry, no waiting for release and no renewal. The expiry
    stored with each record is metadata for manual cleanup only; nothing
    reads it back.
    """

    def __init__(self, store: LockStore, clock: Callable[[], float] = time.time):
        self.store = store
        self.clock = clock

    def acquire(self, key: str, timeout_seconds: int) -> LockRecord:
        """Attempt to take the lock once.

        Raises LockContentionError if the key is already held and
        LockStoreError on any transport or auth failure.
        """
        record = LockRecord(key=key, expiry=int(self.clock()) + timeout_seconds)
        self.store.put_if_absent(record)

        logger.info("Acquired lock", key=key, expiry=record.expiry)
        return record

    def release(self, key: str) -> None:
        """Delete the lock record for key.

        No ownership check is made: any caller that knows the key can
        release it, whether or not it acquired the lock. Releasing a key
        that is not held is a no-op.
        """
        self.store.delete(key)
        logger.info("Released lock", key=key)

    @contextmanager
    def hold(self, key: str, timeout_seconds: int) -> Iterator[LockRecord]:
        """Acquire the lock for the duration of the block."""
        record = self.acquire(key, timeout_seconds)
        try:
            yield record
        finally:
            self.release(key)
