"""Shared fixtures."""

import threading

import pytest
import structlog

from src.coordination import LockClient, LockContentionError, LockRecord
from src.lockrun.config import Settings
from src.lockrun.log import configure_logging


class MemoryLockStore:
    """In-process LockStore with an atomic conditional put."""

    def __init__(self):
        self.records: dict[str, LockRecord] = {}
        self._mutex = threading.Lock()

    def put_if_absent(self, record: LockRecord) -> None:
        with self._mutex:
            if record.key in self.records:
                raise LockContentionError(record.key)
            self.records[record.key] = record

    def delete(self, key: str) -> None:
        with self._mutex:
            self.records.pop(key, None)


@pytest.fixture
def store():
    """Empty in-memory lock store."""
    return MemoryLockStore()


@pytest.fixture
def client(store):
    """Lock client on the in-memory store with a fixed clock."""
    return LockClient(store, clock=lambda: 1_700_000_000.5)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate settings from the caller's environment and config files."""
    for name in (
        "STORE_BACKEND",
        "DYNAMODB_TABLE",
        "DYNAMODB_ENDPOINT",
        "AWS_REGION",
        "REDIS_URL",
        "REDIS_KEY_PREFIX",
        "LOCK_KEY",
        "LOCK_TIMEOUT",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setitem(Settings.model_config, "yaml_file", [tmp_path / ".lockrun.yaml"])


@pytest.fixture(autouse=True)
def stderr_logging():
    """Keep log output off stdout so command output can be asserted."""
    configure_logging("DEBUG")
    yield
    structlog.reset_defaults()
