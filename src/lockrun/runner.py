"""Command runner - holds a lock around a subprocess."""

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from src.coordination.locks import LockClient

logger = structlog.get_logger()


@dataclass
class RunResult:
    """Outcome of a wrapped command."""
    returncode: int | None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.returncode == 0


class CommandRunner:
    """Runs a command while holding a named lock.

    The lock is released once the command finishes, whether it succeeded,
    failed or could not be started. Lock errors propagate to the caller.
    """

    def __init__(self, client: LockClient):
        self.client = client

    def run(self, argv: Sequence[str], key: str, timeout_seconds: int) -> RunResult:
        """Acquire key, run argv with inherited stdout/stderr, release key."""
        if not argv:
            raise ValueError("No command given")

        with self.client.hold(key, timeout_seconds):
            return self._execute(list(argv))

    def _execute(self, argv: list[str]) -> RunResult:
        logger.info("Running command", argv=argv)
        try:
            completed = subprocess.run(argv, check=False)
        except OSError as e:
            logger.error("Run failed", argv=argv, error=str(e))
            return RunResult(returncode=None, error=str(e))

        if completed.returncode != 0:
            error = f"exit status {completed.returncode}"
            logger.error("Run failed", argv=argv, error=error)
            return RunResult(returncode=completed.returncode, error=error)

        logger.info("Command finished", argv=argv)
        return RunResult(returncode=0)
