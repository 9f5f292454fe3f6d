"""lockrun - run commands under a distributed lock."""

from .config import Settings, load_settings
from .runner import CommandRunner, RunResult

__all__ = [
    "CommandRunner",
    "RunResult",
    "Settings",
    "load_settings",
]
