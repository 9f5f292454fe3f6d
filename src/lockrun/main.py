"""Command-line entry point - lock, unlock and run."""

import argparse
import sys
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from src.coordination import LockClient, LockError, build_store

from .config import Settings, load_settings
from .log import configure_logging
from .runner import CommandRunner

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_LOCK_FAILED = 1
EXIT_USAGE = 2
EXIT_NOT_STARTED = 127


def cmd_lock(client: LockClient, settings: Settings, args: argparse.Namespace) -> int:
    """Acquire the lock and exit without releasing it."""
    client.acquire(settings.lock_key, settings.lock_timeout)
    return EXIT_OK


def cmd_unlock(client: LockClient, settings: Settings, args: argparse.Namespace) -> int:
    """Release the lock, whoever holds it."""
    client.release(settings.lock_key)
    return EXIT_OK


def cmd_run(client: LockClient, settings: Settings, args: argparse.Namespace) -> int:
    """Run a command while holding the lock."""
    argv = list(args.command)
    if argv and argv[0] == "--":
        argv = argv[1:]
    if not argv:
        logger.error("No command given")
        return EXIT_USAGE

    runner = CommandRunner(client)
    result = runner.run(argv, settings.lock_key, settings.lock_timeout)

    if not args.propagate_exit_code:
        return EXIT_OK
    if result.returncode is None:
        return EXIT_NOT_STARTED
    return result.returncode


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, help="YAML config file")
    common.add_argument("--backend", dest="store_backend", choices=["dynamodb", "redis"])
    common.add_argument("--table", dest="dynamodb_table", help="DynamoDB table name")
    common.add_argument("--endpoint", dest="dynamodb_endpoint", help="DynamoDB endpoint URL")
    common.add_argument("--region", dest="aws_region", help="AWS region")
    common.add_argument("--redis-url", dest="redis_url", help="Redis connection URL")
    common.add_argument("--key", dest="lock_key", help="Lock key name")
    common.add_argument(
        "--timeout",
        dest="lock_timeout",
        type=int,
        help="Lock timeout in seconds (stored as expiry, not enforced)",
    )
    common.add_argument("--log-level", dest="log_level")
    common.add_argument("--log-format", dest="log_format", choices=["console", "json"])

    parser = argparse.ArgumentParser(
        prog="lockrun",
        description="Run commands under a distributed lock",
    )
    subparsers = parser.add_subparsers(dest="command_name", required=True)

    lock_parser = subparsers.add_parser(
        "lock", parents=[common], help="Acquire the lock and exit"
    )
    lock_parser.set_defaults(handler=cmd_lock)

    unlock_parser = subparsers.add_parser(
        "unlock", parents=[common], help="Release the lock"
    )
    unlock_parser.set_defaults(handler=cmd_unlock)

    run_parser = subparsers.add_parser(
        "run", parents=[common], help="Run a command while holding the lock"
    )
    run_parser.add_argument(
        "--propagate-exit-code",
        action="store_true",
        help="Exit with the command's exit status instead of 0",
    )
    run_parser.add_argument("command", nargs=argparse.REMAINDER, help="Command and arguments")
    run_parser.set_defaults(handler=cmd_run)

    return parser


SETTINGS_FLAGS = (
    "store_backend",
    "dynamodb_table",
    "dynamodb_endpoint",
    "aws_region",
    "redis_url",
    "lock_key",
    "lock_timeout",
    "log_level",
    "log_format",
)


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the selected command and return an exit code."""
    args = build_parser().parse_args(argv)

    overrides = {name: getattr(args, name) for name in SETTINGS_FLAGS}
    try:
        settings = load_settings(args.config, **overrides)
    except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
        configure_logging()
        logger.error("Invalid configuration", error=str(e))
        return EXIT_USAGE

    configure_logging(settings.log_level, settings.log_format)
    logger.debug("Loaded settings", command=args.command_name, backend=settings.store_backend)

    client = LockClient(build_store(settings))
    try:
        return args.handler(client, settings, args)
    except LockError as e:
        logger.error("Lock operation failed", key=e.key, error=str(e))
        return EXIT_LOCK_FAILED


def cli():
    """CLI entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
