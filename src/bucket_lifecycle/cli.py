"""Command-line interface for bucket-lifecycle.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import structlog

from bucket_lifecycle import __version__
from bucket_lifecycle.config import get_settings
from bucket_lifecycle.exceptions import LifecycleError
from bucket_lifecycle.policy import LifecycleManager, parse_rule_argument, parse_rule_id_argument
from bucket_lifecycle.rules import format_rule

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bucket-lifecycle",
        description="Read and edit S3 bucket lifecycle configuration",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    read_parser = subparsers.add_parser("read", help="Show a bucket's lifecycle rules")
    read_parser.add_argument("bucket", help="Bucket name")
    read_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Display the Lifecycle Configuration in JSON format",
    )

    put_parser = subparsers.add_parser("put-rule", help="Add or update a single rule")
    put_parser.add_argument("bucket", help="Bucket name")
    put_parser.add_argument(
        "rule",
        help=(
            "Rule as JSON, or as a rule string such as "
            "'logs: expire logs/ 30d, transition logs/ ia 7d'"
        ),
    )

    remove_parser = subparsers.add_parser("remove-rule", help="Remove a single rule")
    remove_parser.add_argument("bucket", help="Bucket name")
    remove_parser.add_argument("rule", help="Rule ID, or the rule as JSON or a rule string")

    delete_parser = subparsers.add_parser(
        "delete", help="Remove all lifecycle configuration from a bucket"
    )
    delete_parser.add_argument("bucket", help="Bucket name")

    return parser


async def _cmd_read(manager: LifecycleManager, args: argparse.Namespace) -> int:
    policy = await manager.read_policy(args.bucket)

    if args.json:
        print(policy.model_dump_json(by_alias=True, exclude_none=True, indent=2))
        return 0

    for rule in policy.rules:
        print(format_rule(rule))
    return 0


async def _cmd_put_rule(manager: LifecycleManager, args: argparse.Namespace) -> int:
    rule = parse_rule_argument(args.rule)
    await manager.put_rule(args.bucket, rule)
    return 0


async def _cmd_remove_rule(manager: LifecycleManager, args: argparse.Namespace) -> int:
    rule_id = parse_rule_id_argument(args.rule)
    await manager.remove_rule(args.bucket, rule_id)
    return 0


async def _cmd_delete(manager: LifecycleManager, args: argparse.Namespace) -> int:
    await manager.delete_policy(args.bucket)
    return 0


_COMMANDS = {
    "read": _cmd_read,
    "put-rule": _cmd_put_rule,
    "remove-rule": _cmd_remove_rule,
    "delete": _cmd_delete,
}


def main(args: list[str] | None = None, manager: LifecycleManager | None = None) -> int:
    """Main entry point for the bucket-lifecycle CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.
        manager: Lifecycle manager to run commands with. If None, one is
            built from settings.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Logs go to stderr so stdout only carries rules.
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )

    parser = _build_parser()
    parsed = parser.parse_args(args)

    logger.info(
        "bucket_lifecycle_started",
        version=__version__,
        debug=settings.debug,
        command=parsed.command,
    )

    command = _COMMANDS[parsed.command]

    try:
        return asyncio.run(command(manager or LifecycleManager(settings=settings), parsed))
    except LifecycleError as exc:
        logger.error("command_failed", command=parsed.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
