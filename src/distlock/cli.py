"""Command-line entrypoint for inspecting and manipulating locks."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from distlock.core.errors import LockValidationError
from distlock.core.manager import LockManager
from distlock.core.models import LockOptions
from distlock.core.settings import LockSettings, create_lock_manager
from distlock.utils.logging import get_logger


logger = get_logger("DistLockCLI")

EXIT_OK = 0
EXIT_NOT_HELD = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="distlock", description="Acquire, inspect, release and extend distributed locks.")
    parser.add_argument("--config", type=Path, default=None, help="Path to settings YAML (defaults to environment)")
    sub = parser.add_subparsers(dest="command", required=True)

    acquire = sub.add_parser("acquire", help="Acquire a lock and print its token")
    acquire.add_argument("resource")
    acquire.add_argument("--owner", default=None)
    acquire.add_argument("--ttl", type=int, default=None, help="Lock TTL in milliseconds")
    acquire.add_argument(
        "--max-retries",
        type=int,
        default=0,
        help="Retries after the first attempt (default 0; -1 blocks until the lock is free)",
    )
    acquire.add_argument("--retry-delay", type=int, default=None, help="Milliseconds between attempts")

    inspect = sub.add_parser("inspect", help="Show the current holder of a lock")
    inspect.add_argument("resource")

    release = sub.add_parser("release", help="Release a lock held with TOKEN")
    release.add_argument("resource")
    release.add_argument("token")

    extend = sub.add_parser("extend", help="Reset a lock's TTL")
    extend.add_argument("resource")
    extend.add_argument("token")
    extend.add_argument("duration_ms", type=int)
    return parser


def load_settings(args: argparse.Namespace) -> LockSettings:
    settings = LockSettings.from_file(args.config) if args.config else LockSettings.from_env()
    overrides = {}
    if getattr(args, "ttl", None) is not None:
        overrides["ttl"] = args.ttl
    if getattr(args, "max_retries", None) is not None:
        overrides["max_retries"] = args.max_retries
    if getattr(args, "retry_delay", None) is not None:
        overrides["retry_delay"] = args.retry_delay
    if overrides:
        lock = LockOptions.model_validate(settings.lock.model_dump() | overrides)
        settings = settings.model_copy(update={"lock": lock})
    return settings


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload) + "\n")


async def run_command(args: argparse.Namespace, manager: LockManager) -> int:
    if args.command == "acquire":
        lock = await manager.acquire(args.resource, args.owner)
        if lock is False:
            _emit({"acquired": False, "resource": args.resource})
            return EXIT_NOT_HELD
        _emit({"acquired": True, **lock.to_dict()})
        return EXIT_OK

    if args.command == "inspect":
        lock = await manager.get_acquired_lock(args.resource)
        _emit(lock.to_dict() if lock else None)
        return EXIT_OK

    if args.command == "release":
        released = await manager.release_lock(args.resource, args.token)
        _emit({"released": released, "resource": args.resource})
        return EXIT_OK if released else EXIT_NOT_HELD

    if args.command == "extend":
        extended = await manager.extend_lock(args.resource, args.token, args.duration_ms)
        _emit({"extended": extended, "resource": args.resource})
        return EXIT_OK if extended else EXIT_NOT_HELD

    raise ValueError(f"Unknown command: {args.command}")


async def _run(args: argparse.Namespace) -> int:
    try:
        settings = load_settings(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    if settings.backend == "memory":
        logger.warning("Memory backend only holds locks for the lifetime of this process")

    async with create_lock_manager(settings) as manager:
        try:
            return await run_command(args, manager)
        except LockValidationError as exc:
            logger.error("%s", exc)
            return EXIT_USAGE


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
