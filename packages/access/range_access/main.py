"""
Command-line entry point.

Resolves a user's accessible organizations either from a snapshot file
(``resolve``) or straight from the backend (``fetch``) and prints the
ordered view as JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from .client import BackendClient
from .config import Settings, load_config
from .exceptions import SnapshotError
from .helpers import filter_orgs, org_stats
from .resolver import AccessResolver, resolve_accessible_orgs
from .schemas import AccessView


def configure_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog with the specified level and format."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        # stdout carries the JSON result
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def load_snapshot(path: str | Path) -> dict[str, Any]:
    """Read a YAML/JSON snapshot with ``organizations`` and ``memberships``."""
    path = Path(path)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except OSError as exc:
        raise SnapshotError(f"Cannot read snapshot {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise SnapshotError(f"Snapshot {path} is not valid YAML/JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise SnapshotError(f"Snapshot {path} must be a mapping")
    return {
        "organizations": raw.get("organizations") or [],
        "memberships": raw.get("memberships") or [],
        "child_counts": raw.get("child_counts"),
    }


def render(view: AccessView, query: str | None = None, stats: bool = False) -> str:
    if query:
        view = view.model_copy(update={"organizations": filter_orgs(view.organizations, query)})
    if stats:
        return org_stats(view.organizations).model_dump_json(indent=2)
    return view.model_dump_json(indent=2)


async def _fetch(settings: Settings, user_id: str, access_token: str | None) -> AccessView:
    async with BackendClient.from_settings(settings, access_token=access_token) as client:
        return await AccessResolver(client, settings).load(user_id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Range organization access resolver")
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to YAML configuration file (default: environment only)",
    )
    parser.add_argument("-q", "--query", default=None, help="Only show orgs matching this text")
    parser.add_argument("--stats", action="store_true", help="Print summary counts instead")

    sub = parser.add_subparsers(dest="command", required=True)
    resolve = sub.add_parser("resolve", help="Resolve a snapshot file")
    resolve.add_argument("snapshot", help="YAML or JSON file with organizations and memberships")

    fetch = sub.add_parser("fetch", help="Fetch a user's snapshot from the backend and resolve it")
    fetch.add_argument("user_id")
    fetch.add_argument(
        "--token-env",
        default="RANGE_ACCESS_TOKEN",
        help="Environment variable holding the user's access token",
    )
    return parser


def run(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_config(args.config) if args.config else Settings()
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level, settings.log_format)
    log = structlog.get_logger()

    if args.command == "resolve":
        try:
            snapshot = load_snapshot(args.snapshot)
            view = resolve_accessible_orgs(
                snapshot["memberships"],
                snapshot["organizations"],
                child_counts=snapshot["child_counts"],
                settings=settings,
            )
        except (SnapshotError, ValidationError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    else:
        view = asyncio.run(_fetch(settings, args.user_id, os.environ.get(args.token_env)))

    for diagnostic in view.diagnostics:
        log.warning("access.diagnostic", code=diagnostic.code.value, org_id=diagnostic.org_id)
    print(render(view, args.query, args.stats))
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
