"""CLI entry point: ``clientfinder collect``."""

from __future__ import annotations

from clientfinder.logging_config import setup_logging

setup_logging()

import argparse  # noqa: E402
import asyncio  # noqa: E402
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

import httpx  # noqa: E402

from clientfinder import __version__  # noqa: E402
from clientfinder.collector import ClientCollector  # noqa: E402
from clientfinder.config import Settings  # noqa: E402
from clientfinder.constants import OutputFormat  # noqa: E402
from clientfinder.coordinates import (  # noqa: E402
    ClientResultSet,
    ComponentIdentity,
    ComponentVersion,
    parse_coordinates,
)
from clientfinder.export import export_json, export_text, summary_line  # noqa: E402
from clientfinder.logging_config import set_level  # noqa: E402
from clientfinder.metadata import MavenCentralBackend  # noqa: E402
from clientfinder.usage import HttpUsageIndex  # noqa: E402


def main() -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.version:
        print(f"clientfinder {__version__}")
        return

    if args.command == "collect":
        _run_collect(args)
    else:
        parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="clientfinder",
        description=(
            "Find the artifacts that directly depend on a Maven "
            "artifact, across all of its versions."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    collect = sub.add_parser(
        "collect",
        help="Collect the clients of an artifact",
    )
    collect.add_argument(
        "coordinates",
        nargs="?",
        default=None,
        help=(
            "group:artifact (all versions) or "
            "group:artifact:version (default: from settings)"
        ),
    )
    collect.add_argument(
        "--output-dir",
        "-o",
        default=None,
        help="Write results to this directory instead of stdout",
    )
    collect.add_argument(
        "--format",
        "-f",
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.TEXT.value,
        help="Output format (default: text)",
    )
    collect.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def _run_collect(args: argparse.Namespace) -> None:
    """Execute the collect command."""
    settings = Settings()
    set_level("DEBUG" if args.verbose else settings.log_level)

    coordinates = args.coordinates or settings.default_target
    try:
        target = parse_coordinates(coordinates)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Collecting clients of {target}")
    results = asyncio.run(_collect(target, settings))

    print(summary_line(results))
    if args.output_dir:
        path = _write_output(
            results, str(target), Path(args.output_dir), args.format
        )
        print(f"Output: {path}")
    elif args.format == OutputFormat.JSON:
        print(export_json(results, str(target)))


async def _collect(
    target: ComponentVersion | ComponentIdentity,
    settings: Settings,
) -> ClientResultSet:
    """Build the HTTP-backed collector and run one collection."""
    async with httpx.AsyncClient() as client:
        collector = ClientCollector.from_settings(
            MavenCentralBackend(
                client,
                settings.maven_repository_url,
                timeout=settings.request_timeout_seconds,
            ),
            HttpUsageIndex(
                client,
                settings.usage_index_url,
                timeout=settings.request_timeout_seconds,
                user_agent=settings.user_agent,
            ),
            settings,
        )
        if isinstance(target, ComponentVersion):
            results = ClientResultSet()
            results.extend(
                target, await collector.collect_version_clients(target)
            )
            return results
        return await collector.collect_component_clients(target)


def _write_output(
    results: ClientResultSet,
    target: str,
    output_dir: Path,
    fmt: str,
) -> Path:
    """Write results to the output directory and return the file path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    if fmt == OutputFormat.JSON:
        path = output_dir / "clients.json"
        path.write_text(export_json(results, target), encoding="utf-8")
    else:
        path = output_dir / "clients.txt"
        path.write_text(export_text(results), encoding="utf-8")
    return path


if __name__ == "__main__":
    main()
