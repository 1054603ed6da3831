# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from sbomgraph.app import GitHubRepository, LocalDocument, ingest_sboms
from sbomgraph.config import ConfigurationError, configure_logging, get_license_list_config
from sbomgraph.domain.graph import dependencies, elements_with_license, license_ids_in_use

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from sbomgraph.app import SbomSource
    from sbomgraph.domain.graph import GraphSnapshot
    from sbomgraph.domain.ingest import PipelineResult

log = logging.getLogger(__name__)

REPORTS = ("dependencies", "licenses")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Ingest SPDX SBOMs into a graph", allow_abbrev=False
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser(
        "ingest", help="Fetch or read SBOMs and merge them", allow_abbrev=False
    )
    ingest.add_argument(
        "--repo",
        action="append",
        default=[],
        metavar="OWNER/REPO",
        help="GitHub repository whose dependency-graph SBOM to fetch (repeatable)",
    )
    ingest.add_argument(
        "--file",
        action="append",
        default=[],
        metavar="PATH",
        help="Local SPDX JSON document (repeatable)",
    )
    ingest.add_argument(
        "--license-list",
        type=str,
        metavar="PATH_OR_URL",
        help="SPDX licenses.json to resolve license strings against (defaults to config)",
    )
    ingest.add_argument(
        "--report",
        action="append",
        choices=REPORTS,
        default=[],
        help="Print a report after ingestion (repeatable)",
    )
    ingest.add_argument(
        "--license",
        action="append",
        default=[],
        metavar="ID",
        help="Print the elements licensed under ID (repeatable)",
    )
    ingest.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop at the first source that cannot be fetched or merged",
    )

    return parser.parse_args(list(argv))


def _collect_sources(args: argparse.Namespace, argv: Sequence[str]) -> list[SbomSource]:
    """Sources in command-line order, ``--repo`` and ``--file`` interleaved."""

    repos = iter(GitHubRepository.parse(value) for value in args.repo)
    files = iter(LocalDocument(Path(value)) for value in args.file)
    sources: list[SbomSource] = []
    for token in argv:
        if token == "--repo" or token.startswith("--repo="):
            sources.append(next(repos))
        elif token == "--file" or token.startswith("--file="):
            sources.append(next(files))
    if not sources:
        raise ValueError("Nothing to ingest: pass at least one --repo or --file")
    return sources


def _print_summary(result: PipelineResult) -> None:
    print(
        f"merged={len(result.merged)} failed={len(result.failures)} "
        f"unavailable={len(result.unavailable)} entities={len(result.snapshot)}"
    )
    for source in result.unavailable:
        print(f"unavailable {source.document_id}: {source.error}")
    for failure in result.failures:
        print(f"failed {failure.document_id}: {failure.error.cause}")
    for rewrite in result.low_confidence_rewrites:
        print(
            f"low-confidence {rewrite.location}: {rewrite.original!r} -> "
            f"{rewrite.replacement} ({rewrite.score:.2f})"
        )


def _print_report(report: str, snapshot: GraphSnapshot) -> None:
    if report == "dependencies":
        for edge in dependencies(snapshot):
            print(
                f"{edge.package_name or edge.package} -> "
                f"{edge.name or edge.dependency} {edge.version or ''}".rstrip()
            )
    elif report == "licenses":
        for license_id in license_ids_in_use(snapshot):
            print(license_id)


def _print_licensed(license_id: str, snapshot: GraphSnapshot) -> None:
    for entity in elements_with_license(snapshot, license_id):
        name = snapshot.value(entity, "spdx/name") or snapshot.value(entity, "spdx/fileName")
        print(f"{license_id}: {name or entity}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        sources = _collect_sources(parsed_args, args_list)
        license_config = get_license_list_config(licenses=parsed_args.license_list)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        result = ingest_sboms(
            sources,
            license_config=license_config,
            fail_fast=parsed_args.fail_fast,
        )
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during ingestion")
        sys.exit(1)

    _print_summary(result)
    for report in parsed_args.report:
        _print_report(report, result.snapshot)
    for license_id in parsed_args.license:
        _print_licensed(license_id, result.snapshot)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point: load ``.env`` and install the SIGINT handler."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
