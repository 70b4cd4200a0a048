#!/usr/bin/env python3
"""Check Occupancy - CLI entry point for bed/technician diagnostics.

Reports orphaned and mismatched beds and technicians, and optionally
repairs them.

Usage:
    uv run python -m occupancy.check_occupancy
    uv run python -m occupancy.check_occupancy --fix
    uv run python -m occupancy.check_occupancy --dry-run
    uv run python -m occupancy.check_occupancy --stats-output /tmp/stats.json

Exit codes:
    0 - no issues remain
    1 - fatal error (configuration, authentication, store read)
    2 - issues remain after the run
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any

from dotenv import load_dotenv

from occupancy.diagnostics import DiagnosticsReport, OccupancyChecker
from occupancy.logging_config import configure_logging, get_logger
from occupancy.store import PocketBaseEntityStore
from pocketbase import PocketBase

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_ISSUES_REMAIN = 2


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Find and fix bed-technician occupancy mismatches")

    parser.add_argument("--fix", action="store_true", help="Repair every issue found")

    parser.add_argument("--dry-run", action="store_true", help="Plan repairs without writing (implies --fix)")

    parser.add_argument("--stats-output", type=str, help="Write JSON stats to this file")

    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    parsed = parser.parse_args(args)
    if parsed.dry_run:
        parsed.fix = True
    return parsed


def load_configuration() -> dict[str, Any]:
    """Load PocketBase connection settings from the environment (.env honored).

    Required:
    - POCKETBASE_ADMIN_EMAIL
    - POCKETBASE_ADMIN_PASSWORD

    Optional:
    - POCKETBASE_URL (default: http://127.0.0.1:8090)
    """
    load_dotenv()

    config: dict[str, Any] = {
        "pb_url": os.getenv("POCKETBASE_URL", "http://127.0.0.1:8090"),
        "pb_email": os.getenv("POCKETBASE_ADMIN_EMAIL"),
        "pb_password": os.getenv("POCKETBASE_ADMIN_PASSWORD"),
    }

    if not config["pb_email"] or not config["pb_password"]:
        raise ValueError(
            "Missing required PocketBase credentials. "
            "Set POCKETBASE_ADMIN_EMAIL and POCKETBASE_ADMIN_PASSWORD environment variables."
        )

    return config


def write_stats_output(stats_file: str, stats: dict[str, Any], success: bool) -> None:
    output = {
        "success": success,
        "issues": stats.get("issues", 0),
        "fixed": stats.get("fixed", 0),
        "errors": stats.get("errors", 0),
    }
    with open(stats_file, "w") as f:
        json.dump(output, f)
    logger.info(f"Wrote stats to {stats_file}")


def print_report(report: DiagnosticsReport) -> None:
    summary = report.summary
    print(f"  - Total beds: {summary.total_beds}")
    print(f"  - Occupied beds: {summary.occupied_beds}")
    print(f"  - Technicians with beds: {summary.technicians_with_beds}")

    if summary.is_clean:
        print("\nAll clear - bed-technician relationships are synchronized.")
        return

    print(f"\nIssues found: {summary.total_issues}")
    print(f"  - Orphaned beds: {summary.orphaned_beds}")
    print(f"  - Mismatched beds: {summary.mismatched_beds}")
    print(f"  - Mismatched technicians: {summary.mismatched_technicians}")
    for issue in report.issues:
        where = f" [{issue.location}]" if issue.location else ""
        print(f"    {issue.label}{where}: {issue.message}")


def run(checker: OccupancyChecker, fix: bool, dry_run: bool) -> tuple[int, dict[str, Any]]:
    """Run a check (and optional repair) and return the exit code and stats."""
    if not fix:
        report = checker.check()
        print("\nBed occupancy diagnostics:")
        print_report(report)
        stats = {"issues": report.summary.total_issues}
        return (EXIT_OK if report.summary.is_clean else EXIT_ISSUES_REMAIN), stats

    outcome = checker.fix_all(dry_run=dry_run)
    print("\nBed occupancy diagnostics:")
    print_report(outcome.report_before)
    stats = {"issues": outcome.report_before.summary.total_issues}

    if outcome.dry_run:
        print(f"\n(Dry run - {len(outcome.planned)} repairs planned, nothing written)")
        for action in outcome.planned:
            print(f"    {action.entity_type.value} {action.record_id}: {action.fields}")
        return (EXIT_OK if outcome.report_before.summary.is_clean else EXIT_ISSUES_REMAIN), stats

    result = outcome.result
    if result is not None:
        stats["fixed"] = result.fixed
        stats["errors"] = result.errors
        print(f"\nFixed {result.fixed} of {result.attempted} issue(s)")
        for detail in result.error_details:
            print(f"    • {detail}")

    remaining = outcome.report_after.summary.total_issues if outcome.report_after else 0
    if remaining:
        print(f"\n{remaining} issue(s) remain - run again to retry")
        return EXIT_ISSUES_REMAIN, stats
    return EXIT_OK, stats


def main() -> None:
    """Main entry point."""
    args = parse_args()

    # --debug overrides LOG_LEVEL
    configure_logging("check_occupancy", logging.DEBUG if args.debug else None)

    try:
        config = load_configuration()

        pb = PocketBase(config["pb_url"])
        pb.collection("_superusers").auth_with_password(config["pb_email"], config["pb_password"])
        logger.info("Authenticated with PocketBase")

        checker = OccupancyChecker(PocketBaseEntityStore(pb))
        exit_code, stats = run(checker, fix=args.fix, dry_run=args.dry_run)

        if args.stats_output:
            write_stats_output(args.stats_output, stats, success=True)

    except Exception as e:
        logger.error(f"Fatal error: {e}")
        if args.stats_output:
            write_stats_output(args.stats_output, {"errors": 1}, success=False)
        sys.exit(EXIT_FATAL)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
