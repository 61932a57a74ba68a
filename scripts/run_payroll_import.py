#!/usr/bin/env python3
"""
Import a certified payroll report (PDF or text) into a project and print the
parse summary.

Uses the active config (get_active_config) for the database URL, log level
and parser layout.  Tables are created if missing.

Usage:
    python3 scripts/run_payroll_import.py --file <path> (--project-id <uuid> | --create-project <name>)

Examples:
    # Import into an existing project
    python3 scripts/run_payroll_import.py --file week12.pdf --project-id 6f1c...

    # Create the project first, then import
    python3 scripts/run_payroll_import.py --file week12.pdf --create-project "North Tower"

    # Probe the file (line count, first lines) without touching the DB
    python3 scripts/run_payroll_import.py --file week12.pdf --probe-only
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from uuid import UUID

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import a payroll report into a project and print the parse summary.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--file",
        required=True,
        type=Path,
        help="Path to the payroll report (.pdf, .txt).",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--project-id", type=UUID, help="Existing project UUID.")
    target.add_argument("--create-project", metavar="NAME", help="Create a project with this name.")
    parser.add_argument(
        "--probe-only",
        action="store_true",
        help="Probe the source file and exit. No DB writes.",
    )
    parser.add_argument(
        "--no-layout",
        action="store_true",
        help="Extract PDF text without layout mode.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config override (default: LABOR_TRACKER_CONFIG env or bundled defaults).",
    )
    parser.add_argument("--db-url", default=None, help="Database URL (overrides config).")
    parser.add_argument(
        "--show-ignored",
        type=int,
        default=10,
        metavar="N",
        help="Print at most N ignored lines (default: 10).",
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()

    source_path = args.file.resolve()
    if not source_path.is_file():
        print(f"ERROR: File not found: {source_path}", file=sys.stderr)
        return 1
    if not args.probe_only and args.project_id is None and not args.create_project:
        print("ERROR: --project-id or --create-project is required", file=sys.stderr)
        return 1

    # Lazy imports so we fail fast on args first
    from labor_config import get_active_config
    from labor_ingestion.services import PayrollImportService
    from labor_kernel.db.engine import create_tables, get_session, init_engine_from_url
    from labor_kernel.domain.clock import SystemClock
    from labor_kernel.exceptions import LaborTrackerError
    from labor_kernel.logging_config import configure_logging
    from labor_modules.projects.models import ProjectDraft
    from labor_modules.projects.service import ProjectService

    try:
        config = get_active_config(args.config)
    except (OSError, ValueError) as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1
    configure_logging(level=config.logging.level)

    options = {"layout": not args.no_layout}

    if args.probe_only:
        from labor_ingestion.adapters import adapter_for

        try:
            probe = adapter_for(source_path).probe(source_path, options)
        except LaborTrackerError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        print(f"Lines: {probe.line_count}")
        if probe.page_count is not None:
            print(f"Pages: {probe.page_count}")
        print("Sample:")
        for i, line in enumerate(probe.sample_lines, 1):
            print(f"  {i}: {line}")
        return 0

    try:
        init_engine_from_url(args.db_url or config.database.url, echo=config.database.echo)
        create_tables()
    except Exception as e:
        print(f"ERROR: Database init failed: {e}", file=sys.stderr)
        return 1

    session = get_session()
    clock = SystemClock()
    try:
        if args.create_project:
            project = ProjectService(session, clock=clock).create_project(
                ProjectDraft(name=args.create_project)
            )
            print(f"Created project {project.name!r} (id={project.id})")
            project_id = project.id
        else:
            project_id = args.project_id

        service = PayrollImportService(session, clock=clock, layout=config.parser.layout)
        print(f"Importing {source_path}...")
        outcome = service.import_file(project_id, source_path, options)
    except LaborTrackerError as e:
        print(f"ERROR [{e.code}]: {e}", file=sys.stderr)
        return 1
    finally:
        session.close()

    summary = outcome.summary
    print(f"  Upload: {outcome.upload.id}")
    print(f"  Entries stored: {outcome.entries_inserted}")
    print(f"  Parsed hours: {summary.parsed_hours}")
    if summary.detected_total_hours is None:
        print("  Reported total: (none found)")
    else:
        print(f"  Reported total: {summary.detected_total_hours}")
        print(f"  Difference: {summary.difference}")
    if summary.ignored_lines:
        print(f"  Ignored lines: {len(summary.ignored_lines)}")
        for line in summary.ignored_lines[: args.show_ignored]:
            print(f"    {line}")
        if len(summary.ignored_lines) > args.show_ignored:
            print(f"    ... and {len(summary.ignored_lines) - args.show_ignored} more.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
