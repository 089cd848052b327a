#!/usr/bin/env python3
"""
Create customer and project timesheet reports from Kimai.

Reads customer and project names from the batch list files (plus an optional
single name from the command line), fetches each entity's timesheets for the
reporting window and writes one Excel workbook per entity kind, with one
sheet per customer or project.

Usage:
    uv run python src/scripts/create_timesheet_report.py
    uv run python src/scripts/create_timesheet_report.py --customer "Acme Corp" --start_date 2025-02-01 --end_date 2025-02-28
"""

import argparse
import asyncio
import calendar
import logging
import sys
from datetime import date, datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import CUSTOMER_LIST_FILE, KIMAI_API_TOKEN, OUTPUT_DIR, PROJECT_LIST_FILE
from core.kimai_client import KimaiClient, create_kimai_client
from core.logging_config import setup_logging
from models.timesheets import DateWindow, EntityKind
from services.batches import load_entity_batch
from services.reports import run_report_flow

logger = logging.getLogger(__name__)


# =============================================================================
# DATE UTILITIES
# =============================================================================


def get_previous_month_range(today: date) -> tuple[date, date]:
    """Return (first, last) day of the calendar month before `today`."""
    if today.month == 1:
        target_date = date(today.year - 1, 12, 1)
    else:
        target_date = date(today.year, today.month - 1, 1)

    _, last_day = calendar.monthrange(target_date.year, target_date.month)
    return target_date, target_date.replace(day=last_day)


def get_report_window(
    start_date: str | None, end_date: str | None, today: date | None = None
) -> DateWindow:
    """
    Calculate the reporting window.

    Args:
        start_date: Optional YYYY-MM-DD, used as given.
        end_date: Optional YYYY-MM-DD, used as given.
        today: Reference date for the default (previous month). Defaults to today.

    Returns:
        DateWindow spanning start 00:00:00 to end 23:59:59
    """
    first_of_month, last_of_month = get_previous_month_range(today or date.today())
    start = start_date or first_of_month.isoformat()
    end = end_date or last_of_month.isoformat()
    return DateWindow(begin=f"{start}T00:00:00", end=f"{end}T23:59:59")


# =============================================================================
# MAIN
# =============================================================================


async def main(
    project: str | None = None,
    customer: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    customer_list: Path = CUSTOMER_LIST_FILE,
    project_list: Path = PROJECT_LIST_FILE,
    output_dir: Path = OUTPUT_DIR,
    client: KimaiClient | None = None,
    now: datetime | None = None,
) -> dict[EntityKind, Path | None]:
    """Main entry point: run the customer and project reports concurrently."""
    now = now or datetime.now()

    # 1. Reporting window
    window = get_report_window(start_date, end_date, now.date())
    print(f"Generating timesheet reports for {window.begin} to {window.end}")

    # 2. Batches
    batches = {
        EntityKind.CUSTOMER: load_entity_batch(customer_list, customer),
        EntityKind.PROJECT: load_entity_batch(project_list, project),
    }
    for kind, batch in batches.items():
        logger.info(f"{len(batch)} {kind.value}(s) to process")

    output_dir.mkdir(parents=True, exist_ok=True)

    # 3. Both report flows share the HTTP client, nothing else
    owns_client = client is None
    if owns_client:
        if not KIMAI_API_TOKEN:
            logger.warning("KIMAI_API_TOKEN is not set, API calls will likely be rejected")
        client = create_kimai_client()

    try:
        results = await asyncio.gather(
            *(
                run_report_flow(client, kind, batch, window, output_dir, now)
                for kind, batch in batches.items()
            )
        )
    finally:
        if owns_client:
            await client.aclose()

    saved = dict(zip(batches, results))
    if not any(saved.values()):
        logger.warning("No report files were written")

    print("\nDone!")
    return saved


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate Kimai timesheet reports")
    parser.add_argument("--project", help="Single project name, added after the project list")
    parser.add_argument("--customer", help="Single customer name, added after the customer list")
    parser.add_argument("--start_date", help="Start date (YYYY-MM-DD). Defaults to first day of previous month.")
    parser.add_argument("--end_date", help="End date (YYYY-MM-DD). Defaults to last day of previous month.")
    parser.add_argument(
        "--customer_list",
        type=Path,
        default=CUSTOMER_LIST_FILE,
        help="File with one customer name per line",
    )
    parser.add_argument(
        "--project_list",
        type=Path,
        default=PROJECT_LIST_FILE,
        help="File with one project name per line",
    )
    parser.add_argument("--output_dir", type=Path, default=OUTPUT_DIR, help="Directory for report files")
    return parser.parse_args(argv)


def cli(argv: list[str] | None = None):
    args = parse_args(argv)
    setup_logging()

    asyncio.run(
        main(
            project=args.project,
            customer=args.customer,
            start_date=args.start_date,
            end_date=args.end_date,
            customer_list=args.customer_list,
            project_list=args.project_list,
            output_dir=args.output_dir,
        )
    )


if __name__ == "__main__":
    cli()
