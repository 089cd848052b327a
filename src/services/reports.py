"""
Excel report assembly: one workbook per entity kind, one sheet per entity.
"""

import logging
from datetime import datetime
from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.config import (
    INVALID_SHEET_TITLE_CHARS,
    MAX_SHEET_TITLE_LENGTH,
    REPORT_COLUMN_WIDTHS,
    REPORT_HEADERS,
)
from core.kimai_client import KimaiClient
from models.timesheets import DateWindow, EntityKind, ReportRow
from services.resolver import EntityResolver
from services.timesheets import enrich_timesheets, fetch_all_timesheets

logger = logging.getLogger(__name__)

# Excel refuses to open workbooks with a sheet of this name
RESERVED_SHEET_TITLES = {"history"}


# =============================================================================
# SHEET TITLES
# =============================================================================


def make_sheet_title(name: str, existing: list[str]) -> str:
    """
    Turn an entity name into a valid, unique worksheet title.

    Forbidden characters become '_', leading and trailing apostrophes are
    dropped, titles are cut to 31 characters and collisions with existing or
    reserved titles (compared case-insensitively, as Excel does) get a ' (n)'
    suffix.
    """
    title = "".join("_" if c in INVALID_SHEET_TITLE_CHARS else c for c in name)
    title = title.strip("'")[:MAX_SHEET_TITLE_LENGTH].strip("'") or "Sheet"

    taken = {t.lower() for t in existing} | RESERVED_SHEET_TITLES
    candidate = title
    n = 2
    while candidate.lower() in taken:
        suffix = f" ({n})"
        candidate = title[: MAX_SHEET_TITLE_LENGTH - len(suffix)] + suffix
        n += 1
    return candidate


# =============================================================================
# SHEET WRITING
# =============================================================================


def clean_cell_value(value):
    """Drop control characters that openpyxl refuses to write."""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def write_timesheet_sheet(ws, rows: list[ReportRow]):
    """
    Write the header row and report rows to a worksheet.

    Columns follow REPORT_HEADERS: Customer, Project, User, User Login,
    Activity, Activity Description, Start Time, Duration (hours), Description
    """
    for col_idx, (header, width) in enumerate(zip(REPORT_HEADERS, REPORT_COLUMN_WIDTHS), start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)
        ws.column_dimensions[get_column_letter(col_idx)].width = width
    ws.freeze_panes = "A2"

    for row_idx, row in enumerate(rows, start=2):
        for col_idx, value in enumerate(row.as_list(), start=1):
            ws.cell(row=row_idx, column=col_idx, value=clean_cell_value(value))


# =============================================================================
# WORKBOOK ASSEMBLY
# =============================================================================


async def assemble_report(
    client: KimaiClient,
    batch: list[str],
    kind: EntityKind,
    window: DateWindow,
    resolver: EntityResolver | None = None,
) -> Workbook:
    """
    Build a workbook with one sheet per resolvable entity in the batch.

    Entities are processed strictly in order, one at a time. Names missing
    from the Kimai collection are logged and skipped. The returned workbook
    has no sheets when nothing could be resolved.
    """
    wb = Workbook()
    wb.remove(wb.active)

    if not batch:
        logger.warning(f"No {kind.value} names to process")
        return wb

    resolver = resolver or EntityResolver(client)
    ids_by_name = await resolver.resolve_all(kind)

    for name in batch:
        entity_id = ids_by_name.get(name)
        if entity_id is None:
            logger.warning(f"{kind.value.capitalize()} '{name}' not found, skipping")
            continue

        logger.info(f"Processing {kind.value} '{name}' (ID: {entity_id})")
        entries = await fetch_all_timesheets(client, kind, entity_id, window)
        rows = await enrich_timesheets(entries, name, resolver)

        ws = wb.create_sheet(title=make_sheet_title(name, wb.sheetnames))
        write_timesheet_sheet(ws, rows)
        logger.info(f"  Added sheet '{ws.title}' with {len(rows)} row(s)")

    return wb


def save_workbook(wb: Workbook, output_dir: Path, kind: EntityKind, now: datetime) -> Path:
    """Save the workbook under a timestamped file name and return its path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{kind.value}_timesheets_{now.strftime('%Y%m%d_%H%M%S')}.xlsx"
    wb.save(str(output_path))
    logger.info(f"Saved Excel report to: {output_path}")
    return output_path


async def run_report_flow(
    client: KimaiClient,
    kind: EntityKind,
    batch: list[str],
    window: DateWindow,
    output_dir: Path,
    now: datetime,
) -> Path | None:
    """Assemble and save the report for one entity kind. Returns None if nothing was written."""
    wb = await assemble_report(client, batch, kind, window)

    if not wb.sheetnames:
        logger.warning(f"No {kind.value} sheets generated, skipping {kind.value} report file")
        return None

    return save_workbook(wb, output_dir, kind, now)
