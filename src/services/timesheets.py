"""
Timesheet retrieval and enrichment.
"""

import logging

from pydantic import ValidationError

from core.config import NO_DESCRIPTION, NOT_AVAILABLE, TIMESHEET_PAGE_SIZE
from core.kimai_client import KimaiClient, KimaiError
from models.timesheets import DateWindow, EntityKind, ReportRow, TimesheetEntry
from services.resolver import EntityResolver

logger = logging.getLogger(__name__)


# =============================================================================
# PAGINATION
# =============================================================================


async def fetch_all_timesheets(
    client: KimaiClient, kind: EntityKind, entity_id: int, window: DateWindow
) -> list[TimesheetEntry]:
    """
    Fetch every timesheet of one customer or project within the window.

    Pages are requested from 1 upwards until a page does not hold exactly
    TIMESHEET_PAGE_SIZE entries. A full final page therefore costs one extra, empty
    request. Any page failure discards the entries fetched so far and
    returns an empty list.
    """
    entries: list[TimesheetEntry] = []
    page = 1

    while True:
        params = {
            kind.value: entity_id,
            "user": "all",
            "begin": window.begin,
            "end": window.end,
            "page": page,
        }
        logger.debug(f"Requesting timesheets page {page} for {kind.value} {entity_id}")

        try:
            data = await client.get_timesheets(params)
            if not isinstance(data, list):
                raise KimaiError(f"Kimai: Unexpected timesheets payload on page {page}")
            page_entries = [TimesheetEntry.model_validate(item) for item in data]
        except (KimaiError, ValidationError) as e:
            logger.error(
                f"Error fetching timesheets for {kind.value} {entity_id} (page {page}): {e}"
            )
            if entries:
                logger.warning(f"Discarding {len(entries)} timesheets already fetched")
            return []

        entries.extend(page_entries)
        if len(page_entries) != TIMESHEET_PAGE_SIZE:
            break
        page += 1

    logger.info(f"Fetched {len(entries)} timesheets for {kind.value} {entity_id} ({page} page(s))")
    return entries


# =============================================================================
# ENRICHMENT
# =============================================================================


def format_duration_hours(duration: int | None) -> str:
    """Seconds -> hours with two decimals, e.g. 5400 -> '1.50'."""
    if duration is None:
        return NOT_AVAILABLE
    return f"{round(duration / 3600, 2):.2f}"


async def enrich_timesheets(
    entries: list[TimesheetEntry], label: str, resolver: EntityResolver
) -> list[ReportRow]:
    """
    Expand timesheet entries into report rows, in input order.

    Foreign references are resolved sequentially through the resolver.
    """
    if not entries:
        logger.warning(f"No timesheet data available for '{label}'")
        return []

    rows = []
    for entry in entries:
        project_name = await resolver.project_name(entry.project)
        customer_name = await resolver.customer_name_for_project(entry.project)
        activity = await resolver.activity_descriptor(entry.activity)
        user = await resolver.user_descriptor(entry.user)

        rows.append(
            ReportRow(
                customer_name=customer_name,
                project_name=project_name,
                user_name=user.display_name,
                user_login=user.login_name,
                activity_name=activity.name,
                activity_description=activity.description,
                start_time=entry.begin,
                duration_hours=format_duration_hours(entry.duration),
                description=entry.description or NO_DESCRIPTION,
            )
        )

    return rows
