"""Tests for workbook assembly and saving."""

import asyncio
import logging
from datetime import datetime

import pytest
from openpyxl import load_workbook

from conftest import make_timesheet
from core.config import REPORT_HEADERS
from models.timesheets import DateWindow, EntityKind
from services.reports import assemble_report, clean_cell_value, make_sheet_title, run_report_flow

WINDOW = DateWindow(begin="2025-02-01T00:00:00", end="2025-02-28T23:59:59")
NOW = datetime(2025, 3, 15, 8, 30, 0)


def assemble(fake_kimai, batch, kind=EntityKind.CUSTOMER):
    async def run():
        async with fake_kimai.client() as client:
            return await assemble_report(client, batch, kind, WINDOW)

    return asyncio.run(run())


def run_flow(fake_kimai, batch, output_dir, kind=EntityKind.CUSTOMER):
    async def run():
        async with fake_kimai.client() as client:
            return await run_report_flow(client, kind, batch, WINDOW, output_dir, NOW)

    return asyncio.run(run())


# ---------------------------------------------------------------------------
# Sheet titles
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "name, existing, expected",
    [
        ("Acme Corp", [], "Acme Corp"),
        ("R&D: Phase 1/2", [], "R&D_ Phase 1_2"),
        ("A" * 40, [], "A" * 31),
        ("Acme Corp", ["Acme Corp"], "Acme Corp (2)"),
        ("acme corp", ["Acme Corp", "acme corp (2)"], "acme corp (3)"),
        ("B" * 40, ["B" * 31], "B" * 27 + " (2)"),
        ("", [], "Sheet"),
        ("'Quoted'", [], "Quoted"),
        ("''", [], "Sheet"),
        ("History", [], "History (2)"),
        ("history", [], "history (2)"),
    ],
)
def test_make_sheet_title(name, existing, expected):
    assert make_sheet_title(name, existing) == expected


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def test_one_sheet_per_resolved_entity(fake_kimai):
    fake_kimai.timesheets[("customer", 1)] = [make_timesheet(1), make_timesheet(2)]
    fake_kimai.timesheets[("customer", 3)] = [make_timesheet(3, project=11)]

    wb = assemble(fake_kimai, ["Acme Corp", "Gamma Inc"])

    assert wb.sheetnames == ["Acme Corp", "Gamma Inc"]
    assert wb["Acme Corp"].max_row == 3
    assert wb["Gamma Inc"]["A2"].value == "Gamma Inc"
    assert wb["Gamma Inc"]["B2"].value == "Mobile App"


def test_unresolved_names_are_skipped(fake_kimai, caplog):
    fake_kimai.timesheets[("customer", 3)] = [make_timesheet(1, project=11)]

    with caplog.at_level(logging.WARNING):
        wb = assemble(fake_kimai, ["Beta LLC", "Gamma Inc"])

    assert wb.sheetnames == ["Gamma Inc"]
    assert "'Beta LLC' not found" in caplog.text
    # Only the resolved customer's timesheets were requested
    assert [r.url.params["customer"] for r in fake_kimai.timesheet_requests()] == ["3"]


def test_entity_without_timesheets_gets_header_only_sheet(fake_kimai):
    wb = assemble(fake_kimai, ["Website"], kind=EntityKind.PROJECT)

    ws = wb["Website"]
    assert [c.value for c in ws[1]] == REPORT_HEADERS
    assert ws.max_row == 1


def test_empty_batch_makes_no_requests(fake_kimai):
    wb = assemble(fake_kimai, [])

    assert wb.sheetnames == []
    assert fake_kimai.requests == []


def test_collection_failure_skips_everything(fake_kimai):
    fake_kimai.fail_paths.add("/projects")

    wb = assemble(fake_kimai, ["Website", "Mobile App"], kind=EntityKind.PROJECT)

    assert wb.sheetnames == []
    assert fake_kimai.timesheet_requests() == []


# ---------------------------------------------------------------------------
# Saving
# ---------------------------------------------------------------------------


def test_run_report_flow_writes_timestamped_file(fake_kimai, tmp_path):
    fake_kimai.timesheets[("project", 10)] = [make_timesheet(1, duration=None)]
    output_dir = tmp_path / "reports"

    path = run_flow(fake_kimai, ["Website"], output_dir, kind=EntityKind.PROJECT)

    assert path == output_dir / "project_timesheets_20250315_083000.xlsx"
    ws = load_workbook(path)["Website"]
    assert [c.value for c in ws[1]] == REPORT_HEADERS
    assert [c.value for c in ws[2]] == [
        "Acme Corp",
        "Website",
        "Jane Doe",
        "jdoe",
        "Development",
        "Feature work",
        "2025-02-03T09:00:00+0000",
        "N/A",
        "Task 1",
    ]
    assert ws.freeze_panes == "A2"


def test_run_report_flow_without_sheets_writes_nothing(fake_kimai, tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        path = run_flow(fake_kimai, ["Nobody"], tmp_path)

    assert path is None
    assert list(tmp_path.iterdir()) == []
    assert "No customer sheets generated" in caplog.text


def test_control_characters_are_removed_from_cells(fake_kimai, tmp_path):
    fake_kimai.timesheets[("customer", 1)] = [
        make_timesheet(1, description="line\x0bbreak\x01"),
    ]

    path = run_flow(fake_kimai, ["Acme Corp"], tmp_path)

    ws = load_workbook(path)["Acme Corp"]
    assert ws["I2"].value == "linebreak"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("tab\tand\nnewline", "tab\tand\nnewline"),
        ("bell\x07", "bell"),
        ("plain", "plain"),
        (None, None),
    ],
)
def test_clean_cell_value(value, expected):
    assert clean_cell_value(value) == expected
