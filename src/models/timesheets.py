"""
Data models for Kimai records and report rows.

API payloads are parsed with Pydantic (unknown fields are ignored); values
derived during a report run are plain frozen dataclasses.
"""

from dataclasses import astuple, dataclass
from enum import Enum

from pydantic import BaseModel


class EntityKind(str, Enum):
    """Dimension a report is grouped by. The value is the /timesheets filter name."""

    CUSTOMER = "customer"
    PROJECT = "project"


# =============================================================================
# API RECORDS
# =============================================================================


class TimesheetEntry(BaseModel):
    """A timesheet record as returned by GET /timesheets."""

    id: int
    project: int | None = None
    user: int | None = None
    activity: int | None = None
    begin: str
    end: str | None = None
    duration: int | None = None
    description: str | None = None
    billable: bool = False


class ProjectRecord(BaseModel):
    id: int
    name: str
    customer: int | None = None


class CustomerRecord(BaseModel):
    id: int
    name: str


class UserRecord(BaseModel):
    id: int
    username: str
    alias: str | None = None

    @property
    def display_name(self) -> str:
        return self.alias or self.username


class ActivityRecord(BaseModel):
    id: int
    name: str
    comment: str | None = None


# =============================================================================
# RESOLVED DESCRIPTORS AND REPORT VALUES
# =============================================================================


@dataclass(frozen=True)
class UserDescriptor:
    display_name: str
    login_name: str


@dataclass(frozen=True)
class ActivityDescriptor:
    name: str
    description: str


@dataclass(frozen=True)
class DateWindow:
    """Inclusive reporting window, as YYYY-MM-DDTHH:MM:SS strings."""

    begin: str
    end: str


@dataclass(frozen=True)
class ReportRow:
    """One spreadsheet row. Field order matches REPORT_HEADERS."""

    customer_name: str
    project_name: str
    user_name: str
    user_login: str
    activity_name: str
    activity_description: str
    start_time: str
    duration_hours: str
    description: str

    def as_list(self) -> list[str]:
        return list(astuple(self))
