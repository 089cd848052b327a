"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
OUTPUT_DIR = PROJECT_ROOT / "output" / "reports"
DATA_DIR = PROJECT_ROOT / "data"
CUSTOMER_LIST_FILE = DATA_DIR / "customers.txt"
PROJECT_LIST_FILE = DATA_DIR / "projects.txt"

# =============================================================================
# KIMAI API (from environment)
# =============================================================================

KIMAI_API_URL = os.environ.get("KIMAI_API_URL", "https://demo.kimai.org/api")
KIMAI_API_TOKEN = os.environ.get("KIMAI_API_TOKEN", "")
KIMAI_TIMEOUT_SECONDS = float(os.environ.get("KIMAI_TIMEOUT_SECONDS", "30"))

TIMESHEET_PAGE_SIZE = 50  # Fixed server-side page size of /timesheets

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

REPORT_HEADERS = [
    "Customer",
    "Project",
    "User",
    "User Login",
    "Activity",
    "Activity Description",
    "Start Time",
    "Duration (hours)",
    "Description",
]
REPORT_COLUMN_WIDTHS = [25, 25, 20, 15, 20, 30, 25, 15, 50]

MAX_SHEET_TITLE_LENGTH = 31
INVALID_SHEET_TITLE_CHARS = "[]:*?/\\"

# Placeholders for lookups that fail or come back empty
UNKNOWN_CUSTOMER = "Unknown Customer"
UNKNOWN_ACTIVITY = "Unknown Activity"
NOT_AVAILABLE = "N/A"
NO_DESCRIPTION = "No Description"
