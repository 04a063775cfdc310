"""
Prepare the todo worksheet for the gateway.
Creates the tab if needed and makes sure row 1 carries the expected header.

Usage:
    python -m core.sheet_setup
"""
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import gspread

from settings import get_settings
from core.appender import TODO_COLUMNS, sa_client_from_json_or_path

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 1000


def ensure_header(worksheet, headers=TODO_COLUMNS) -> str:
    """
    Write `headers` into row 1 unless it is already there.
    Returns "ok" when nothing changed, "updated" otherwise.
    """
    existing = worksheet.row_values(1)
    if existing == list(headers):
        return "ok"

    range_end = chr(ord("A") + len(headers) - 1)
    worksheet.update(f"A1:{range_end}1", [list(headers)])
    return "updated"


def ensure_todo_worksheet(spreadsheet, title: str):
    """Return (worksheet, state) where state is "created", "updated" or "ok"."""
    try:
        worksheet = spreadsheet.worksheet(title)
    except gspread.WorksheetNotFound:
        worksheet = spreadsheet.add_worksheet(
            title=title, rows=DEFAULT_ROWS, cols=len(TODO_COLUMNS)
        )
        ensure_header(worksheet)
        return worksheet, "created"

    return worksheet, ensure_header(worksheet)


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    settings = get_settings()

    try:
        gc = sa_client_from_json_or_path(settings.resolved_google_sa_json())
        spreadsheet = gc.open_by_key(settings.sheet_id)
    except Exception as e:
        logger.error("Failed to connect to spreadsheet %s: %s", settings.sheet_id, e)
        return 1

    _, state = ensure_todo_worksheet(spreadsheet, settings.sheet_tab_name)
    logger.info("Worksheet '%s': %s", settings.sheet_tab_name, state)
    logger.info("Sheet URL: %s", settings.sheet_url())
    return 0


if __name__ == "__main__":
    sys.exit(main())
