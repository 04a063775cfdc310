# services/api/core/fetcher.py
from __future__ import annotations

import copy
import csv
import logging
from typing import List, Literal, Optional

import httpx
from pydantic import BaseModel

from settings import SheetConfig
from core.csv_rows import RowMatrix, drop_blank_rows, get_parser
from core.records import Record, to_records

logger = logging.getLogger(__name__)

CSV_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv&gid={gid}"

# Served whenever the sheet cannot be read. Never persisted.
FALLBACK_ROWS: RowMatrix = [
    ["id", "task", "completed", "created_date"],
    ["1", "Learn APIs from Google Sheets", "false", "2024-07-13"],
    ["2", "Build real-time integration", "false", "2024-07-13"],
    ["3", "Deploy to production", "false", "2024-07-13"],
]


class FetchResult(BaseModel):
    """
    Outcome of one sheet read.

    status="ok"       -> rows came from the live sheet
    status="degraded" -> the read failed and rows are FALLBACK_ROWS
    Callers of the read endpoint see the same payload shape either way.
    """
    rows: List[List[str]]
    status: Literal["ok", "degraded"] = "ok"
    error: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return self.status == "degraded"

    def records(self) -> List[Record]:
        return to_records(self.rows)


def fallback_result(error: str) -> FetchResult:
    return FetchResult(rows=copy.deepcopy(FALLBACK_ROWS), status="degraded", error=error)


class SheetFetcher:
    """
    Reads the CSV export of a public sheet.

    Any failure (non-2xx, network error, undecodable body) is logged and
    answered with the fallback dataset; nothing is raised to the caller.
    No retries and no explicit timeout beyond the httpx default.
    """

    def __init__(self, config: SheetConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._parse = get_parser(config.csv_parser)
        # tests inject httpx.MockTransport here
        self._transport = transport

    @property
    def csv_url(self) -> str:
        return CSV_EXPORT_URL.format(sheet_id=self.config.sheet_id, gid=self.config.gid)

    async def fetch_sheet(self) -> FetchResult:
        url = self.csv_url
        logger.info("Fetching sheet %s as CSV", self.config.sheet_id)

        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                headers={"User-Agent": self.config.user_agent},
                transport=self._transport,
            ) as client:
                response = await client.get(url)

            logger.debug("Sheet response status=%s final_url=%s", response.status_code, response.url)

            if not response.is_success:
                logger.error(
                    "Sheet export returned HTTP %s: %s",
                    response.status_code,
                    response.text[:200],
                )
                return fallback_result(f"HTTP error! status: {response.status_code}")

            csv_text = response.content.decode("utf-8-sig")
            rows = drop_blank_rows(self._parse(csv_text))

        except httpx.HTTPError as e:
            logger.error("Error fetching from Google Sheets: %s", e)
            return fallback_result(str(e) or e.__class__.__name__)
        except (ValueError, csv.Error) as e:
            logger.error("Could not parse sheet export: %s", e)
            return fallback_result(str(e))

        logger.info("Fetched %d rows from Google Sheets", len(rows))
        return FetchResult(rows=rows)
