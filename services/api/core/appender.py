# services/api/core/appender.py
"""
Append a new todo row to the sheet.

Flow: check credential -> validate payload -> re-read the sheet to find the
next id -> submit a single-row batch to the write endpoint.

The id is computed as max(id) + 1 from a fresh read, then written in a
separate call. That read-then-write is NOT atomic: two appends racing on the
same snapshot get the same id. Callers must serialize appends (single writer).
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol

import gspread
import httpx
from google.oauth2.service_account import Credentials

from settings import SheetConfig
from core.errors import ConfigurationError, TodoValidationError, UpstreamWriteError
from core.fetcher import SheetFetcher
from core.records import Record, next_id

logger = logging.getLogger(__name__)

APPEND_URL = "https://sheets.googleapis.com/v4/spreadsheets/{sheet_id}/values/{range}:append"
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

MAX_TASK_LENGTH = 100

# Fixed column order of the todo sheet
TODO_COLUMNS = ["id", "task", "completed", "created_date"]


class RowWriter(Protocol):
    """Something that can append rows to the sheet and return the API reply."""

    async def append_rows(self, rows: List[List[Any]]) -> Dict[str, Any]:
        ...


class RestRowWriter:
    """values:append over plain HTTPS, authenticated with an API key."""

    def __init__(self, config: SheetConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    @property
    def append_url(self) -> str:
        return APPEND_URL.format(sheet_id=self.config.sheet_id, range=self.config.append_range)

    async def append_rows(self, rows: List[List[Any]]) -> Dict[str, Any]:
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(
                self.append_url,
                params={"valueInputOption": "RAW", "key": self.config.api_key},
                json={"values": rows},
            )

        if not response.is_success:
            raise UpstreamWriteError(response.status_code, response.text)

        return response.json()


def sa_client_from_json_or_path(google_sa_json: str) -> gspread.Client:
    """
    Accepts either:
      - path to SA json, OR
      - inline json string
    """
    if not google_sa_json:
        raise ConfigurationError("GOOGLE_SA_JSON is required (path or inline JSON)")

    try:
        parsed = json.loads(google_sa_json)
    except json.JSONDecodeError:
        creds = Credentials.from_service_account_file(google_sa_json, scopes=SHEETS_SCOPES)
    else:
        creds = Credentials.from_service_account_info(parsed, scopes=SHEETS_SCOPES)
    return gspread.authorize(creds)


class ServiceAccountRowWriter:
    """Appends through gspread using a service account shared on the sheet."""

    def __init__(self, config: SheetConfig, client: Optional[gspread.Client] = None):
        self.config = config
        self._client = client

    def _worksheet(self) -> gspread.Worksheet:
        if self._client is None:
            self._client = sa_client_from_json_or_path(self.config.service_account_json)
        return self._client.open_by_key(self.config.sheet_id).worksheet(self.config.tab_name)

    async def append_rows(self, rows: List[List[Any]]) -> Dict[str, Any]:
        try:
            return self._worksheet().append_rows(rows, value_input_option="RAW") or {}
        except gspread.exceptions.APIError as e:
            status_code = getattr(e.response, "status_code", 500)
            body = getattr(e.response, "text", str(e))
            raise UpstreamWriteError(status_code, body) from e


def writer_for(config: SheetConfig) -> RowWriter:
    """API key wins when both credentials are configured."""
    if config.api_key:
        return RestRowWriter(config)
    if config.service_account_json:
        return ServiceAccountRowWriter(config)
    raise ConfigurationError(
        "Google API key not configured. Please set GOOGLE_API_KEY environment variable."
    )


def validate_new_todo(fields: Dict[str, Any]) -> str:
    """
    Check the incoming payload before any network call.
    Returns the trimmed task text.
    """
    task = (fields or {}).get("task")
    if task is None or (isinstance(task, str) and not task.strip()):
        raise TodoValidationError("Missing required field: task")
    if not isinstance(task, str):
        raise TodoValidationError("Field 'task' must be a string")
    if len(task) > MAX_TASK_LENGTH:
        raise TodoValidationError(
            f"Task too long. Maximum {MAX_TASK_LENGTH} characters allowed."
        )
    return task.strip()


def utc_today() -> date:
    """Calendar date in UTC."""
    return datetime.now(timezone.utc).date()


class TodoAppender:
    def __init__(
        self,
        config: SheetConfig,
        fetcher: SheetFetcher,
        writer: Optional[RowWriter] = None,
        today: Callable[[], date] = utc_today,
    ):
        self.config = config
        self.fetcher = fetcher
        self._writer = writer
        self._today = today

    def check_configured(self) -> None:
        """Raise ConfigurationError when no write credential is set."""
        if not self.config.has_write_credential:
            raise ConfigurationError(
                "Google API key not configured. Please set GOOGLE_API_KEY environment variable."
            )

    def _get_writer(self) -> RowWriter:
        self.check_configured()
        if self._writer is None:
            self._writer = writer_for(self.config)
        return self._writer

    async def compute_next_id(self) -> int:
        result = await self.fetcher.fetch_sheet()
        if result.is_degraded:
            logger.warning("Computing next id from fallback data: %s", result.error)
        return next_id(result.records())

    async def append(self, fields: Dict[str, Any]) -> Record:
        writer = self._get_writer()
        task = validate_new_todo(fields)

        completed = bool(fields.get("completed") or False)
        created_date = fields.get("created_date") or self._today().isoformat()

        new_id = await self.compute_next_id()
        row = [new_id, task, completed, created_date]

        logger.info("Appending todo id=%s to sheet %s", new_id, self.config.sheet_id)
        sheets_response = await writer.append_rows([row])

        return {
            "id": new_id,
            "task": task,
            "completed": completed,
            "created_date": created_date,
            "sheets_response": sheets_response,
        }
