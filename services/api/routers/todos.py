# services/api/routers/todos.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from deps import get_sheet_fetcher, get_todo_appender
from settings import Settings, get_settings
from core.appender import TodoAppender
from core.errors import (
    ConfigurationError,
    TodoValidationError,
    UpstreamWriteError,
    describe_validation_errors,
)
from core.fetcher import SheetFetcher
from core.records import find_record, parse_int_prefix
from schemas.todo import TodoCreate, TodoCreatedResponse, TodoListResponse, TodoResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/todos", tags=["todos"])


def iso_now() -> str:
    """UTC timestamp with millisecond precision, e.g. 2024-07-13T10:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


def method_not_allowed(method: str, settings: Settings) -> JSONResponse:
    supported = "GET, POST" if settings.write_enabled else "GET"
    return error_response(
        status.HTTP_405_METHOD_NOT_ALLOWED,
        f"Method {method} not allowed. Supported methods: {supported}",
    )


@router.get("", response_model=TodoListResponse)
async def list_todos(
    response: Response,
    settings: Settings = Depends(get_settings),
    fetcher: SheetFetcher = Depends(get_sheet_fetcher),
):
    """
    Read every todo from the sheet.
    Always 200: an unreachable sheet is answered with the fallback dataset.
    """
    result = await fetcher.fetch_sheet()
    todos = result.records()

    if result.is_degraded:
        response.headers["X-Data-Source"] = "fallback"

    logger.info("Sending %d todos (%s)", len(todos), result.status)
    return {
        "success": True,
        "data": todos,
        "count": len(todos),
        "source": settings.source_label,
        "sheet_id": settings.sheet_id,
        "last_updated": iso_now(),
    }


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Empty body -> {}. Raises TodoValidationError for malformed or non-object JSON."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        raise TodoValidationError("Invalid request: malformed JSON body")
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise TodoValidationError("Invalid request: body must be a JSON object")
    return payload


@router.post(
    "",
    response_model=TodoCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": TodoCreate.model_json_schema()}},
        }
    },
)
async def create_todo(
    request: Request,
    settings: Settings = Depends(get_settings),
    appender: TodoAppender = Depends(get_todo_appender),
):
    """
    Append one todo to the sheet (write-enabled deployments only).

    Checked in order: read-only deployment (405), write credential (500),
    then the body itself (400). The body is only read after the first two.
    """
    if not settings.write_enabled:
        return method_not_allowed(request.method, settings)

    try:
        appender.check_configured()
        payload = await read_json_body(request)
        try:
            body = TodoCreate.model_validate(payload)
        except ValidationError as e:
            raise TodoValidationError(describe_validation_errors(e.errors()))
        todo = await appender.append(body.model_dump(exclude_none=True))
    except ConfigurationError as e:
        logger.error("Append refused: %s", e)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    except TodoValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, str(e))
    except UpstreamWriteError as e:
        logger.error("Error adding to Google Sheets: %s", e)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", error=str(e)
        )
    except Exception as e:
        logger.exception("Unexpected error in POST /api/todos")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", error=str(e)
        )

    return {"success": True, "message": "Todo added successfully", "data": todo}


@router.api_route("", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
async def todos_method_not_allowed(request: Request, settings: Settings = Depends(get_settings)):
    return method_not_allowed(request.method, settings)


@router.get("/{todo_id}", response_model=TodoResponse)
async def get_todo(
    todo_id: str,
    settings: Settings = Depends(get_settings),
    fetcher: SheetFetcher = Depends(get_sheet_fetcher),
):
    """Read a single todo by its numeric id."""
    wanted = parse_int_prefix(todo_id)
    todo = None
    if wanted is not None:
        result = await fetcher.fetch_sheet()
        todo = find_record(result.records(), wanted)

    if todo is None:
        return error_response(status.HTTP_404_NOT_FOUND, f"Todo with id {todo_id} not found")

    return {"success": True, "data": todo, "source": settings.source_label}


@router.api_route("/{todo_id}", methods=["POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def todo_method_not_allowed(request: Request):
    return error_response(
        status.HTTP_405_METHOD_NOT_ALLOWED,
        f"Method {request.method} not allowed. Supported methods: GET",
    )
