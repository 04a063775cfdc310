# services/api/schemas/todo.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class TodoCreate(BaseModel):
    """
    Body of POST /api/todos.
    `task` is left untyped here: presence, type and length are checked by
    the appender after the credential check.
    """
    model_config = ConfigDict(extra="ignore")

    task: Optional[Any] = Field(None, description="Todo text, required, max 100 chars")
    completed: Optional[bool] = Field(None, description="Defaults to false")
    created_date: Optional[str] = Field(None, description="YYYY-MM-DD, defaults to today")


class TodoListResponse(BaseModel):
    success: bool = True
    data: List[Dict[str, Any]]
    count: int
    source: str
    sheet_id: str
    last_updated: str


class TodoResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]
    source: str


class TodoCreatedResponse(BaseModel):
    success: bool = True
    message: str
    data: Dict[str, Any]
