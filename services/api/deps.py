# services/api/deps.py
"""
FastAPI dependency providers.
Everything is built per request; there is no state shared across requests.
Tests swap these out through app.dependency_overrides.
"""
from fastapi import Depends

from settings import Settings, SheetConfig, get_settings
from core.appender import TodoAppender
from core.fetcher import SheetFetcher


def get_sheet_config(settings: Settings = Depends(get_settings)) -> SheetConfig:
    return settings.sheet_config()


def get_sheet_fetcher(config: SheetConfig = Depends(get_sheet_config)) -> SheetFetcher:
    return SheetFetcher(config)


def get_todo_appender(
    config: SheetConfig = Depends(get_sheet_config),
    fetcher: SheetFetcher = Depends(get_sheet_fetcher),
) -> TodoAppender:
    return TodoAppender(config, fetcher)
