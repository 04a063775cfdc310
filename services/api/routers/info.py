# services/api/routers/info.py
from fastapi import APIRouter, Depends

from deps import get_sheet_fetcher
from settings import Settings, get_settings
from core.fetcher import SheetFetcher
from routers.todos import iso_now

router = APIRouter(prefix="/api", tags=["info"])

API_VERSION = "1.0.0"


@router.get("")
async def index():
    """API root endpoint"""
    return {
        "success": True,
        "message": "Welcome to Google Sheets API",
        "description": "A REST API that connects to Google Sheets and provides real-time data access",
        "endpoints": {
            "health": "/api/health",
            "todos": "/api/todos",
            "info": "/api/info",
        },
        "version": API_VERSION,
    }


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Liveness check; does not touch the sheet."""
    endpoints = [
        "GET /api/todos - Get all todos from sheet",
        "GET /api/todos/:id - Get specific todo",
        "GET /api/info - Get sheet information",
        "GET /api/health - This endpoint",
    ]
    if settings.write_enabled:
        endpoints.insert(1, "POST /api/todos - Add a todo to the sheet")

    return {
        "success": True,
        "message": "Google Sheets API Server is running",
        "timestamp": iso_now(),
        "endpoints": endpoints,
        "version": API_VERSION,
    }


@router.get("/info")
async def sheet_info(
    settings: Settings = Depends(get_settings),
    fetcher: SheetFetcher = Depends(get_sheet_fetcher),
):
    """Sheet metadata, capabilities and setup instructions."""
    result = await fetcher.fetch_sheet()
    rows = result.rows
    can_write = settings.write_enabled and settings.sheet_config().has_write_credential

    return {
        "success": True,
        "message": "Real Google Sheets API Server",
        "sheet_id": settings.sheet_id,
        "sheet_url": settings.sheet_url(),
        "mode": "Read-Write" if can_write else "Read-Only (Public Sheet)",
        "total_rows": len(rows),
        "headers": rows[0] if rows else [],
        "capabilities": {
            "read": True,
            "create": can_write,
            "update": False,
            "delete": False,
        },
        "instructions": {
            "how_to_use_your_own_sheet": [
                "1. Create a Google Sheet",
                "2. Make it public (Share > Anyone with the link can view)",
                "3. Copy the Sheet ID from the URL",
                "4. Set SHEET_ID in the environment or .env",
                "5. Restart the server",
            ],
            "to_enable_appends": [
                "1. Set GOOGLE_API_KEY, or GOOGLE_SA_JSON for a service account",
                "2. Share the sheet with the service account email (service account only)",
                "3. Run `python -m core.sheet_setup` to write the header row",
                "4. Keep WRITE_ENABLED=true",
            ],
        },
    }
