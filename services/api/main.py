"""
Google Sheets Todo API - read-mostly gateway
FastAPI service exposing a spreadsheet's CSV export as a JSON REST resource

Install dependencies:
pip install -e .

Run server:
uvicorn main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
import time
import uuid

from settings import get_settings
from core.errors import describe_validation_errors

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = settings.get_origins_list()

# ============================================================================
# FASTAPI APP
# ============================================================================

app = FastAPI(
    title="Google Sheets Todo API",
    description="REST access to a Google Sheet (CSV export reads, optional appends)",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.middleware("http")
async def request_tracing_middleware(request, call_next):
    """Add request_id and timing to all requests."""
    request_id = str(uuid.uuid4())[:8]
    started = time.time()

    response = await call_next(request)

    latency_ms = round((time.time() - started) * 1000, 2)
    logger.info(
        "%s %s -> %s (%sms) [%s]",
        request.method, request.url.path, response.status_code, latency_ms, request_id,
    )

    response.headers["X-Request-ID"] = request_id
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": describe_validation_errors(exc.errors())},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error", "error": str(exc)}
    )


from routers import todos as todos_router
app.include_router(todos_router.router)

from routers import info as info_router
app.include_router(info_router.router)


@app.on_event("startup")
async def startup_event():
    logger.info("Google Sheets Todo API starting up...")
    logger.info(f"Sheet ID: {settings.sheet_id}")
    logger.info(f"Mode: {'read-write' if settings.write_enabled else 'read-only'}")
    logger.info(f"CSV parser: {settings.csv_parser}")
    logger.info(f"Allowed origins: {ALLOWED_ORIGINS}")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
