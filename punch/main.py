"""
Punch - Main Application Entry Point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from punch import __version__
from punch.api.router import api_router
from punch.core.config import settings
from punch.core.errors import (
    http_exception_handler,
    punch_error_handler,
    validation_exception_handler,
    generic_exception_handler
)
from punch.core.exceptions import PunchError
from punch.core.logging import setup_logging

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    parsed = urlparse(url)
    if parsed.scheme.startswith("sqlite") or not parsed.password:
        return url
    netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
    if parsed.port:
        netloc += f":{parsed.port}"
    return urlunparse(parsed._replace(netloc=netloc))


# Create FastAPI app
app = FastAPI(
    title="Punch",
    description="Punch in, punch out, and report on gross and net working time",
    version=settings.VERSION or __version__
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(PunchError, punch_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log DATABASE_URL and reporting defaults at startup."""
    logger.info("DATABASE_URL (app): %s", _mask_database_url(settings.DATABASE_URL))
    logger.info(
        "Reporting: time_zone=%s overhead=%sm days=%s weeks=%s",
        settings.TIME_ZONE, settings.DEFAULT_OVERHEAD_MINUTES, settings.REPORT_DAYS, settings.REPORT_WEEKS,
    )
