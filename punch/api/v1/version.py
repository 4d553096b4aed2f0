"""
Version and metadata endpoint
"""
from fastapi import APIRouter
from punch import __version__
from punch.constants import SERVICE_NAME
from punch.core.config import settings

router = APIRouter()


@router.get("/version")
async def get_version():
    """
    Get application version and metadata

    Returns:
        Version information including service name, version and environment
    """
    return {
        "service": SERVICE_NAME,
        "version": settings.VERSION or __version__,
        "env": settings.APP_ENV,
    }
