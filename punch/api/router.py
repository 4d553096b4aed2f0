"""
Main API router
"""
from fastapi import APIRouter

from punch.api.v1 import (
    health,
    version,
    punch,
    report,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(punch.router, tags=["punch"])
api_router.include_router(report.router, tags=["report"])
