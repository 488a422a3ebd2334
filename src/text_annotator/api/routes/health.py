"""
Health check endpoint for monitoring.
"""

import time

from fastapi import APIRouter

from ...models.api_models import HealthResponse
from ...version import API_VERSION, get_component_versions

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        uptime_seconds=time.time() - _start_time,
        components=get_component_versions(),
    )
