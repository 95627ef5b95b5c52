# This project was developed with assistance from AI tools.
"""Liveness probe. Bypasses the app registry and the request context."""

from datetime import datetime

from fastapi import APIRouter, Depends, Request

from ..core.clock import get_now
from ..schemas.health import HealthStatus

router = APIRouter()


@router.get("/health", response_model=HealthStatus)
async def health(request: Request, now: datetime = Depends(get_now)) -> HealthStatus:
    """Report whether the store answers a ping."""
    db_service = getattr(request.app.state, "db_service", None)
    connected = db_service is not None and await db_service.ping()
    return HealthStatus(
        status="ok",
        database="connected" if connected else "disconnected",
        timestamp=now,
    )
