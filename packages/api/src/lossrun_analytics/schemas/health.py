# This project was developed with assistance from AI tools.
"""Liveness probe schema."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str = "ok"
    database: Literal["connected", "disconnected"]
    timestamp: datetime
