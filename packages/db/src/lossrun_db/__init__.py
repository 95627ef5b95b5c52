# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .config import DatabaseSettings, db_settings
from .database import Base, DatabaseService, StoreConnectionError
from .models import (
    BatchDetail,
    DailySystemHealth,
    MappingFailure,
    ProductBreakdown,
    UserActivity,
    UserDashboard,
)

__all__ = [
    "Base",
    "DatabaseService",
    "DatabaseSettings",
    "StoreConnectionError",
    "db_settings",
    "__version__",
    # Read models
    "BatchDetail",
    "DailySystemHealth",
    "MappingFailure",
    "ProductBreakdown",
    "UserActivity",
    "UserDashboard",
]
