"""API route modules."""

from .auth import router as auth_router
from .clockings import router as clockings_router
from .health import router as health_router
from .history import router as history_router
from .holidays import router as holidays_router
from .week import router as week_router

__all__ = [
    "auth_router",
    "clockings_router",
    "health_router",
    "history_router",
    "holidays_router",
    "week_router",
]
