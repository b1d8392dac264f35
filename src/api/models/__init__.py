"""API Pydantic models."""

from .requests import DayEdit, QuotaRequest, WeekRequest
from .responses import ErrorCodes, ErrorResponse, HealthResponse

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "DayEdit",
    "WeekRequest",
    "QuotaRequest",
]
