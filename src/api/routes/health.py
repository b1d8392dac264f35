"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.models.responses import HealthResponse
from core.config import API_VERSION, HOLIDAYS_PATH

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns 200 if healthy, 503 if unhealthy.
    """
    holidays_available = HOLIDAYS_PATH.exists()
    timestamp = datetime.now(timezone.utc).isoformat()

    if holidays_available:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            holidays_available=True,
            timestamp=timestamp,
        )
    else:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                holidays_available=False,
                timestamp=timestamp,
                error="Bank holiday data not found",
            ).model_dump(),
        )
