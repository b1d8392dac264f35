"""FastAPI application entry point."""

import time
import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.errors import get_client_ip
from api.logging import RequestLog, log_request
from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import (
    auth_router,
    clockings_router,
    health_router,
    history_router,
    holidays_router,
    week_router,
)
from core.config import API_DEBUG, API_VERSION, HOLIDAYS_PATH
from core.errors import ScheduleValidationError, StateError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup: verify critical paths exist
    if not HOLIDAYS_PATH.exists():
        warnings.warn(f"Bank holiday data not found at {HOLIDAYS_PATH}")

    yield


app = FastAPI(
    title="Fichajes API",
    description="REST API for planning, reconciling and submitting weekly Intratime clockings",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)

# CORS middleware (for development)
if API_DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def request_logging(request: Request, call_next):
    """Record every /v1 request in the SQLite request log."""
    if not request.url.path.startswith("/v1"):
        return await call_next(request)

    log = RequestLog(
        endpoint=request.url.path,
        method=request.method,
        client_ip=get_client_ip(request),
    )
    request.state.request_log = log
    start_time = time.time()

    try:
        response = await call_next(request)
        log.status_code = response.status_code
        return response
    except Exception as e:
        log.status_code = 500
        log.error_code = ErrorCodes.INTERNAL_ERROR
        log.error_message = str(e)
        raise
    finally:
        log.processing_time_ms = int((time.time() - start_time) * 1000)
        try:
            log_request(log)
        except Exception as e:
            print(f"Failed to write request log: {e}")


@app.exception_handler(StateError)
async def state_error_handler(request: Request, exc: StateError):
    return JSONResponse(
        status_code=401,
        content=ErrorResponse(
            error=str(exc),
            code=ErrorCodes.NO_SESSION,
            details=[],
        ).model_dump(),
    )


@app.exception_handler(ScheduleValidationError)
async def schedule_error_handler(request: Request, exc: ScheduleValidationError):
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error="Week schedule has errors",
            code=ErrorCodes.VALIDATION_ERROR,
            details=exc.messages,
        ).model_dump(),
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
            details=[],
        ).model_dump(),
    )


# Include routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(week_router)
app.include_router(history_router)
app.include_router(holidays_router)
app.include_router(clockings_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )
