"""Helpers to build error responses and record them in the request log."""

from fastapi import HTTPException, Request

from api.logging import RequestLog


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def current_log(request: Request) -> RequestLog | None:
    """Request log attached by the logging middleware, if any."""
    return getattr(request.state, "request_log", None)


def api_error(
    request: Request,
    status_code: int,
    error: str,
    code: str,
    details: list[str] | None = None,
    detail_type: str = "validation_error",
) -> HTTPException:
    """Build an HTTPException in the standard error format and log it."""
    details = details or []
    log = current_log(request)
    if log is not None:
        log.error_code = code
        log.error_message = error
        for detail in details:
            log.details.append((detail_type, detail))

    return HTTPException(
        status_code=status_code,
        detail={"error": error, "code": code, "details": details},
    )
