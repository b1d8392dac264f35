"""FastAPI dependencies for authentication and shared resources."""

import secrets
from datetime import datetime
from typing import AsyncIterator

from fastapi import Depends, Header, HTTPException, status

from api.models.responses import ErrorCodes
from core.config import APP_API_KEY, DB_PATH
from core.intratime_client import IntratimeClient
from core.session import Session, SessionStore


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not APP_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": ErrorCodes.INTERNAL_ERROR,
                "details": [],
            },
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_api_key, APP_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": ErrorCodes.UNAUTHORIZED,
                "details": [],
            },
        )

    return x_api_key


def get_session_store() -> SessionStore:
    return SessionStore(DB_PATH)


async def get_intratime_client() -> AsyncIterator[IntratimeClient]:
    """One vendor client per request, closed when the request ends."""
    async with IntratimeClient() as client:
        yield client


def get_now() -> datetime:
    """Reference clock for in-progress hours."""
    return datetime.now()


def require_session(store: SessionStore = Depends(get_session_store)) -> Session:
    """
    Load the active session.

    Raises:
        HTTPException: 401 if nobody is logged in
    """
    session = store.load()
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "No active session, log in first",
                "code": ErrorCodes.NO_SESSION,
                "details": [],
            },
        )
    return session
