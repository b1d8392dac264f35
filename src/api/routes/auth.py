"""Login, logout and user profile endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, Response, status

from api.dependencies import (
    get_intratime_client,
    get_session_store,
    require_session,
    verify_api_key,
)
from api.errors import api_error
from api.models.requests import QuotaRequest
from api.models.responses import ErrorCodes, LoginResponse, UserResponse
from core.errors import AuthError
from core.intratime_client import IntratimeClient
from core.session import Session, SessionStore

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    request: Request,
    user: Annotated[str | None, Form(description="Intratime user")] = None,
    pin: Annotated[str | None, Form(description="Intratime PIN")] = None,
    client: IntratimeClient = Depends(get_intratime_client),
    store: SessionStore = Depends(get_session_store),
):
    """
    Log in against Intratime and store the session.

    Replaces any previously active session.
    """
    if not user or not pin:
        raise api_error(
            request,
            status.HTTP_400_BAD_REQUEST,
            "User and PIN are required",
            ErrorCodes.INVALID_REQUEST,
        )

    try:
        session = await client.login(user, pin)
    except AuthError as e:
        raise api_error(
            request, status.HTTP_401_UNAUTHORIZED, str(e), ErrorCodes.UNAUTHORIZED
        )

    store.save(session)
    return LoginResponse(
        token=session.token,
        user_id=session.user_id,
        user=UserResponse.from_session(session),
    )


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(store: SessionStore = Depends(get_session_store)):
    """Forget the active session."""
    store.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/user", response_model=UserResponse)
async def get_user(session: Session = Depends(require_session)):
    return UserResponse.from_session(session)


@router.put("/user/quota", response_model=UserResponse)
async def update_quota(
    request: Request,
    body: QuotaRequest,
    session: Session = Depends(require_session),
    store: SessionStore = Depends(get_session_store),
):
    """Change the weekly hours quota used for week totals."""
    updated = store.update_quota(body.weekly_quota)
    if updated is None:
        # Logged out between loading the session and saving
        raise api_error(
            request, status.HTTP_401_UNAUTHORIZED, "No active session", ErrorCodes.NO_SESSION
        )
    return UserResponse.from_session(updated)
