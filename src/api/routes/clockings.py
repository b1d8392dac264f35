"""
Thin proxy to the Intratime clockings endpoints.

The caller supplies its own vendor token; nothing is read from or written
to the stored session.
"""

from fastapi import APIRouter, Depends, Header, Request, status

from api.dependencies import get_intratime_client, verify_api_key
from api.errors import api_error
from api.models.responses import ErrorCodes
from core.config import ALL_CLOCKING_TYPES
from core.errors import FetchError
from core.intratime_client import IntratimeClient

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


def _require_token(request: Request, token: str | None) -> str:
    if not token:
        raise api_error(
            request,
            status.HTTP_401_UNAUTHORIZED,
            "Missing Intratime token header",
            ErrorCodes.UNAUTHORIZED,
        )
    return token


def _upstream_error(request: Request, error: FetchError):
    return api_error(
        request,
        error.status_code or status.HTTP_502_BAD_GATEWAY,
        str(error),
        ErrorCodes.UPSTREAM_ERROR,
    )


@router.get("/clockings")
async def get_clockings(
    request: Request,
    token: str | None = Header(None),
    client: IntratimeClient = Depends(get_intratime_client),
):
    """Relay GET /api/user/clockings; `from` is required, `to` and `type` optional."""
    token = _require_token(request, token)
    start = request.query_params.get("from")
    if not start:
        raise api_error(
            request,
            status.HTTP_400_BAD_REQUEST,
            "Missing 'from' parameter",
            ErrorCodes.INVALID_REQUEST,
        )

    try:
        return await client.get_clockings(
            token,
            start,
            request.query_params.get("to"),
            request.query_params.get("type") or ALL_CLOCKING_TYPES,
        )
    except FetchError as e:
        raise _upstream_error(request, e)


@router.post("/clockings")
async def post_clocking(
    request: Request,
    token: str | None = Header(None),
    client: IntratimeClient = Depends(get_intratime_client),
):
    """Relay a form-encoded POST /api/user/clocking."""
    token = _require_token(request, token)
    form = await request.form()

    try:
        return await client.post_clocking(token, dict(form))
    except FetchError as e:
        raise _upstream_error(request, e)
