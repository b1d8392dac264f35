"""
Async HTTP client for the Intratime time-tracking API.
"""

from datetime import datetime

import httpx

from core.config import (
    ALL_CLOCKING_TYPES,
    DEFAULT_WEEKLY_QUOTA,
    INTRATIME_ACCEPT,
    INTRATIME_API_URL,
    INTRATIME_TIMEOUT_SECONDS,
)
from core.errors import AuthError, FetchError, StateError
from core.session import Session
from models.clocking import ClockKind

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def _error_message(response: httpx.Response, default: str) -> str:
    """Best-effort extraction of the vendor's error message."""
    try:
        data = response.json()
    except ValueError:
        return response.text or default
    if isinstance(data, dict):
        return data.get("message") or data.get("error") or default
    return default


def _require_session(session: Session | None) -> Session:
    if session is None or not session.token:
        raise StateError("No active session")
    return session


class IntratimeClient:
    """
    Thin wrapper around httpx.AsyncClient for the three vendor calls.

    Use as an async context manager so the connection pool is closed.
    """

    def __init__(
        self,
        base_url: str = INTRATIME_API_URL,
        timeout: float = INTRATIME_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": INTRATIME_ACCEPT},
        )

    async def __aenter__(self) -> "IntratimeClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================

    async def login(self, user: str, pin: str) -> Session:
        """
        Log in with user and PIN.

        Raises:
            AuthError: bad credentials, malformed response or transport failure
        """
        try:
            response = await self._client.post(
                "/api/user/login",
                data={"user": user, "pin": pin},
                headers={"Content-Type": "application/x-www-form-urlencoded; charset=utf-8"},
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Login request failed: {e}") from e

        if response.is_error:
            raise AuthError(_error_message(response, "Invalid user or PIN"))

        try:
            data = response.json()
        except ValueError as e:
            raise AuthError("Login response is not valid JSON") from e

        token = data.get("USER_TOKEN") if isinstance(data, dict) else None
        if not token:
            raise AuthError("Login response did not include a token")

        return Session(
            token=token,
            user_id=str(data.get("USER_ID", "")),
            username=data.get("USER_USERNAME") or user,
            full_name=data.get("USER_NAME") or "",
            email=data.get("USER_EMAIL") or user,
            weekly_quota=float(data.get("USER_WORKING_TIME") or DEFAULT_WEEKLY_QUOTA),
        )

    # =========================================================================
    # CLOCKINGS
    # =========================================================================

    async def get_clockings(
        self,
        token: str,
        start: str,
        end: str | None = None,
        types: str = ALL_CLOCKING_TYPES,
    ) -> list[dict]:
        """Raw GET /api/user/clockings with 'YYYY-MM-DD HH:MM:SS' bounds."""
        params = {"from": start, "type": types}
        if end:
            params["to"] = end
        try:
            response = await self._client.get(
                "/api/user/clockings", params=params, headers={"token": token}
            )
        except httpx.HTTPError as e:
            raise FetchError(f"Clockings request failed: {e}") from e

        if response.is_error:
            raise FetchError(
                _error_message(response, "Error fetching clockings"), response.status_code
            )
        try:
            data = response.json()
        except ValueError as e:
            raise FetchError("Clockings response is not valid JSON") from e
        if not isinstance(data, list):
            raise FetchError("Unexpected clockings response shape")
        return data

    async def post_clocking(self, token: str, form: dict) -> dict:
        """Raw POST /api/user/clocking with a form-encoded body."""
        try:
            response = await self._client.post(
                "/api/user/clocking", data=form, headers={"token": token}
            )
        except httpx.HTTPError as e:
            raise FetchError(f"Clocking request failed: {e}") from e

        if response.is_error:
            raise FetchError(
                _error_message(response, "Error creating clocking"), response.status_code
            )
        try:
            return response.json()
        except ValueError:
            return {}

    async def fetch_clockings(
        self, session: Session | None, start: datetime, end: datetime
    ) -> list[dict]:
        """Fetch all clocking records between two instants."""
        session = _require_session(session)
        return await self.get_clockings(
            session.token, format_timestamp(start), format_timestamp(end)
        )

    async def submit_clocking(
        self, session: Session | None, kind: ClockKind, timestamp: datetime
    ) -> dict:
        """Create one clocking with an explicit (not server) timestamp."""
        session = _require_session(session)
        form = {
            "user_action": str(kind.code),
            "user_timestamp": format_timestamp(timestamp),
            "user_use_server_time": "false",
            "user_project": "",
            "expense_amount": "0",
        }
        return await self.post_clocking(session.token, form)
