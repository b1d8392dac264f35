"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import date, datetime
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from core.intratime_client import IntratimeClient
from core.session import Session, SessionStore
from models.clocking import ClockEvent, ClockKind

# Monday 2 March 2026: a week without bank holidays
MONDAY = date(2026, 3, 2)


@pytest.fixture
def monday():
    return MONDAY


@pytest.fixture
def db_path(tmp_path):
    """Fresh SQLite database path for each test."""
    return tmp_path / "fichajes.db"


@pytest.fixture
def session():
    """Active Intratime session."""
    return Session(
        token="test-token",
        user_id="42",
        username="jdoe",
        full_name="Jane Doe",
        email="jdoe@example.com",
        weekly_quota=40.0,
    )


@pytest.fixture
def store(db_path):
    return SessionStore(db_path)


@pytest.fixture
def make_events():
    """Build a day's ClockEvents from kind/time pairs."""

    def _make(day: date, *pairs: tuple[str, str]) -> list[ClockEvent]:
        return [ClockEvent(date=day, kind=ClockKind.from_key(k), time=t) for k, t in pairs]

    return _make


@pytest.fixture
def make_record():
    """Build a raw vendor clocking record."""

    def _make(moment: str, inout_type: int, inout_id: int = 1) -> dict:
        return {"INOUT_ID": inout_id, "INOUT_TYPE": inout_type, "INOUT_DATE": moment}

    return _make


@pytest.fixture
def mock_client():
    """
    IntratimeClient factory backed by httpx.MockTransport.

    The handler receives every request; requests are also collected in
    `client.requests` for assertions.
    """

    def _make(handler) -> IntratimeClient:
        requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        client = IntratimeClient(
            base_url="https://intratime.test", transport=httpx.MockTransport(_record)
        )
        client.requests = requests
        return client

    return _make


@pytest.fixture
def fixed_now():
    """Wednesday of the test week, mid afternoon."""
    return datetime(2026, 3, 4, 16, 0)
