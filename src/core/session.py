"""
Explicit session object and its SQLite-backed store.

The session is passed to whatever needs authenticated vendor access; the
store is the only place it is persisted.
"""

from dataclasses import asdict, dataclass
from pathlib import Path

from core.config import DB_PATH, DEFAULT_WEEKLY_QUOTA
from core.database import (
    delete_session_row,
    fetch_session_row,
    get_connection,
    init_schema,
    update_session_quota,
    upsert_session_row,
)


@dataclass(frozen=True)
class Session:
    """Authenticated Intratime session plus the cached user profile."""

    token: str
    user_id: str
    username: str = ""
    full_name: str = ""
    email: str = ""
    weekly_quota: float = DEFAULT_WEEKLY_QUOTA


class SessionStore:
    """Load/save hooks for the single active session."""

    def __init__(self, db_path: Path = DB_PATH):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = get_connection(self.db_path)
        try:
            init_schema(conn)
        finally:
            conn.close()

    def load(self) -> Session | None:
        conn = get_connection(self.db_path)
        try:
            row = fetch_session_row(conn)
        finally:
            conn.close()
        if row is None:
            return None
        return Session(
            token=row["token"],
            user_id=row["user_id"],
            username=row["username"] or "",
            full_name=row["full_name"] or "",
            email=row["email"] or "",
            weekly_quota=row["weekly_quota"],
        )

    def get_token(self) -> str | None:
        session = self.load()
        return session.token if session else None

    def save(self, session: Session):
        conn = get_connection(self.db_path)
        try:
            upsert_session_row(conn, asdict(session))
        finally:
            conn.close()

    def clear(self):
        conn = get_connection(self.db_path)
        try:
            delete_session_row(conn)
        finally:
            conn.close()

    def update_quota(self, weekly_quota: float) -> Session | None:
        """Persist a new weekly quota and return the updated session."""
        conn = get_connection(self.db_path)
        try:
            updated = update_session_quota(conn, weekly_quota)
        finally:
            conn.close()
        return self.load() if updated else None
