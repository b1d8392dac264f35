"""
SQLite database operations for the session, submissions and request log.
"""

import sqlite3
from datetime import datetime
from pathlib import Path

from core.config import DB_PATH

SCHEMA = [
    # Single active session (id is always 1)
    """
    CREATE TABLE IF NOT EXISTS session (
        id INTEGER PRIMARY KEY CHECK(id = 1),
        token TEXT NOT NULL,
        user_id TEXT NOT NULL,
        username TEXT,
        full_name TEXT,
        email TEXT,
        weekly_quota REAL NOT NULL,
        login_date TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # Every clocking accepted by the vendor
    """
    CREATE TABLE IF NOT EXISTS submissions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        clock_date TEXT NOT NULL,
        kind TEXT NOT NULL CHECK(kind IN ('entry', 'pause', 'resume', 'exit')),
        planned_time TEXT NOT NULL,
        submitted_timestamp TEXT NOT NULL,
        create_date TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT UNIQUE NOT NULL,
        timestamp TEXT NOT NULL,
        endpoint TEXT NOT NULL,
        method TEXT NOT NULL,
        client_ip TEXT,
        week_start TEXT,
        status_code INTEGER NOT NULL,
        error_code TEXT,
        error_message TEXT,
        processing_time_ms INTEGER NOT NULL,
        events_submitted INTEGER,
        total_hours REAL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_request_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT NOT NULL,
        detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'event_submitted', 'warning')),
        message TEXT NOT NULL,
        FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_submissions_date ON submissions(clock_date)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_status ON api_requests(status_code)",
    "CREATE INDEX IF NOT EXISTS idx_api_request_details_request ON api_request_details(request_id)",
]


def get_connection(db_path: Path | None = None) -> sqlite3.Connection:
    """Get a database connection."""
    conn = sqlite3.connect(db_path or DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_schema(conn: sqlite3.Connection):
    """Create all tables and indexes if they don't exist."""
    conn.execute("PRAGMA foreign_keys = ON")
    for statement in SCHEMA:
        conn.execute(statement)
    conn.commit()


def fetch_session_row(conn: sqlite3.Connection) -> sqlite3.Row | None:
    cursor = conn.execute("SELECT * FROM session WHERE id = 1")
    return cursor.fetchone()


def upsert_session_row(conn: sqlite3.Connection, values: dict):
    """Replace the active session."""
    conn.execute(
        """
        INSERT OR REPLACE INTO session (
            id, token, user_id, username, full_name, email, weekly_quota
        ) VALUES (1, ?, ?, ?, ?, ?, ?)
        """,
        (
            values["token"],
            values["user_id"],
            values["username"],
            values["full_name"],
            values["email"],
            values["weekly_quota"],
        ),
    )
    conn.commit()


def delete_session_row(conn: sqlite3.Connection):
    conn.execute("DELETE FROM session")
    conn.commit()


def update_session_quota(conn: sqlite3.Connection, weekly_quota: float) -> bool:
    """Update the quota of the active session. Returns False if there is none."""
    cursor = conn.execute(
        "UPDATE session SET weekly_quota = ? WHERE id = 1", (weekly_quota,)
    )
    conn.commit()
    return cursor.rowcount > 0


def insert_submission(
    conn: sqlite3.Connection, clock_date: str, kind: str, planned_time: str, timestamp: str
) -> int:
    """Record one clocking accepted by the vendor and return its row id."""
    cursor = conn.execute(
        """
        INSERT INTO submissions (clock_date, kind, planned_time, submitted_timestamp)
        VALUES (?, ?, ?, ?)
        """,
        (clock_date, kind, planned_time, timestamp),
    )
    conn.commit()
    return cursor.lastrowid


def record_submission(event, timestamp: datetime, db_path: Path | None = None) -> int:
    """Open a connection and record one submitted ClockEvent."""
    conn = get_connection(db_path)
    try:
        return insert_submission(
            conn,
            event.date.isoformat(),
            event.kind.key,
            event.time,
            timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        )
    finally:
        conn.close()
