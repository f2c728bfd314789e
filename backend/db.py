"""SQLite persistence for the user registry."""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, List, Union

from config import USERS_DATABASE

# Database file location
DB_PATH = Path(USERS_DATABASE)


def init_db(db_path: Union[str, Path] = DB_PATH) -> bool:
    """
    Initialize database with schema.

    Returns:
        True if the database file did not exist before this call
    """
    db_path = Path(db_path)
    created = not db_path.exists()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_connection(db_path) as conn:
        conn.executescript("""
            -- Registered users, keyed by email
            CREATE TABLE IF NOT EXISTS users (
                email TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                url TEXT NOT NULL,
                approved BOOLEAN NOT NULL DEFAULT FALSE,
                roles TEXT NOT NULL DEFAULT '[]',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
        """)
        conn.commit()

    return created


@contextmanager
def get_connection(db_path: Union[str, Path] = DB_PATH) -> Generator[sqlite3.Connection, None, None]:
    """Get a database connection with row factory."""
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def _row_to_user(row: sqlite3.Row) -> dict:
    user = dict(row)
    user["approved"] = bool(user["approved"])
    user["roles"] = json.loads(user["roles"])
    return user


def list_users(db_path: Union[str, Path] = DB_PATH) -> List[dict]:
    """Get every stored user."""
    with get_connection(db_path) as conn:
        rows = conn.execute("SELECT * FROM users ORDER BY email").fetchall()
        return [_row_to_user(row) for row in rows]


def get_user(email: str, db_path: Union[str, Path] = DB_PATH) -> dict | None:
    """Get user by email."""
    with get_connection(db_path) as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE email = ?",
            (email,)
        ).fetchone()
        return _row_to_user(row) if row else None


def save_user(
    email: str,
    name: str,
    url: str,
    approved: bool,
    roles: List[str],
    db_path: Union[str, Path] = DB_PATH,
) -> dict:
    """Insert a user or replace the stored fields of an existing one."""
    with get_connection(db_path) as conn:
        conn.execute(
            """
            INSERT INTO users (email, name, url, approved, roles)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(email) DO UPDATE SET
                name = excluded.name,
                url = excluded.url,
                approved = excluded.approved,
                roles = excluded.roles,
                updated_at = CURRENT_TIMESTAMP
            """,
            (email, name, url, approved, json.dumps(roles))
        )
        conn.commit()
    return get_user(email, db_path)
