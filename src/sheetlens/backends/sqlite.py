"""SQLite backends for the ``HistoryStore`` and ``UserStore`` protocols.

Provides concrete implementations backed by Python's built-in ``sqlite3``
module.  Suitable for local / single-node deployments and testing.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from typing import Any

from sheetlens.models import FileHistoryRecord, UserRecord

logger = logging.getLogger("sheetlens")

_USER_COLUMNS = (
    "id",
    "auth0_id",
    "email",
    "name",
    "picture",
    "role",
    "created_at",
    "last_login",
)


class _SQLiteBackend:
    """Shared connection handling for the SQLite stores.

    Parameters
    ----------
    db_path:
        Filesystem path or ``":memory:"`` for an in-memory database.
    """

    _schema = ""

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.execute(self._schema)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise ConnectionError(
                f"Failed to connect to SQLite database at {db_path}: {exc}"
            ) from exc

    def get_connection_uri(self) -> str:
        """Return the database connection URI."""
        return f"sqlite:///{self._db_path}"

    def close(self) -> None:
        """Close the underlying SQLite connection."""
        self._conn.close()


class SQLiteHistoryStore(_SQLiteBackend):
    """Upload history stored in a ``file_history`` table."""

    _schema = """
        CREATE TABLE IF NOT EXISTS file_history (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            file_name TEXT NOT NULL,
            file_size INTEGER NOT NULL,
            file_type TEXT NOT NULL,
            sheets TEXT NOT NULL,
            uploaded_at TEXT NOT NULL
        )
    """

    def insert(self, record: FileHistoryRecord) -> FileHistoryRecord:
        stored = record.model_copy(update={"id": f"history_{uuid.uuid4().hex}"})
        try:
            self._conn.execute(
                "INSERT INTO file_history VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    stored.id,
                    stored.user_id,
                    stored.file_name,
                    stored.file_size,
                    stored.file_type,
                    json.dumps(stored.sheets),
                    stored.uploaded_at.isoformat(),
                ),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise RuntimeError(f"Failed to insert history record: {exc}") from exc
        return stored

    def find_by_user(self, user_id: str) -> list[FileHistoryRecord]:
        cursor = self._conn.execute(
            "SELECT * FROM file_history WHERE user_id = ?", (user_id,)
        )
        return [self._to_record(row) for row in cursor.fetchall()]

    def find_all(self) -> list[FileHistoryRecord]:
        cursor = self._conn.execute("SELECT * FROM file_history")
        return [self._to_record(row) for row in cursor.fetchall()]

    @staticmethod
    def _to_record(row: tuple) -> FileHistoryRecord:
        return FileHistoryRecord(
            id=row[0],
            user_id=row[1],
            file_name=row[2],
            file_size=row[3],
            file_type=row[4],
            sheets=json.loads(row[5]),
            uploaded_at=datetime.fromisoformat(row[6]),
        )


class SQLiteUserStore(_SQLiteBackend):
    """User profiles stored in a ``users`` table keyed by ``auth0_id``."""

    _schema = """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            auth0_id TEXT NOT NULL UNIQUE,
            email TEXT,
            name TEXT,
            picture TEXT,
            role TEXT NOT NULL,
            created_at TEXT NOT NULL,
            last_login TEXT NOT NULL
        )
    """

    def find_by_auth0_id(self, auth0_id: str) -> UserRecord | None:
        cursor = self._conn.execute(
            "SELECT * FROM users WHERE auth0_id = ?", (auth0_id,)
        )
        row = cursor.fetchone()
        return self._to_record(row) if row else None

    def insert(self, record: UserRecord) -> UserRecord:
        stored = record.model_copy(update={"id": f"user_{uuid.uuid4().hex}"})
        try:
            self._conn.execute(
                "INSERT INTO users VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                self._to_params(stored),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise RuntimeError(f"Failed to insert user '{record.auth0_id}': {exc}") from exc
        return stored

    def update(self, auth0_id: str, fields: dict[str, Any]) -> UserRecord | None:
        existing = self.find_by_auth0_id(auth0_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=fields)
        params = self._to_params(updated)
        assignments = ", ".join(f"{col} = ?" for col in _USER_COLUMNS[2:])
        try:
            self._conn.execute(
                f"UPDATE users SET {assignments} WHERE auth0_id = ?",
                (*params[2:], auth0_id),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise RuntimeError(f"Failed to update user '{auth0_id}': {exc}") from exc
        return updated

    def find_all(self) -> list[UserRecord]:
        cursor = self._conn.execute("SELECT * FROM users")
        return [self._to_record(row) for row in cursor.fetchall()]

    @staticmethod
    def _to_params(record: UserRecord) -> tuple:
        return (
            record.id,
            record.auth0_id,
            record.email,
            record.name,
            record.picture,
            record.role,
            record.created_at.isoformat(),
            record.last_login.isoformat(),
        )

    @staticmethod
    def _to_record(row: tuple) -> UserRecord:
        data = dict(zip(_USER_COLUMNS, row))
        data["created_at"] = datetime.fromisoformat(data["created_at"])
        data["last_login"] = datetime.fromisoformat(data["last_login"])
        return UserRecord(**data)
