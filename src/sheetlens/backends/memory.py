"""In-memory store backends.

Process-local dict/list storage satisfying the ``HistoryStore`` and
``UserStore`` protocols.  Suitable for tests and single-process demos; each
instance owns its data, so nothing is shared between instances.
"""

from __future__ import annotations

import uuid
from typing import Any

from sheetlens.models import FileHistoryRecord, UserRecord


class InMemoryHistoryStore:
    """List-backed upload-history store."""

    def __init__(self) -> None:
        self.records: list[FileHistoryRecord] = []

    def insert(self, record: FileHistoryRecord) -> FileHistoryRecord:
        stored = record.model_copy(update={"id": f"history_{uuid.uuid4().hex}"})
        self.records.append(stored)
        return stored

    def find_by_user(self, user_id: str) -> list[FileHistoryRecord]:
        return [r for r in self.records if r.user_id == user_id]

    def find_all(self) -> list[FileHistoryRecord]:
        return list(self.records)


class InMemoryUserStore:
    """Dict-backed user store keyed by identity-provider id."""

    def __init__(self) -> None:
        self.users: dict[str, UserRecord] = {}

    def find_by_auth0_id(self, auth0_id: str) -> UserRecord | None:
        return self.users.get(auth0_id)

    def insert(self, record: UserRecord) -> UserRecord:
        stored = record.model_copy(update={"id": f"user_{uuid.uuid4().hex}"})
        self.users[stored.auth0_id] = stored
        return stored

    def update(self, auth0_id: str, fields: dict[str, Any]) -> UserRecord | None:
        existing = self.users.get(auth0_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=fields)
        self.users[auth0_id] = updated
        return updated

    def find_all(self) -> list[UserRecord]:
        return list(self.users.values())
