"""Persistence protocols consumed by the history service.

The decoding and profiling core never touches these; only
:class:`~sheetlens.history.HistoryService` and the router's history step do.
Both protocols are ``@runtime_checkable`` so callers can optionally verify
conformance with ``isinstance`` checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sheetlens.models import FileHistoryRecord, UserRecord


@runtime_checkable
class HistoryStore(Protocol):
    """Interface for upload-history storage (document or relational)."""

    def insert(self, record: FileHistoryRecord) -> FileHistoryRecord:
        """Persist *record* and return it with its assigned ``id``."""
        ...

    def find_by_user(self, user_id: str) -> list[FileHistoryRecord]:
        """Return every record tagged with *user_id*, in any order."""
        ...

    def find_all(self) -> list[FileHistoryRecord]:
        """Return every stored record, in any order."""
        ...


@runtime_checkable
class UserStore(Protocol):
    """Interface for user-profile storage."""

    def find_by_auth0_id(self, auth0_id: str) -> UserRecord | None:
        """Return the user with the given identity-provider id, if any."""
        ...

    def insert(self, record: UserRecord) -> UserRecord:
        """Persist *record* and return it with its assigned ``id``."""
        ...

    def update(self, auth0_id: str, fields: dict[str, Any]) -> UserRecord | None:
        """Apply *fields* to the matching user; ``None`` if no user matched."""
        ...

    def find_all(self) -> list[UserRecord]:
        """Return every stored user."""
        ...
