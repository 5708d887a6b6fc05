"""User and upload-history service over injected stores.

Every operation returns a structured result (``success`` plus ``message``)
instead of raising: store failures are logged and reported, so a broken
persistence backend never interrupts an upload.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from sheetlens.models import (
    FileHistoryRecord,
    HistoryResult,
    UserListResult,
    UserRecord,
    UserResult,
)
from sheetlens.protocols import HistoryStore, UserStore

logger = logging.getLogger("sheetlens")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryService:
    """Records users and their file uploads.

    Parameters
    ----------
    user_store:
        Backend holding user profiles.
    history_store:
        Backend holding upload-history records.
    clock:
        Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        user_store: UserStore,
        history_store: HistoryStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._users = user_store
        self._history = history_store
        self._clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def save_user(self, profile: Mapping[str, Any] | None) -> UserResult:
        """Create or refresh the user described by an identity-provider profile.

        *profile* must carry ``sub`` (the provider's user id).  A known user
        gets its ``email``, ``name``, ``picture`` and ``last_login``
        refreshed; an unknown one is inserted with role ``user``.
        """
        if not profile or not profile.get("sub"):
            logger.error("Invalid user data provided")
            return UserResult(success=False, message="Invalid user data provided")

        auth0_id = profile["sub"]
        now = self._clock()
        try:
            existing = self._users.find_by_auth0_id(auth0_id)
            if existing is not None:
                user = self._users.update(
                    auth0_id,
                    {
                        "email": profile.get("email"),
                        "name": profile.get("name"),
                        "picture": profile.get("picture"),
                        "last_login": now,
                    },
                )
                return UserResult(success=True, user=user or existing)

            user = self._users.insert(
                UserRecord(
                    auth0_id=auth0_id,
                    email=profile.get("email"),
                    name=profile.get("name"),
                    picture=profile.get("picture"),
                    role="user",
                    created_at=now,
                    last_login=now,
                )
            )
            logger.info("Created user %s", user.id)
            return UserResult(success=True, user=user)
        except Exception as exc:
            logger.error("Error saving user: %s", exc)
            return UserResult(success=False, message=str(exc))

    def get_all_users(self) -> UserListResult:
        """Return every stored user (for admin views)."""
        try:
            return UserListResult(success=True, users=self._users.find_all())
        except Exception as exc:
            logger.error("Error getting users: %s", exc)
            return UserListResult(success=False, message=str(exc))

    # ------------------------------------------------------------------
    # Upload history
    # ------------------------------------------------------------------

    def save_file_upload_history(
        self, user_id: str | None, file_info: Mapping[str, Any] | None
    ) -> HistoryResult:
        """Record one upload for *user_id*.

        *file_info* needs a ``name``; ``size`` defaults to 0, ``type`` to
        ``"unknown"`` and ``sheets`` to an empty list.
        """
        if not user_id:
            logger.error("User ID is required to save file history")
            return HistoryResult(success=False, message="User ID is required")
        if not file_info or not file_info.get("name"):
            logger.error("File data is required to save file history")
            return HistoryResult(success=False, message="File data is required")

        try:
            record = self._history.insert(
                FileHistoryRecord(
                    user_id=user_id,
                    file_name=file_info["name"],
                    file_size=file_info.get("size") or 0,
                    file_type=file_info.get("type") or "unknown",
                    sheets=list(file_info.get("sheets") or []),
                    uploaded_at=self._clock(),
                )
            )
        except Exception as exc:
            logger.error("Error saving file history: %s", exc)
            return HistoryResult(success=False, message=str(exc))
        return HistoryResult(success=True, record=record)

    def get_file_upload_history(self, user_id: str | None) -> HistoryResult:
        """Return *user_id*'s uploads, newest first."""
        if not user_id:
            return HistoryResult(success=False, message="User ID is required")
        try:
            records = self._history.find_by_user(user_id)
        except Exception as exc:
            logger.error("Error getting file history: %s", exc)
            return HistoryResult(success=False, message=str(exc))
        return HistoryResult(success=True, history=_newest_first(records))

    def get_all_file_history(self) -> HistoryResult:
        """Return every upload across all users, newest first (for admin views)."""
        try:
            records = self._history.find_all()
        except Exception as exc:
            logger.error("Error getting file history: %s", exc)
            return HistoryResult(success=False, message=str(exc))
        return HistoryResult(success=True, history=_newest_first(records))


def _newest_first(records: list[FileHistoryRecord]) -> list[FileHistoryRecord]:
    return sorted(records, key=lambda r: r.uploaded_at, reverse=True)
