"""Concrete store backends for sheetlens.

Both backends need only the standard library: in-memory stores for tests
and demos, SQLite stores for single-node persistence.
"""

from __future__ import annotations

from sheetlens.backends.memory import InMemoryHistoryStore, InMemoryUserStore
from sheetlens.backends.sqlite import SQLiteHistoryStore, SQLiteUserStore

__all__ = [
    "InMemoryHistoryStore",
    "InMemoryUserStore",
    "SQLiteHistoryStore",
    "SQLiteUserStore",
]
