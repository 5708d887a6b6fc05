"""Shared test fixtures for sheetlens tests.

Provides a default ``sheetlens_config``, in-memory and failing store
backends, a fixed clock, and generators for ``.xlsx`` / ``.csv`` payloads
built on the fly with openpyxl.
"""

from __future__ import annotations

import io
import pathlib
from datetime import datetime, timezone
from typing import Any

import openpyxl
import pytest

from sheetlens.backends import InMemoryHistoryStore, InMemoryUserStore
from sheetlens.config import SheetLensConfig
from sheetlens.history import HistoryService
from sheetlens.models import FileHistoryRecord

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@pytest.fixture()
def sheetlens_config() -> SheetLensConfig:
    """Return a SheetLensConfig with all defaults."""
    return SheetLensConfig()


# ---------------------------------------------------------------------------
# Workbook builders
# ---------------------------------------------------------------------------


def build_xlsx(sheets: dict[str, list[list[Any]]]) -> bytes:
    """Build an .xlsx payload with one worksheet per entry, in order."""
    wb = openpyxl.Workbook()
    first = True
    for name, rows in sheets.items():
        if first:
            ws = wb.active
            ws.title = name
            first = False
        else:
            ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


SALES_ROWS: list[list[Any]] = [
    ["Region", "Month", "Revenue"],
    ["North", datetime(2024, 1, 1), 1200],
    ["South", datetime(2024, 2, 1), 950.5],
    ["East", datetime(2024, 3, 1), 1830],
    ["West", datetime(2024, 4, 1), 400],
]

SCORES_ROWS: list[list[Any]] = [
    ["Player", "Speed", "Power", "Accuracy", "Active"],
    ["Ana", 7, 8, 9, True],
    ["Ben", 6, 9, 5, False],
    ["Cleo", 8, 6, 7, True],
]


@pytest.fixture()
def sales_xlsx_bytes() -> bytes:
    """Two-sheet workbook: ``Sales`` (text/date/number) and ``Scores``."""
    return build_xlsx({"Sales": SALES_ROWS, "Scores": SCORES_ROWS})


@pytest.fixture()
def sales_xlsx_path(tmp_path: pathlib.Path, sales_xlsx_bytes: bytes) -> pathlib.Path:
    """The two-sheet workbook written to disk as ``sales.xlsx``."""
    path = tmp_path / "sales.xlsx"
    path.write_bytes(sales_xlsx_bytes)
    return path


@pytest.fixture()
def percent_csv_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """A small CSV with a text column and a percent column."""
    path = tmp_path / "growth.csv"
    path.write_text("Team,Growth\nRed,10%\nBlue,20%\nGreen,5.5%\n", encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class FailingHistoryStore:
    """History store whose every call raises, for error-path tests."""

    def insert(self, record: FileHistoryRecord) -> FileHistoryRecord:
        raise RuntimeError("history store offline")

    def find_by_user(self, user_id: str) -> list[FileHistoryRecord]:
        raise RuntimeError("history store offline")

    def find_all(self) -> list[FileHistoryRecord]:
        raise RuntimeError("history store offline")


@pytest.fixture()
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture()
def history_store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


@pytest.fixture()
def history_service(
    user_store: InMemoryUserStore, history_store: InMemoryHistoryStore
) -> HistoryService:
    """HistoryService over fresh in-memory stores and a fixed clock."""
    return HistoryService(user_store, history_store, clock=lambda: FIXED_NOW)


@pytest.fixture()
def make_xlsx():
    """Return the :func:`build_xlsx` helper for ad-hoc workbooks."""
    return build_xlsx
