"""Pydantic data models and enumerations for sheetlens.

Defines the decoded ``Workbook``, the derived per-sheet artifacts
(``ColumnStats``, ``ColumnType``, ``ChartKind``, ``SheetAnalysis``), the
tagged ``ScalarKind`` used to classify raw cell values, the records handed to
persistence collaborators, and the structured result models.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field

from sheetlens.errors import IngestError

CellValue = Union[str, int, float, bool, datetime, date, None]
Row = dict[str, CellValue]
RowSet = list[Row]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class FileFormat(str, Enum):
    """Container format detected from the file's content signature."""

    XLSX = "xlsx"
    XLS = "xls"
    CSV = "csv"


class ScalarKind(str, Enum):
    """Storage kind of a single cell value, independent of its meaning."""

    EMPTY = "empty"
    BOOLEAN = "boolean"
    NUMBER = "number"
    TEXT = "text"
    DATETIME = "datetime"


class ColumnType(str, Enum):
    """Semantic type inferred for a column from its sampled values."""

    NUMBER = "number"
    CURRENCY = "currency"
    PERCENT = "percent"
    DATE = "date"
    TEXT = "text"
    UNKNOWN = "unknown"


class ChartKind(str, Enum):
    """Visualization shapes the recommender can suggest."""

    BAR = "bar"
    LINE = "line"
    AREA = "area"
    SCATTER = "scatter"
    PIE = "pie"
    RADAR = "radar"


NUMERIC_TYPES = frozenset({ColumnType.NUMBER, ColumnType.CURRENCY, ColumnType.PERCENT})
CATEGORICAL_TYPES = frozenset({ColumnType.TEXT, ColumnType.DATE})


def scalar_kind(value: object) -> ScalarKind:
    """Classify a raw cell value into its :class:`ScalarKind`.

    ``bool`` is checked before numbers because it subclasses ``int``.
    Empty strings count as empty; NaN floats (as produced by pandas for
    missing cells) count as empty too.
    """
    if value is None:
        return ScalarKind.EMPTY
    if isinstance(value, bool):
        return ScalarKind.BOOLEAN
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return ScalarKind.EMPTY
        return ScalarKind.NUMBER
    if isinstance(value, (datetime, date)):
        return ScalarKind.DATETIME
    if isinstance(value, str):
        return ScalarKind.EMPTY if value == "" else ScalarKind.TEXT
    return ScalarKind.TEXT


# ---------------------------------------------------------------------------
# Decoded workbook
# ---------------------------------------------------------------------------


class Workbook(BaseModel):
    """The decoded result of one uploaded file.

    ``sheet_names`` keeps the order found in the source file.  ``headers``
    holds each sheet's column names as derived by the decoder; a sheet with
    no data rows has an empty header list.
    """

    sheet_names: list[str]
    sheets: dict[str, list[dict[str, CellValue]]]
    headers: dict[str, list[str]]
    source_format: FileFormat

    @property
    def first_sheet(self) -> str | None:
        """Default active sheet; ``None`` only for a workbook with no sheets."""
        return self.sheet_names[0] if self.sheet_names else None

    def rows(self, sheet_name: str) -> RowSet:
        """Return the rows of *sheet_name*; raises ``KeyError`` if absent."""
        return self.sheets[sheet_name]


# ---------------------------------------------------------------------------
# Derived artifacts
# ---------------------------------------------------------------------------


class ColumnStats(BaseModel):
    """Numeric summary of one column, over values that parse as numbers."""

    count: int
    min: float
    max: float
    sum: float
    mean: float
    median: float


class SheetAnalysis(BaseModel):
    """Everything the rendering layer needs to draw the active sheet."""

    sheet_name: str
    row_count: int
    headers: list[str]
    stats: dict[str, ColumnStats]
    column_types: dict[str, ColumnType]
    recommendations: list[ChartKind]


# ---------------------------------------------------------------------------
# Persistence records
# ---------------------------------------------------------------------------


class FileHistoryRecord(BaseModel):
    """One upload-history entry, tagged with the uploading user's id."""

    id: str | None = None
    user_id: str
    file_name: str
    file_size: int = 0
    file_type: str = "unknown"
    sheets: list[str] = []
    uploaded_at: datetime


class UserRecord(BaseModel):
    """A user profile as mirrored from the identity provider."""

    id: str | None = None
    auth0_id: str
    email: str | None = None
    name: str | None = None
    picture: str | None = None
    role: str = "user"
    created_at: datetime
    last_login: datetime


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class HistoryResult(BaseModel):
    """Outcome of a history read or write."""

    success: bool
    message: str | None = None
    record: FileHistoryRecord | None = None
    history: list[FileHistoryRecord] = []


class UserResult(BaseModel):
    """Outcome of a user upsert."""

    success: bool
    message: str | None = None
    user: UserRecord | None = None


class UserListResult(BaseModel):
    """Outcome of listing all users."""

    success: bool
    message: str | None = None
    users: list[UserRecord] = []


class UploadResult(BaseModel):
    """Final result returned after processing one uploaded file.

    ``success`` is ``False`` whenever a fatal error stopped the pipeline; in
    that case ``workbook`` is ``None`` and ``message`` carries the cause.
    """

    success: bool
    message: str
    file_name: str
    workbook: Workbook | None = None
    analyses: dict[str, SheetAnalysis] = {}
    active_sheet: str | None = None
    history: FileHistoryRecord | None = None

    errors: list[str] = []
    warnings: list[str] = []
    error_details: list[IngestError] = Field(default_factory=list)

    processing_time_seconds: float = 0.0


def column_names(rows: RowSet, universe: str = "first_row") -> list[str]:
    """Return the column names of *rows* under the given universe policy.

    ``"first_row"`` trusts the keys of ``rows[0]`` only, so columns that
    first appear in later (sparse) rows are not reported.  ``"union"``
    collects keys across all rows in first-seen order.
    """
    if not rows:
        return []
    if universe == "union":
        seen: dict[str, None] = {}
        for row in rows:
            for key in row:
                seen.setdefault(key, None)
        return list(seen)
    return list(rows[0].keys())
