"""sheetlens -- spreadsheet ingestion, column-type inference and chart recommendation.

Public API exports for models, enums, errors, configuration, the pipeline
components, and the persistence protocols.
"""

from sheetlens.config import SheetLensConfig
from sheetlens.dates import DateParser, DateutilDateParser, IsoDateParser
from sheetlens.decoder import TabularDecoder
from sheetlens.errors import (
    DecodeError,
    ErrorCode,
    IngestError,
    ReadError,
    SheetLensError,
    UnsupportedExtensionError,
)
from sheetlens.formatting import format_value
from sheetlens.history import HistoryService
from sheetlens.models import (
    ChartKind,
    ColumnStats,
    ColumnType,
    FileFormat,
    FileHistoryRecord,
    HistoryResult,
    ScalarKind,
    SheetAnalysis,
    UploadResult,
    UserListResult,
    UserRecord,
    UserResult,
    Workbook,
    column_names,
    scalar_kind,
)
from sheetlens.profiler import ColumnProfiler, parse_as_date, parse_as_float
from sheetlens.protocols import HistoryStore, UserStore
from sheetlens.recommender import ChartRecommender
from sheetlens.router import SheetRouter, create_default_router
from sheetlens.security import UploadScanner

__version__ = "1.0.0"

__all__ = [
    # Enums
    "FileFormat",
    "ScalarKind",
    "ColumnType",
    "ChartKind",
    # Core models
    "Workbook",
    "ColumnStats",
    "SheetAnalysis",
    "FileHistoryRecord",
    "UserRecord",
    "UploadResult",
    "HistoryResult",
    "UserResult",
    "UserListResult",
    "column_names",
    "scalar_kind",
    # Pipeline
    "TabularDecoder",
    "ColumnProfiler",
    "ChartRecommender",
    "UploadScanner",
    "SheetRouter",
    "create_default_router",
    "parse_as_float",
    "parse_as_date",
    "format_value",
    # Dates
    "DateParser",
    "DateutilDateParser",
    "IsoDateParser",
    # History
    "HistoryService",
    "HistoryStore",
    "UserStore",
    # Errors
    "ErrorCode",
    "IngestError",
    "SheetLensError",
    "UnsupportedExtensionError",
    "ReadError",
    "DecodeError",
    # Config
    "SheetLensConfig",
]
