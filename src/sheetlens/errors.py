"""Normalized error codes, structured error model, and exceptions for sheetlens.

``ErrorCode`` values are stable strings suitable for metrics and alerting.
Codes prefixed with ``E_`` are fatal for the upload; codes prefixed with
``W_`` are non-fatal warnings.  ``IngestError`` is the structured record
attached to results.  The exception classes are raised only at the
decoder / upload-gate boundary and each carries an ``IngestError``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error and warning codes for the sheetlens pipeline."""

    # Upload gate
    E_UNSUPPORTED_EXTENSION = "E_UNSUPPORTED_EXTENSION"
    E_FILE_TOO_LARGE = "E_FILE_TOO_LARGE"

    # Read
    E_READ_FAILED = "E_READ_FAILED"

    # Decode
    E_DECODE_CORRUPT = "E_DECODE_CORRUPT"
    E_DECODE_UNSUPPORTED_ENCODING = "E_DECODE_UNSUPPORTED_ENCODING"
    E_DECODE_EMPTY = "E_DECODE_EMPTY"
    E_DECODE_NO_SHEETS = "E_DECODE_NO_SHEETS"

    # Warnings (non-fatal)
    W_PARSER_FALLBACK = "W_PARSER_FALLBACK"
    W_SHEET_CHART_ONLY = "W_SHEET_CHART_ONLY"
    W_ROWS_TRUNCATED = "W_ROWS_TRUNCATED"
    W_LARGE_FILE = "W_LARGE_FILE"
    W_HISTORY_NOT_SAVED = "W_HISTORY_NOT_SAVED"


class IngestError(BaseModel):
    """Structured error with code, message, and context.

    ``sheet_name`` is set when the problem is local to one sheet of the
    workbook; ``stage`` names the pipeline step (``gate``, ``read``,
    ``decode``, ``history``).
    """

    code: ErrorCode
    message: str
    sheet_name: str | None = None
    stage: str | None = None
    recoverable: bool = False

    @property
    def is_fatal(self) -> bool:
        return self.code.value.startswith("E_")


class SheetLensError(Exception):
    """Base exception; wraps a structured :class:`IngestError`."""

    default_code = ErrorCode.E_DECODE_CORRUPT
    default_stage = "decode"

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        sheet_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.error = IngestError(
            code=code or self.default_code,
            message=message,
            sheet_name=sheet_name,
            stage=self.default_stage,
            recoverable=False,
        )

    @property
    def code(self) -> ErrorCode:
        return self.error.code


class UnsupportedExtensionError(SheetLensError):
    """The file name does not carry an accepted spreadsheet extension."""

    default_code = ErrorCode.E_UNSUPPORTED_EXTENSION
    default_stage = "gate"


class ReadError(SheetLensError):
    """The file's bytes could not be read; nothing was available to decode."""

    default_code = ErrorCode.E_READ_FAILED
    default_stage = "read"


class DecodeError(SheetLensError):
    """The bytes could not be decoded into a workbook with at least one sheet."""

    default_code = ErrorCode.E_DECODE_CORRUPT
    default_stage = "decode"
