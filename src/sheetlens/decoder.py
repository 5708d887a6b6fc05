"""Tabular decoder: raw spreadsheet bytes to a :class:`~sheetlens.models.Workbook`.

The container format is detected from the content signature, never from the
file name:

1. ZIP signature -- OOXML workbook via **openpyxl** (cached values), with a
   **pandas** ``read_excel`` fallback when openpyxl cannot open it.
2. OLE2 signature -- legacy ``.xls`` workbook via **xlrd**.
3. Anything else -- delimited text via **pandas** ``read_csv``.

Every format is reduced to a grid of typed cells per sheet, and one shared
routine turns each grid into row mappings: the first non-blank row supplies
the column names, blank cells are left out of a row, and blank rows are
skipped.  Decode failures raise :class:`~sheetlens.errors.DecodeError` and
never produce a partial workbook.
"""

from __future__ import annotations

import io
import logging
import math
import re
import warnings
from datetime import date, datetime, time, timedelta

import openpyxl
import pandas as pd
import xlrd
from openpyxl.chartsheet import Chartsheet

from sheetlens.config import SheetLensConfig
from sheetlens.errors import DecodeError, ErrorCode, IngestError
from sheetlens.models import (
    CellValue,
    FileFormat,
    RowSet,
    ScalarKind,
    Workbook,
    column_names,
    scalar_kind,
)

logger = logging.getLogger("sheetlens")

_ZIP_MAGIC = b"PK\x03\x04"
_OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

_INT_TEXT = re.compile(r"^[+-]?\d+$")
_FLOAT_TEXT = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$")

Grid = list[list[CellValue]]


class TabularDecoder:
    """Decodes ``.xlsx`` / ``.xls`` / ``.csv`` bytes into a ``Workbook``.

    Parameters
    ----------
    config:
        Pipeline configuration (CSV encodings and delimiter, row limit,
        column universe policy).  Uses defaults when *None*.
    """

    def __init__(self, config: SheetLensConfig | None = None) -> None:
        self._config = config or SheetLensConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def decode(self, data: bytes, file_name: str | None = None) -> Workbook:
        """Decode *data* and return the workbook.

        Non-fatal warnings are not returned; each one is logged at WARNING
        level.  Use :meth:`decode_with_warnings` to receive them.
        """
        workbook, warnings_out = self.decode_with_warnings(data, file_name)
        for warning in warnings_out:
            logger.warning(
                "sheetlens | file=%s | code=%s | sheet=%s | detail=%s",
                file_name or "<bytes>",
                warning.code.value,
                warning.sheet_name,
                warning.message,
            )
        return workbook

    def decode_with_warnings(
        self, data: bytes, file_name: str | None = None
    ) -> tuple[Workbook, list[IngestError]]:
        """Decode *data*, returning the workbook and any non-fatal warnings.

        *file_name* is used for log context only.

        Raises
        ------
        DecodeError
            If the bytes are empty, cannot be parsed as a supported format,
            or yield zero sheets.
        """
        label = file_name or "<bytes>"
        if not data:
            raise DecodeError("File is empty (0 bytes).", code=ErrorCode.E_DECODE_EMPTY)

        fmt = self.detect_format(data)
        warnings_out: list[IngestError] = []

        if fmt is FileFormat.XLSX:
            grids = self._read_xlsx(data, label, warnings_out)
        elif fmt is FileFormat.XLS:
            grids = self._read_xls(data, label)
        else:
            grids = self._read_csv(data, label, warnings_out)

        if not grids:
            raise DecodeError(
                "No sheets found in the workbook.", code=ErrorCode.E_DECODE_NO_SHEETS
            )

        sheet_names: list[str] = []
        sheets: dict[str, RowSet] = {}
        headers: dict[str, list[str]] = {}
        for sheet_name, grid in grids:
            rows = self._grid_to_rows(grid, sheet_name, warnings_out)
            sheet_names.append(sheet_name)
            sheets[sheet_name] = rows
            headers[sheet_name] = column_names(rows, self._config.column_universe)

        workbook = Workbook(
            sheet_names=sheet_names,
            sheets=sheets,
            headers=headers,
            source_format=fmt,
        )
        logger.info(
            "sheetlens | file=%s | format=%s | sheets=%d | rows=%d | warnings=%d",
            label,
            fmt.value,
            len(sheet_names),
            sum(len(rows) for rows in sheets.values()),
            len(warnings_out),
        )
        return workbook, warnings_out

    @staticmethod
    def detect_format(data: bytes) -> FileFormat:
        """Detect the container format from the leading signature bytes."""
        if data.startswith(_ZIP_MAGIC):
            return FileFormat.XLSX
        if data.startswith(_OLE2_MAGIC):
            return FileFormat.XLS
        return FileFormat.CSV

    # ------------------------------------------------------------------
    # Format readers
    # ------------------------------------------------------------------

    def _read_xlsx(
        self, data: bytes, label: str, warnings_out: list[IngestError]
    ) -> list[tuple[str, Grid]]:
        try:
            wb = openpyxl.load_workbook(io.BytesIO(data), data_only=True)
        except Exception as exc:
            logger.warning(
                "openpyxl could not open %s (%s); trying pandas fallback", label, exc
            )
            fallback = self._read_xlsx_pandas(data, label, exc)
            warnings_out.append(
                IngestError(
                    code=ErrorCode.W_PARSER_FALLBACK,
                    message=f"Workbook parsed via pandas fallback: {exc}",
                    stage="decode",
                    recoverable=True,
                )
            )
            return fallback

        grids: list[tuple[str, Grid]] = []
        try:
            for sheet_name in wb.sheetnames:
                ws = wb[sheet_name]
                if isinstance(ws, Chartsheet):
                    warnings_out.append(
                        IngestError(
                            code=ErrorCode.W_SHEET_CHART_ONLY,
                            message=f"Sheet '{sheet_name}' is chart-only; no rows.",
                            sheet_name=sheet_name,
                            stage="decode",
                            recoverable=True,
                        )
                    )
                    grids.append((sheet_name, []))
                    continue
                grid = [
                    [_normalize_cell(v) for v in row]
                    for row in ws.iter_rows(values_only=True)
                ]
                grids.append((sheet_name, grid))
        except Exception as exc:
            raise DecodeError(f"Failed to parse workbook: {exc}") from exc
        finally:
            wb.close()
        return grids

    def _read_xlsx_pandas(
        self, data: bytes, label: str, cause: Exception
    ) -> list[tuple[str, Grid]]:
        try:
            frames = pd.read_excel(io.BytesIO(data), sheet_name=None, header=None)
        except Exception as exc:
            logger.error("Parse failed: corrupt workbook %s: %s", label, exc)
            raise DecodeError(f"Failed to parse workbook: {cause}") from exc

        return [
            (str(name), [[_normalize_cell(v) for v in row] for row in df.itertuples(index=False)])
            for name, df in frames.items()
        ]

    def _read_xls(self, data: bytes, label: str) -> list[tuple[str, Grid]]:
        try:
            book = xlrd.open_workbook(file_contents=data)
        except Exception as exc:
            logger.error("Parse failed: legacy workbook %s: %s", label, exc)
            raise DecodeError(f"Failed to parse workbook: {exc}") from exc

        grids: list[tuple[str, Grid]] = []
        try:
            for sheet in book.sheets():
                grid = [
                    [_xls_cell(cell, book.datemode) for cell in sheet.row(r)]
                    for r in range(sheet.nrows)
                ]
                grids.append((sheet.name, grid))
        finally:
            book.release_resources()
        return grids

    def _read_csv(
        self, data: bytes, label: str, warnings_out: list[IngestError]
    ) -> list[tuple[str, Grid]]:
        if b"\x00" in data:
            raise DecodeError(
                "File is binary and not a supported spreadsheet format.",
                code=ErrorCode.E_DECODE_UNSUPPORTED_ENCODING,
            )

        text = None
        for encoding in self._config.csv_encodings:
            try:
                text = data.decode(encoding)
                break
            except (UnicodeDecodeError, LookupError):
                logger.debug("Decoding %s as %s failed", label, encoding)
        if text is None:
            raise DecodeError(
                f"Could not decode text with any of {self._config.csv_encodings}.",
                code=ErrorCode.E_DECODE_UNSUPPORTED_ENCODING,
            )

        extra_field_lines: list[int] = []

        def _keep_bad_line(fields: list[str]) -> list[str]:
            extra_field_lines.append(len(fields))
            return fields

        sheet_name = self._config.csv_sheet_name
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", pd.errors.ParserWarning)
                df = pd.read_csv(
                    io.StringIO(text),
                    header=None,
                    sep=self._config.csv_delimiter,
                    dtype=str,
                    keep_default_na=False,
                    engine="python",
                    on_bad_lines=_keep_bad_line,
                )
        except pd.errors.EmptyDataError:
            return [(sheet_name, [])]
        except Exception as exc:
            logger.error("Parse failed: delimited text %s: %s", label, exc)
            raise DecodeError(f"Failed to parse delimited text: {exc}") from exc

        if extra_field_lines:
            warnings_out.append(
                IngestError(
                    code=ErrorCode.W_ROWS_TRUNCATED,
                    message=(
                        f"{len(extra_field_lines)} line(s) had more fields than the "
                        f"first line; extra fields were dropped."
                    ),
                    sheet_name=sheet_name,
                    stage="decode",
                    recoverable=True,
                )
            )

        grid = [[_coerce_text_cell(v) for v in row] for row in df.itertuples(index=False)]
        return [(sheet_name, grid)]

    # ------------------------------------------------------------------
    # Grid -> rows
    # ------------------------------------------------------------------

    def _grid_to_rows(
        self, grid: Grid, sheet_name: str, warnings_out: list[IngestError]
    ) -> RowSet:
        """Turn a cell grid into row mappings keyed by the header row."""
        start = next((i for i, row in enumerate(grid) if not _is_blank_row(row)), None)
        if start is None:
            return []

        body = grid[start + 1 :]
        width = max(len(row) for row in grid[start:])
        header = _header_names(grid[start], width)

        rows: RowSet = []
        limit = self._config.max_rows_in_memory
        for raw in body:
            record = {
                header[i]: value
                for i, value in enumerate(raw)
                if scalar_kind(value) is not ScalarKind.EMPTY
            }
            if not record:
                continue
            if len(rows) >= limit:
                warnings_out.append(
                    IngestError(
                        code=ErrorCode.W_ROWS_TRUNCATED,
                        message=(
                            f"Sheet '{sheet_name}' exceeds max_rows_in_memory "
                            f"({limit}); remaining rows dropped."
                        ),
                        sheet_name=sheet_name,
                        stage="decode",
                        recoverable=True,
                    )
                )
                logger.warning(
                    "Sheet '%s' truncated at %d rows", sheet_name, limit
                )
                break
            rows.append(record)
        return rows


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------


def _is_blank_row(row: list[CellValue]) -> bool:
    return all(scalar_kind(v) is ScalarKind.EMPTY for v in row)


def _header_names(cells: list[CellValue], width: int) -> list[str]:
    """Build unique column names for a header row padded to *width*.

    Blank header cells become ``__EMPTY``, ``__EMPTY_1``, ...; repeated
    names get ``_1``, ``_2``, ... suffixes in order of appearance.
    """
    names: list[str] = []
    used: set[str] = set()
    suffixes: dict[str, int] = {}
    blank_count = 0

    for i in range(width):
        value = cells[i] if i < len(cells) else None
        if scalar_kind(value) is ScalarKind.EMPTY:
            base = "__EMPTY" if blank_count == 0 else f"__EMPTY_{blank_count}"
            blank_count += 1
        else:
            base = _header_text(value)

        name = base
        n = suffixes.get(base, 0)
        while name in used:
            n += 1
            name = f"{base}_{n}"
        suffixes[base] = n
        used.add(name)
        names.append(name)
    return names


def _header_text(value: CellValue) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip() or "__EMPTY"


def _normalize_cell(value: object) -> CellValue:
    """Map a value from openpyxl or pandas onto a plain :data:`CellValue`."""
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.to_pydatetime()
    if isinstance(value, (time, timedelta)):
        return str(value)
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (str, int, float, bool, datetime, date)):
        return value
    return str(value)


def _xls_cell(cell: xlrd.sheet.Cell, datemode: int) -> CellValue:
    """Convert an xlrd cell, keeping numbers, booleans and dates typed."""
    ctype = cell.ctype
    if ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
        return None
    if ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if ctype == xlrd.XL_CELL_DATE:
        try:
            return xlrd.xldate_as_datetime(cell.value, datemode)
        except Exception as exc:
            logger.warning("xls date conversion failed: %s; keeping serial", exc)
            return cell.value
    if ctype == xlrd.XL_CELL_NUMBER:
        value = cell.value
        return int(value) if isinstance(value, float) and value.is_integer() else value
    return cell.value


def _coerce_text_cell(text: object) -> CellValue:
    """Give a delimited-text cell the type a spreadsheet app would infer."""
    if not isinstance(text, str):
        return _normalize_cell(text)
    if text == "":
        return None
    stripped = text.strip()
    if stripped.upper() in ("TRUE", "FALSE"):
        return stripped.upper() == "TRUE"
    if _INT_TEXT.match(stripped):
        return int(stripped)
    if _FLOAT_TEXT.match(stripped):
        value = float(stripped)
        return value if math.isfinite(value) else text
    return text
