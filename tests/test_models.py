"""Tests for the scalar classifier, column universe helper, and models."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from sheetlens.errors import ErrorCode, IngestError
from sheetlens.models import (
    ChartKind,
    ColumnType,
    FileFormat,
    ScalarKind,
    UploadResult,
    Workbook,
    column_names,
    scalar_kind,
)


# ---------------------------------------------------------------------------
# scalar_kind
# ---------------------------------------------------------------------------


class TestScalarKind:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ScalarKind.EMPTY),
            ("", ScalarKind.EMPTY),
            (float("nan"), ScalarKind.EMPTY),
            (True, ScalarKind.BOOLEAN),
            (False, ScalarKind.BOOLEAN),
            (0, ScalarKind.NUMBER),
            (3.5, ScalarKind.NUMBER),
            (float("inf"), ScalarKind.NUMBER),
            ("hello", ScalarKind.TEXT),
            (" ", ScalarKind.TEXT),
            (datetime(2024, 1, 1, 8), ScalarKind.DATETIME),
            (date(2024, 1, 1), ScalarKind.DATETIME),
        ],
    )
    def test_classification(self, value: object, expected: ScalarKind) -> None:
        assert scalar_kind(value) is expected


# ---------------------------------------------------------------------------
# column_names
# ---------------------------------------------------------------------------


class TestColumnNames:
    def test_empty(self) -> None:
        assert column_names([]) == []

    def test_first_row_only(self) -> None:
        rows = [{"a": 1, "c": 2}, {"a": 3, "b": 4, "c": 5}]
        assert column_names(rows) == ["a", "c"]

    def test_union_first_seen_order(self) -> None:
        rows = [{"a": 1, "c": 2}, {"b": 4, "a": 3}, {"d": 1}]
        assert column_names(rows, "union") == ["a", "c", "b", "d"]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TestEnums:
    def test_column_type_values(self) -> None:
        assert {t.value for t in ColumnType} == {
            "number", "currency", "percent", "date", "text", "unknown",
        }

    def test_chart_kind_values(self) -> None:
        assert [k.value for k in ChartKind] == [
            "bar", "line", "area", "scatter", "pie", "radar",
        ]

    def test_str_enum_compares_to_plain_string(self) -> None:
        assert ColumnType.PERCENT == "percent"
        assert ChartKind.BAR == "bar"


# ---------------------------------------------------------------------------
# Workbook / UploadResult
# ---------------------------------------------------------------------------


class TestWorkbook:
    def _workbook(self) -> Workbook:
        return Workbook(
            sheet_names=["B", "A"],
            sheets={"B": [{"x": 1}], "A": []},
            headers={"B": ["x"], "A": []},
            source_format=FileFormat.XLSX,
        )

    def test_first_sheet_follows_file_order(self) -> None:
        assert self._workbook().first_sheet == "B"

    def test_first_sheet_none_without_sheets(self) -> None:
        wb = Workbook(sheet_names=[], sheets={}, headers={}, source_format=FileFormat.CSV)
        assert wb.first_sheet is None

    def test_rows(self) -> None:
        wb = self._workbook()
        assert wb.rows("B") == [{"x": 1}]
        assert wb.rows("A") == []

    def test_rows_unknown_sheet(self) -> None:
        with pytest.raises(KeyError):
            self._workbook().rows("C")


class TestUploadResult:
    def test_defaults(self) -> None:
        result = UploadResult(success=False, message="nope", file_name="x.txt")
        assert result.workbook is None
        assert result.analyses == {}
        assert result.errors == []
        assert result.warnings == []
        assert result.error_details == []

    def test_error_details_are_independent(self) -> None:
        first = UploadResult(success=True, message="ok", file_name="a.csv")
        second = UploadResult(success=True, message="ok", file_name="b.csv")
        first.error_details.append(
            IngestError(code=ErrorCode.W_LARGE_FILE, message="big")
        )
        assert second.error_details == []
