"""Display formatting for cell values according to their column type."""

from __future__ import annotations

from sheetlens.models import CellValue, ColumnType
from sheetlens.profiler import parse_as_float


def format_value(value: CellValue, column_type: ColumnType | str = ColumnType.NUMBER) -> str:
    """Format *value* for display in a chart label or table cell.

    Empty values render as ``-`` and non-numeric values as their text.
    Currency renders in US dollars with two decimals, percent treats the
    value as already scaled by 100, and plain numbers are abbreviated with
    ``K`` / ``M`` suffixes from a thousand upward.
    """
    if value is None or value == "":
        return "-"

    number = parse_as_float(value)
    if number is None:
        return str(value)

    try:
        kind = ColumnType(column_type)
    except ValueError:
        kind = ColumnType.NUMBER
    if kind is ColumnType.CURRENCY:
        sign = "-" if number < 0 else ""
        return f"{sign}${abs(number):,.2f}"
    if kind is ColumnType.PERCENT:
        text = f"{number:,.2f}".rstrip("0")
        if text.endswith("."):
            text += "0"
        return f"{text}%"

    if abs(number) >= 1_000_000:
        return f"{number / 1_000_000:.1f}M"
    if abs(number) >= 1_000:
        return f"{number / 1_000:.1f}K"
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}"
