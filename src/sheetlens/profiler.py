"""Column profiler: numeric summaries and semantic type detection.

Both operations work on a single sheet's ``RowSet`` and are total: an empty
row set yields ``{}`` and quirky values degrade to ``text`` / omission rather
than raising.  Every raw cell is first classified by
:func:`~sheetlens.models.scalar_kind`; the numeric and date predicates below
dispatch on that kind instead of relying on implicit coercion.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime

from sheetlens.config import SheetLensConfig
from sheetlens.dates import DateParser, build_date_parser
from sheetlens.models import (
    CellValue,
    ColumnStats,
    ColumnType,
    RowSet,
    ScalarKind,
    SheetAnalysis,
    column_names,
    scalar_kind,
)
from sheetlens.recommender import ChartRecommender

logger = logging.getLogger("sheetlens")

_CURRENCY_SYMBOLS = ("$", "€", "£")

_NUMERIC_TEXT = re.compile(
    r"""
    ^\s*
    (?P<sign>[+-])?
    \s*(?P<currency>[$€£])?\s*
    (?P<inner_sign>[+-])?
    (?P<number>(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d*)?|\.\d+)
    (?P<exponent>[eE][+-]?\d+)?
    \s*(?P<trailing_currency>[$€£])?
    \s*(?P<percent>%)?
    \s*$
    """,
    re.VERBOSE,
)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def parse_as_float(value: CellValue) -> float | None:
    """Return *value* as a finite float, or ``None`` if it is not numeric.

    Numbers pass through; booleans and dates never count as numbers.  Text
    may carry a sign, one currency symbol (leading or trailing), ``,``
    thousands grouping, and a trailing ``%``.  The numeric part is returned
    unscaled: ``"10%"`` gives ``10.0`` and ``"$1,200"`` gives ``1200.0``.
    """
    kind = scalar_kind(value)
    if kind is ScalarKind.NUMBER:
        try:
            result = float(value)  # type: ignore[arg-type]
        except OverflowError:
            return None
        return result if math.isfinite(result) else None
    if kind is not ScalarKind.TEXT:
        return None

    match = _NUMERIC_TEXT.match(value)  # type: ignore[arg-type]
    if match is None:
        return None
    if match["sign"] and match["inner_sign"]:
        return None
    if match["currency"] and match["trailing_currency"]:
        return None

    literal = match["number"].replace(",", "") + (match["exponent"] or "")
    try:
        result = float(literal)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(result):
        return None
    if "-" in (match["sign"], match["inner_sign"]):
        result = -result
    return result


def parse_as_date(value: CellValue, parser: DateParser) -> datetime | date | None:
    """Return *value* as a date, or ``None`` if it does not read as one.

    Date cells pass through; text is handed to *parser*; numbers, booleans
    and empties are never dates.
    """
    kind = scalar_kind(value)
    if kind is ScalarKind.DATETIME:
        return value  # type: ignore[return-value]
    if kind is ScalarKind.TEXT:
        return parser.parse(value)  # type: ignore[arg-type]
    return None


def _is_empty(value: CellValue) -> bool:
    return value is None or value == ""


# ---------------------------------------------------------------------------
# Profiler
# ---------------------------------------------------------------------------


class ColumnProfiler:
    """Summarizes numeric columns and infers a semantic type per column.

    Parameters
    ----------
    config:
        Pipeline configuration (sample size, column universe policy,
        date parser selection).  Uses defaults when *None*.
    date_parser:
        Explicit date-parsing strategy; overrides ``config.date_parser``.
    """

    def __init__(
        self,
        config: SheetLensConfig | None = None,
        date_parser: DateParser | None = None,
    ) -> None:
        self._config = config or SheetLensConfig()
        self._date_parser = date_parser or build_date_parser(self._config)
        self._recommender = ChartRecommender()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def summarize(self, rows: RowSet) -> dict[str, ColumnStats]:
        """Compute count/min/max/sum/mean/median for every numeric column.

        Only values that parse as finite numbers contribute; a column with
        no such values is left out of the result entirely.  The median is
        the element at index ``count // 2`` of the sorted values, i.e. the
        upper-middle element for an even count.
        """
        summary: dict[str, ColumnStats] = {}
        if not rows:
            return summary

        for column in column_names(rows, self._config.column_universe):
            values = [parse_as_float(row.get(column)) for row in rows]
            kept = sorted(v for v in values if v is not None)
            if not kept:
                continue

            total = math.fsum(kept)
            count = len(kept)
            summary[column] = ColumnStats(
                count=count,
                min=kept[0],
                max=kept[-1],
                sum=total,
                mean=total / count,
                median=kept[count // 2],
            )

        logger.debug(
            "Summarized %d row(s): %d numeric column(s)", len(rows), len(summary)
        )
        return summary

    def detect_types(self, rows: RowSet) -> dict[str, ColumnType]:
        """Infer a :class:`ColumnType` per column from the leading sample.

        A column is typed numeric or ``date`` only when *every* non-empty
        sampled value satisfies the predicate; one outlier demotes it to
        ``text``.  Among numeric columns, ``percent`` wins over ``currency``,
        which wins over plain ``number``, judged across the whole sample.
        """
        column_types: dict[str, ColumnType] = {}
        if not rows:
            return column_types

        sample = rows[: self._config.sample_size]
        for column in column_names(rows, self._config.column_universe):
            values = [row.get(column) for row in sample]
            values = [v for v in values if not _is_empty(v)]
            column_types[column] = self._classify_values(values)

        if self._config.log_sample_data:
            logger.debug("Detected column types: %s", column_types)
        return column_types

    def profile(self, sheet_name: str, rows: RowSet) -> SheetAnalysis:
        """Run summary, type detection and chart recommendation for one sheet."""
        column_types = self.detect_types(rows)
        analysis = SheetAnalysis(
            sheet_name=sheet_name,
            row_count=len(rows),
            headers=column_names(rows, self._config.column_universe),
            stats=self.summarize(rows),
            column_types=column_types,
            recommendations=self._recommender.recommend(column_types),
        )
        logger.info(
            "sheetlens | sheet=%s | rows=%d | columns=%d | charts=%s",
            sheet_name,
            analysis.row_count,
            len(analysis.headers),
            ",".join(kind.value for kind in analysis.recommendations),
        )
        return analysis

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _classify_values(self, values: list[CellValue]) -> ColumnType:
        if not values:
            return ColumnType.UNKNOWN

        if all(parse_as_float(v) is not None for v in values):
            rendered = [str(v) for v in values]
            if any("%" in text for text in rendered):
                return ColumnType.PERCENT
            if any(symbol in text for text in rendered for symbol in _CURRENCY_SYMBOLS):
                return ColumnType.CURRENCY
            return ColumnType.NUMBER

        if all(parse_as_date(v, self._date_parser) is not None for v in values):
            return ColumnType.DATE

        return ColumnType.TEXT
