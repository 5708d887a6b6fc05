"""Rule-based chart recommender.

Maps a column-type map to an ordered list of chart kinds.  The rules look
only at how many columns fall into the numeric and categorical groups, never
at the values themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from sheetlens.models import CATEGORICAL_TYPES, NUMERIC_TYPES, ChartKind, ColumnType

logger = logging.getLogger("sheetlens")


class ChartRecommender:
    """Suggests chart kinds from a ``{column: ColumnType}`` map.

    Rules, applied in order, each appending to the candidate list:

    1. at least one numeric and one categorical column: bar, line
    2. rule 1 fired and some column is a date: area
    3. two or more numeric columns: scatter
    4. exactly one numeric and one categorical column: pie
    5. three or more numeric columns: radar

    Unrecognized type strings count as neither group.  The result is
    deduplicated in first-seen order and falls back to ``[bar]`` when no
    rule fires.
    """

    def recommend(self, column_types: Mapping[str, ColumnType | str]) -> list[ChartKind]:
        types = [t for t in map(_as_column_type, column_types.values()) if t is not None]
        numeric = sum(1 for t in types if t in NUMERIC_TYPES)
        categorical = sum(1 for t in types if t in CATEGORICAL_TYPES)

        candidates: list[ChartKind] = []
        if numeric >= 1 and categorical >= 1:
            candidates.extend([ChartKind.BAR, ChartKind.LINE])
            if ColumnType.DATE in types:
                candidates.append(ChartKind.AREA)
        if numeric >= 2:
            candidates.append(ChartKind.SCATTER)
        if numeric == 1 and categorical == 1:
            candidates.append(ChartKind.PIE)
        if numeric >= 3:
            candidates.append(ChartKind.RADAR)

        recommendations = list(dict.fromkeys(candidates))
        if not recommendations:
            logger.debug(
                "No chart rule matched (numeric=%d, categorical=%d); defaulting to bar",
                numeric,
                categorical,
            )
            return [ChartKind.BAR]
        return recommendations


def _as_column_type(value: ColumnType | str) -> ColumnType | None:
    try:
        return ColumnType(value)
    except ValueError:
        logger.debug("Ignoring unrecognized column type %r", value)
        return None
