"""Date-parsing strategies used by column type detection.

Type detection only asks one question of a text cell: does it read as a
date?  The answer is delegated to a :class:`DateParser` so it does not
depend on the host locale and can be swapped in tests.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Protocol, runtime_checkable

from dateutil import parser as date_parser

from sheetlens.config import SheetLensConfig

_HAS_DIGIT = re.compile(r"\d")
_ORDINAL_OR_TIME = re.compile(
    r"^(?:\d+(?:st|nd|rd|th)|\d{1,2}:\d{2}(?::\d{2})?\s*(?:[ap]\.?m\.?)?)$",
    re.IGNORECASE,
)


@runtime_checkable
class DateParser(Protocol):
    """Interface for text-to-datetime strategies."""

    def parse(self, text: str) -> datetime | None:
        """Return the parsed datetime, or ``None`` if *text* is not a date."""
        ...


class DateutilDateParser:
    """Best-effort parser backed by ``dateutil``.

    Accepts the common written forms (``2024-03-01``, ``03/01/2024``,
    ``1 Mar 2024``, ``March 1, 2024 10:00``).  Text without any digit is
    rejected so that bare words such as month or weekday names stay text,
    and so is a lone ordinal (``3rd``) or time of day (``10:30``), which
    dateutil would otherwise pin to the current date.
    """

    def __init__(self, dayfirst: bool = False) -> None:
        self._dayfirst = dayfirst

    def parse(self, text: str) -> datetime | None:
        stripped = text.strip()
        if not stripped or not _HAS_DIGIT.search(stripped):
            return None
        if _ORDINAL_OR_TIME.match(stripped):
            return None
        try:
            return date_parser.parse(stripped, dayfirst=self._dayfirst)
        except (ValueError, OverflowError):
            return None


class IsoDateParser:
    """Strict ISO-8601 parser (``YYYY-MM-DD`` with optional time part)."""

    def parse(self, text: str) -> datetime | None:
        stripped = text.strip()
        if not stripped:
            return None
        try:
            return datetime.fromisoformat(stripped)
        except ValueError:
            return None


def build_date_parser(config: SheetLensConfig) -> DateParser:
    """Return the strategy selected by ``config.date_parser``."""
    if config.date_parser == "iso":
        return IsoDateParser()
    return DateutilDateParser(dayfirst=config.date_dayfirst)
