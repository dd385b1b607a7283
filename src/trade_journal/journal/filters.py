"""Date-range filtering and display ordering.

Bounds are calendar dates in local time and both are inclusive: a record
passes when it falls at or after 00:00:00.000 on the start date and at or
before 23:59:59.999 on the end date.  Either bound may be absent.

Usage::

    rng = this_month(clock)
    visible = filter_records(store.all(), rng.start, rng.end)
    for trade in newest_first(visible):
        ...
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable

from trade_journal.core.clock import IClock, WallClock, local_today
from trade_journal.core.enums import FilterPreset
from trade_journal.core.errors import InvalidTradeInputError

from .record import TradeRecord

_END_OF_DAY = time(23, 59, 59, 999_000)


def start_of_day(day: date) -> int:
    """Epoch ms of local midnight at the start of *day*."""
    return int(datetime.combine(day, time.min).astimezone().timestamp() * 1000)


def end_of_day(day: date) -> int:
    """Epoch ms of the last local millisecond of *day*."""
    return int(datetime.combine(day, _END_OF_DAY).astimezone().timestamp() * 1000)


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date bounds.  ``None`` means unbounded."""

    start: date | None = None
    end: date | None = None

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    @classmethod
    def parse(cls, start: str | None = None, end: str | None = None) -> DateRange:
        """Build a range from ``YYYY-MM-DD`` strings; blank means unbounded.

        Raises
        ------
        InvalidTradeInputError
            A non-blank bound is not a valid calendar date.
        """
        return cls(start=_parse_day(start), end=_parse_day(end))

    def contains(self, record: TradeRecord) -> bool:
        if self.start is not None and record.timestamp < start_of_day(self.start):
            return False
        if self.end is not None and record.timestamp > end_of_day(self.end):
            return False
        return True

    def __str__(self) -> str:
        start = self.start.isoformat() if self.start else "…"
        end = self.end.isoformat() if self.end else "…"
        return f"{start} - {end}"


def _parse_day(text: str | None) -> date | None:
    if text is None or not text.strip():
        return None
    try:
        return date.fromisoformat(text.strip())
    except ValueError as exc:
        raise InvalidTradeInputError(f"Invalid date {text!r}, expected YYYY-MM-DD") from exc


def filter_records(
    records: Iterable[TradeRecord],
    start: date | None = None,
    end: date | None = None,
) -> list[TradeRecord]:
    """Records falling inside the inclusive ``[start, end]`` day range.

    Input order is preserved and the input is not modified.  With both
    bounds absent every record passes.
    """
    rng = DateRange(start, end)
    return [r for r in records if rng.contains(r)]


# ---------------------------------------------------------------------- #
# Presets                                                                  #
# ---------------------------------------------------------------------- #

def month_range(today: date, offset: int = 0) -> DateRange:
    """First through last day of the month *offset* months from *today*."""
    month_index = today.year * 12 + (today.month - 1) + offset
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(date(year, month, 1), date(year, month, last_day))


def this_month(clock: IClock | None = None) -> DateRange:
    return month_range(local_today(clock or WallClock()), 0)


def last_month(clock: IClock | None = None) -> DateRange:
    return month_range(local_today(clock or WallClock()), -1)


def preset_range(preset: FilterPreset | str, clock: IClock | None = None) -> DateRange:
    """Resolve a named preset; ``CLEAR`` gives the unbounded range."""
    preset = FilterPreset(preset)
    match preset:
        case FilterPreset.THIS_MONTH:
            return this_month(clock)
        case FilterPreset.LAST_MONTH:
            return last_month(clock)
        case FilterPreset.CLEAR:
            return DateRange()


def newest_first(records: Iterable[TradeRecord]) -> list[TradeRecord]:
    """History ordering: most recent ``timestamp`` first."""
    return sorted(records, key=lambda r: r.timestamp, reverse=True)
