from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Dict, Iterable, List, Tuple

from modules.uuid7_date_parser.core.codec import (
    PREFIX_LENGTH,
    datetime_to_timestamp,
    encode_timestamp,
    iso_utc,
)
from modules.uuid7_date_parser.core.generate import uuid7

DEFAULT_PREFIX_LENGTH = 6


@dataclass(frozen=True)
class MonthEntry:
    year: int
    month: int
    month_name: str
    timestamp: int
    prefix: str
    uuid: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "month_name": self.month_name,
            "timestamp": self.timestamp,
            "iso": iso_utc(self.timestamp),
            "prefix": self.prefix,
            "uuid": self.uuid,
        }


@dataclass(frozen=True)
class YearCalendar:
    year: int
    months: Tuple[MonthEntry, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"year": self.year, "months": [month.to_dict() for month in self.months]}


def month_start(year: int, month: int, tz: tzinfo | None = None) -> int:
    """First instant of ``year``/``month`` in ``tz`` (server local zone when None)."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime_to_timestamp(datetime(year, month, 1, tzinfo=tz))


def build_calendar(
    start_year: int,
    end_year: int,
    tz: tzinfo | None = None,
) -> Tuple[YearCalendar, ...]:
    years: List[YearCalendar] = []
    for year in range(start_year, end_year + 1):
        months: List[MonthEntry] = []
        for month in range(1, 13):
            timestamp = month_start(year, month, tz)
            months.append(
                MonthEntry(
                    year=year,
                    month=month,
                    month_name=calendar.month_name[month],
                    timestamp=timestamp,
                    prefix=encode_timestamp(timestamp),
                    uuid=uuid7(timestamp),
                )
            )
        years.append(YearCalendar(year=year, months=tuple(months)))
    return tuple(years)


def calendar_prefixes(years: Iterable[YearCalendar]) -> List[str]:
    return [month.prefix for year in years for month in year.months]


def min_unique_prefix_length(prefixes: Iterable[str]) -> int:
    """Shortest prefix length that keeps every entry distinct, plus one.

    The extra character is display margin; the result never exceeds the
    full 12-digit prefix. Fewer than two prefixes return 6.
    """
    prefixes = list(prefixes)
    if len(prefixes) < 2:
        return DEFAULT_PREFIX_LENGTH

    length = 1
    while length <= PREFIX_LENGTH:
        seen = set()
        collided = False
        for prefix in prefixes:
            shortened = prefix[:length]
            if shortened in seen:
                collided = True
                break
            seen.add(shortened)
        if not collided:
            break
        length += 1

    return min(length + 1, PREFIX_LENGTH)
