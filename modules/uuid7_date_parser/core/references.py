from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Dict, List, Tuple

from modules.uuid7_date_parser.core.codec import (
    encode_timestamp,
    iso_utc,
    timestamp_to_datetime,
)
from modules.uuid7_date_parser.core.generate import uuid7
from modules.uuid7_date_parser.core.monthly import month_start

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

PAST_OFFSETS: Tuple[Tuple[str, int], ...] = (
    ("-3 days", -3 * DAY_MS),
    ("-1 day", -DAY_MS),
    ("-3 hours", -3 * HOUR_MS),
    ("-1 hour", -HOUR_MS),
    ("-30 minutes", -30 * MINUTE_MS),
    ("-15 minutes", -15 * MINUTE_MS),
)
FUTURE_OFFSETS: Tuple[Tuple[str, int], ...] = (
    ("+15 minutes", 15 * MINUTE_MS),
    ("+30 minutes", 30 * MINUTE_MS),
    ("+1 hour", HOUR_MS),
    ("+3 hours", 3 * HOUR_MS),
    ("+1 day", DAY_MS),
    ("+3 days", 3 * DAY_MS),
)
NOW_LABEL = "Now"


@dataclass(frozen=True)
class TimeReferenceEntry:
    label: str
    timestamp: int
    prefix: str
    uuid: str
    highlight: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "timestamp": self.timestamp,
            "iso": iso_utc(self.timestamp),
            "prefix": self.prefix,
            "uuid": self.uuid,
            "highlight": self.highlight,
        }


def _entry(label: str, timestamp: int, *, highlight: bool = False) -> TimeReferenceEntry:
    return TimeReferenceEntry(
        label=label,
        timestamp=timestamp,
        prefix=encode_timestamp(timestamp),
        uuid=uuid7(timestamp),
        highlight=highlight,
    )


def calendar_markers(now: int, tz: tzinfo | None = None) -> List[Tuple[str, int]]:
    local_now = timestamp_to_datetime(now)
    if local_now is None:
        return []
    local_now = local_now.astimezone(tz)
    year, month = local_now.year, local_now.month
    return [
        ("This year", month_start(year, 1, tz)),
        ("Last year", month_start(year - 1, 1, tz)),
        ("This month", month_start(year, month, tz)),
        ("Last month", month_start(year, month - 1, tz)),
    ]


def build_references(now: int, tz: tzinfo | None = None) -> Tuple[TimeReferenceEntry, ...]:
    """Quick-reference rows around ``now`` in presentation order.

    Relative offsets come first (past, now, future), followed by the first
    instants of this/last year and this/last month in ``tz``.
    """
    entries: List[TimeReferenceEntry] = [
        _entry(label, now + offset) for label, offset in PAST_OFFSETS
    ]
    entries.append(_entry(NOW_LABEL, now, highlight=True))
    entries.extend(_entry(label, now + offset) for label, offset in FUTURE_OFFSETS)
    entries.extend(_entry(label, timestamp) for label, timestamp in calendar_markers(now, tz))
    return tuple(entries)
