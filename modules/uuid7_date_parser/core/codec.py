from __future__ import annotations

import re
import time
from datetime import datetime, timedelta, timezone
from typing import Any

from modules.uuid7_date_parser.core.errors import InvalidFormat, TooShort

TIMESTAMP_BITS = 48
TIMESTAMP_MASK = (1 << TIMESTAMP_BITS) - 1
PREFIX_LENGTH = TIMESTAMP_BITS // 4
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)

_SEPARATORS = re.compile(r"[-{}]")
_HEX = re.compile(r"[0-9a-f]*")


def now_timestamp() -> int:
    return time.time_ns() // 1_000_000


def encode_timestamp(timestamp: int) -> str:
    """Render the low 48 bits of a millisecond timestamp as a 12-digit prefix.

    Values outside ``[0, 2**48 - 1]`` wrap: only the low 48 bits are kept,
    so ``-1`` encodes as ``ffffffffffff``.
    """
    return f"{int(timestamp) & TIMESTAMP_MASK:012x}"


def normalize_uuid(value: Any) -> str:
    raw = "" if value is None else str(value)
    return _SEPARATORS.sub("", raw.strip()).lower()


def decode_timestamp(value: Any) -> int:
    """Read the millisecond timestamp from the first 48 bits of a UUID string.

    Hyphens, braces and letter case are ignored. Raises ``InvalidFormat``
    for non-hex input and ``TooShort`` when fewer than 12 hex digits remain.
    """
    normalized = normalize_uuid(value)
    if not _HEX.fullmatch(normalized):
        raise InvalidFormat()
    if len(normalized) < PREFIX_LENGTH:
        raise TooShort()
    return int(normalized[:PREFIX_LENGTH], 16)


def timestamp_to_datetime(timestamp: int) -> datetime | None:
    # datetime stops at year 9999; the 48-bit field runs to year 10889.
    try:
        return EPOCH + timedelta(milliseconds=timestamp)
    except OverflowError:
        return None


def datetime_to_timestamp(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return (moment - EPOCH) // ONE_MS


def iso_utc(timestamp: int) -> str | None:
    moment = timestamp_to_datetime(timestamp)
    if moment is None:
        return None
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
