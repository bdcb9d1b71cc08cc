from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Dict

from modules.uuid7_date_parser.core.codec import (
    PREFIX_LENGTH,
    decode_timestamp,
    encode_timestamp,
    iso_utc,
    normalize_uuid,
    timestamp_to_datetime,
)
from modules.uuid7_date_parser.core.transitions import WIDTHS, TransitionTable, prefix_bracket

VERSION_INDEX = PREFIX_LENGTH
VARIANT_INDEX = 16


def _local_iso(moment: datetime | None, tz: tzinfo | None) -> str | None:
    if moment is None:
        return None
    try:
        return moment.astimezone(tz).isoformat(timespec="milliseconds")
    except OverflowError:
        return None


def parse_uuid(
    value: Any,
    *,
    tz: tzinfo | None = None,
    transitions: TransitionTable | None = None,
) -> Dict[str, Any]:
    """Decode the timestamp of a user-typed UUID and describe what it shows.

    Raises ``InvalidFormat`` or ``TooShort`` from the codec. Version and
    variant are only reported when enough digits were typed to contain them.
    """
    timestamp = decode_timestamp(value)
    normalized = normalize_uuid(value)
    moment = timestamp_to_datetime(timestamp)

    version = None
    if len(normalized) > VERSION_INDEX:
        version = int(normalized[VERSION_INDEX], 16)
    variant = None
    if len(normalized) > VARIANT_INDEX:
        variant = format(int(normalized[VARIANT_INDEX], 16) >> 2, "02b")

    brackets = []
    if transitions is not None:
        for digits in sorted(WIDTHS, reverse=True):
            bracket = prefix_bracket(normalized, digits, transitions)
            if bracket:
                brackets.append(bracket)

    return {
        "normalized": normalized,
        "prefix": encode_timestamp(timestamp),
        "timestamp_ms": timestamp,
        "iso": iso_utc(timestamp),
        "local": _local_iso(moment, tz),
        "version": version,
        "variant": variant,
        "is_uuid7": version == 7 and variant == "10",
        "brackets": brackets,
    }
