from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Tuple

from modules.uuid7_date_parser.core.codec import encode_timestamp, now_timestamp
from modules.uuid7_date_parser.core.errors import RandomnessUnavailable

logger = logging.getLogger(__name__)

MAX_COUNT = 1000
RANDOM_BYTES = 10
VERSION = 0x70
VARIANT = 0x80


def _random_bytes(size: int) -> bytes:
    try:
        return os.urandom(size)
    except (NotImplementedError, OSError) as exc:
        logger.exception("Operating system randomness source failed.")
        raise RandomnessUnavailable() from exc


def uuid7(timestamp: int | None = None) -> str:
    """UUIDv7 for ``timestamp`` (ms since epoch, default now) in canonical text."""
    if timestamp is None:
        timestamp = now_timestamp()

    rnd = bytearray(_random_bytes(RANDOM_BYTES))
    rnd[0] = VERSION | (rnd[0] & 0x0F)  # version 7
    rnd[2] = VARIANT | (rnd[2] & 0x3F)  # variant RFC 9562

    b = bytes.fromhex(encode_timestamp(timestamp)) + bytes(rnd)
    hexs = b.hex()
    return f"{hexs[0:8]}-{hexs[8:12]}-{hexs[12:16]}-{hexs[16:20]}-{hexs[20:32]}"


def braced_upper(value: str) -> str:
    return "{" + value.upper() + "}"


def _parse_count(value: Any) -> Tuple[int | None, str | None]:
    if value is None:
        return 1, None
    raw = str(value).strip()
    if not raw:
        return 1, None
    try:
        count = int(raw)
    except ValueError:
        return None, "Count must be a whole number."
    if count <= 0:
        return None, "Count must be greater than zero."
    if count > MAX_COUNT:
        return None, f"Count must not exceed {MAX_COUNT}."
    return count, None


def _parse_timestamp(value: Any) -> Tuple[int | None, str | None]:
    if value is None:
        return None, None
    raw = str(value).strip()
    if not raw:
        return None, None
    try:
        return int(raw), None
    except ValueError:
        return None, "Timestamp must be whole milliseconds since 1970-01-01."


def generate_uuid7(
    count: Any = 1,
    timestamp: Any = None,
    *,
    braced: bool = False,
) -> Tuple[Dict[str, Any] | None, str | None]:
    count_int, error = _parse_count(count)
    if error or count_int is None:
        return None, error

    timestamp_int, error = _parse_timestamp(timestamp)
    if error:
        return None, error
    if timestamp_int is None:
        timestamp_int = now_timestamp()

    values: List[str] = [uuid7(timestamp_int) for _ in range(count_int)]
    if braced:
        values = [braced_upper(value) for value in values]
    return {
        "count": count_int,
        "timestamp": timestamp_int,
        "prefix": encode_timestamp(timestamp_int),
        "values": values,
    }, None
