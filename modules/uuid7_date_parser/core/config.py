from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from modules.uuid7_date_parser.core.transitions import (
    DEFAULT_SCAN_END,
    DEFAULT_SCAN_START,
    MAX_SCAN_PREFIX,
)

logger = logging.getLogger(__name__)

DEFAULT_CALENDAR_START_YEAR = 2020
DEFAULT_CALENDAR_END_YEAR = 2030
DEFAULT_REFRESH_SECONDS = 60
MIN_YEAR = 1970
MAX_YEAR = 9999


@dataclass(frozen=True)
class ParserConfig:
    scan_start: int
    scan_end: int
    calendar_start_year: int
    calendar_end_year: int
    refresh_seconds: int
    timezone: str


def _int_env(name: str, default: int, *, base: int = 10) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw, base)
    except ValueError:
        logger.warning("%s=%r is not a valid number; using %s.", name, raw, default)
        return default


def _scan_bounds() -> tuple[int, int]:
    start = _int_env("ATLAS_SCAN_START", DEFAULT_SCAN_START, base=16)
    end = _int_env("ATLAS_SCAN_END", DEFAULT_SCAN_END, base=16)
    if not (0 <= start <= end <= MAX_SCAN_PREFIX):
        logger.warning(
            "Scan range %x-%x is invalid; using %04x-%04x.",
            start,
            end,
            DEFAULT_SCAN_START,
            DEFAULT_SCAN_END,
        )
        return DEFAULT_SCAN_START, DEFAULT_SCAN_END
    return start, end


def _calendar_years() -> tuple[int, int]:
    start = _int_env("ATLAS_CALENDAR_START_YEAR", DEFAULT_CALENDAR_START_YEAR)
    end = _int_env("ATLAS_CALENDAR_END_YEAR", DEFAULT_CALENDAR_END_YEAR)
    if not (MIN_YEAR <= start <= end < MAX_YEAR):
        logger.warning(
            "Calendar span %s-%s is invalid; using %s-%s.",
            start,
            end,
            DEFAULT_CALENDAR_START_YEAR,
            DEFAULT_CALENDAR_END_YEAR,
        )
        return DEFAULT_CALENDAR_START_YEAR, DEFAULT_CALENDAR_END_YEAR
    return start, end


def _refresh_seconds() -> int:
    value = _int_env("ATLAS_REFRESH_SECONDS", DEFAULT_REFRESH_SECONDS)
    if value <= 0:
        logger.warning(
            "ATLAS_REFRESH_SECONDS=%s must be positive; using %s.",
            value,
            DEFAULT_REFRESH_SECONDS,
        )
        return DEFAULT_REFRESH_SECONDS
    return value


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Map an IANA zone name to a tzinfo; blank means the server's local zone.

    Raises ``ValueError`` for names the zone database does not know.
    """
    name = (name or "").strip()
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ValueError(f"Unknown time zone: {name}") from exc


def _default_timezone() -> str:
    name = os.getenv("ATLAS_TIMEZONE", "").strip()
    if not name:
        return ""
    try:
        resolve_timezone(name)
    except ValueError:
        logger.warning("ATLAS_TIMEZONE=%r is unknown; using the server local zone.", name)
        return ""
    return name


def load_config() -> ParserConfig:
    scan_start, scan_end = _scan_bounds()
    start_year, end_year = _calendar_years()
    return ParserConfig(
        scan_start=scan_start,
        scan_end=scan_end,
        calendar_start_year=start_year,
        calendar_end_year=end_year,
        refresh_seconds=_refresh_seconds(),
        timezone=_default_timezone(),
    )
