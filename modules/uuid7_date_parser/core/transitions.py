from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from modules.uuid7_date_parser.core.codec import (
    PREFIX_LENGTH,
    TIMESTAMP_BITS,
    decode_timestamp,
    iso_utc,
    normalize_uuid,
)

SCAN_DIGITS = 4
WIDTHS = (3, 4)
MAX_SCAN_PREFIX = (1 << (SCAN_DIGITS * 4)) - 1
DEFAULT_SCAN_START = 0x0160
DEFAULT_SCAN_END = 0x01C0


@dataclass(frozen=True)
class TransitionEntry:
    digits: int
    old_prefix: str | None
    new_prefix: str
    full_prefix: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "digits": self.digits,
            "old_prefix": self.old_prefix,
            "new_prefix": self.new_prefix,
            "full_prefix": self.full_prefix,
            "timestamp": self.timestamp,
            "iso": iso_utc(self.timestamp),
        }


@dataclass(frozen=True)
class TransitionTable:
    three_digit: Tuple[TransitionEntry, ...]
    four_digit: Tuple[TransitionEntry, ...]
    scan_end: int | None = None

    def for_digits(self, digits: int) -> Tuple[TransitionEntry, ...]:
        if digits == 3:
            return self.three_digit
        if digits == 4:
            return self.four_digit
        raise ValueError(f"Unsupported prefix width: {digits}")


def scan_transitions(start_prefix: int, end_prefix: int) -> TransitionTable:
    """Walk every 4-digit prefix in the inclusive range and keep the points
    where the leading 3 or 4 hex digits change.

    Each entry carries the timestamp at which its prefix first becomes
    valid, decoded from the prefix zero-padded to 12 digits. The first entry
    of each width has no predecessor (``old_prefix`` is None). ``scan_end`` is
    the first instant past the range, ``end_prefix + 1`` zero-padded.
    """
    for bound in (start_prefix, end_prefix):
        if not 0 <= bound <= MAX_SCAN_PREFIX:
            raise ValueError(f"Scan bounds must be within 0000-{MAX_SCAN_PREFIX:04x}.")

    found: Dict[int, List[TransitionEntry]] = {width: [] for width in WIDTHS}
    for prefix in range(start_prefix, end_prefix + 1):
        hex_prefix = f"{prefix:0{SCAN_DIGITS}x}"
        full_prefix = hex_prefix.ljust(PREFIX_LENGTH, "0")
        timestamp = decode_timestamp(full_prefix)
        for width, entries in found.items():
            truncated = hex_prefix[:width]
            last = entries[-1].new_prefix if entries else None
            if truncated == last:
                continue
            entries.append(
                TransitionEntry(
                    digits=width,
                    old_prefix=last,
                    new_prefix=truncated,
                    full_prefix=full_prefix,
                    timestamp=timestamp,
                )
            )

    scan_end = None
    if start_prefix <= end_prefix:
        scan_end = (end_prefix + 1) << (TIMESTAMP_BITS - SCAN_DIGITS * 4)
    return TransitionTable(
        three_digit=tuple(found[3]),
        four_digit=tuple(found[4]),
        scan_end=scan_end,
    )


def prefix_bracket(value: Any, digits: int, table: TransitionTable) -> Dict[str, Any] | None:
    """Creation-time window implied by the first ``digits`` characters of ``value``.

    Returns None when the prefix falls outside the scanned range. The window
    of the last prefix is clipped to the end of the scan.
    """
    normalized = normalize_uuid(value)
    if len(normalized) < digits:
        return None
    wanted = normalized[:digits]
    entries = table.for_digits(digits)
    for index, entry in enumerate(entries):
        if entry.new_prefix != wanted:
            continue
        following = entries[index + 1] if index + 1 < len(entries) else None
        end = following.timestamp if following else table.scan_end
        return {
            "digits": digits,
            "prefix": wanted,
            "start": entry.timestamp,
            "start_iso": iso_utc(entry.timestamp),
            "end": end,
            "end_iso": iso_utc(end) if end is not None else None,
        }
    return None
