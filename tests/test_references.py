from __future__ import annotations

from datetime import datetime, timezone

from modules.uuid7_date_parser.core.codec import datetime_to_timestamp, encode_timestamp
from modules.uuid7_date_parser.core.references import (
    DAY_MS,
    HOUR_MS,
    build_references,
)

EXPECTED_LABELS = [
    "-3 days",
    "-1 day",
    "-3 hours",
    "-1 hour",
    "-30 minutes",
    "-15 minutes",
    "Now",
    "+15 minutes",
    "+30 minutes",
    "+1 hour",
    "+3 hours",
    "+1 day",
    "+3 days",
    "This year",
    "Last year",
    "This month",
    "Last month",
]


def _ms(*args) -> int:
    return datetime_to_timestamp(datetime(*args, tzinfo=timezone.utc))


NOW = _ms(2024, 3, 15, 12, 0)


def test_reference_order_is_fixed():
    entries = build_references(NOW, timezone.utc)
    assert [entry.label for entry in entries] == EXPECTED_LABELS


def test_only_now_is_highlighted():
    entries = build_references(NOW, timezone.utc)
    highlighted = [entry for entry in entries if entry.highlight]
    assert len(highlighted) == 1
    assert highlighted[0].label == "Now"
    assert highlighted[0].timestamp == NOW


def test_relative_offsets():
    by_label = {entry.label: entry for entry in build_references(NOW, timezone.utc)}
    assert by_label["-3 days"].timestamp == NOW - 3 * DAY_MS
    assert by_label["-1 hour"].timestamp == NOW - HOUR_MS
    assert by_label["+15 minutes"].timestamp == NOW + 15 * 60 * 1000
    assert by_label["+3 days"].timestamp == NOW + 3 * DAY_MS


def test_calendar_markers_use_first_instant():
    by_label = {entry.label: entry for entry in build_references(NOW, timezone.utc)}
    assert by_label["This year"].timestamp == _ms(2024, 1, 1)
    assert by_label["Last year"].timestamp == _ms(2023, 1, 1)
    assert by_label["This month"].timestamp == _ms(2024, 3, 1)
    assert by_label["Last month"].timestamp == _ms(2024, 2, 1)


def test_last_month_in_january_wraps_to_december():
    entries = build_references(_ms(2024, 1, 10, 8, 30), timezone.utc)
    by_label = {entry.label: entry for entry in entries}
    assert by_label["Last month"].timestamp == _ms(2023, 12, 1)


def test_entries_carry_prefix_and_uuid():
    for entry in build_references(NOW, timezone.utc):
        assert entry.prefix == encode_timestamp(entry.timestamp)
        assert entry.uuid.replace("-", "").startswith(entry.prefix)
        data = entry.to_dict()
        assert data["label"] == entry.label
        assert data["iso"].endswith("Z")
