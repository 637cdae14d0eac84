"""Unit tests for the date normalizer"""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from vps_monitor.services.date_normalizer import (
    DATE_FORMATS,
    PARSERS,
    clean_date_text,
    parse_generic,
    parse_to_canonical,
    parse_with_format,
)

JAKARTA = ZoneInfo("Asia/Jakarta")
KUALA_LUMPUR = ZoneInfo("Asia/Kuala_Lumpur")

# 14:30 in Jakarta (UTC+7) is 15:30 in Kuala Lumpur (UTC+8)
EXPECTED = datetime(2025, 12, 5, 15, 30, tzinfo=KUALA_LUMPUR)


@pytest.mark.parametrize(
    "raw_text",
    [
        "December 5, 2025 14:30",
        "December 5, 2025 2:30 PM",
        "december 05, 2025 14:30",
        "Dec 5, 2025 14:30",
        "05 Dec 2025 14:30",
        "5 Dec 2025 2:30 pm",
        "2025-12-05 14:30",
    ],
)
def test_parse_known_formats(raw_text):
    parsed = parse_to_canonical(raw_text, JAKARTA, KUALA_LUMPUR)

    assert parsed == EXPECTED
    assert parsed.utcoffset() == timedelta(hours=8)


@pytest.mark.parametrize(
    "raw_text",
    [
        "December 5, 2025 14:30 WIB",
        "December 5, 2025 14:30 UTC+7",
        "  December   5,\n 2025   14:30  wib ",
        "2025-12-05 14:30 UTC7",
    ],
)
def test_timezone_noise_is_ignored(raw_text):
    """Test that embedded abbreviations do not change the source zone"""
    assert parse_to_canonical(raw_text, JAKARTA, KUALA_LUMPUR) == EXPECTED


def test_date_only_is_midnight_in_source_zone():
    parsed = parse_to_canonical("5 December 2025", JAKARTA, KUALA_LUMPUR)

    assert parsed == datetime(2025, 12, 5, 1, 0, tzinfo=KUALA_LUMPUR)


def test_zone_names_are_accepted():
    assert parse_to_canonical("2025-12-05 14:30", "Asia/Jakarta", "Asia/Kuala_Lumpur") == EXPECTED


def test_generic_fallback():
    """Test a format outside the list, handled by the last-resort parser"""
    parsed = parse_to_canonical("2025/12/05 14:30:00", JAKARTA, KUALA_LUMPUR)

    assert parsed == EXPECTED


def test_generic_fallback_ignores_explicit_offset():
    """Test that an embedded offset never overrides the source zone"""
    parsed = parse_to_canonical("2025-12-05T14:30:00+00:00", JAKARTA, KUALA_LUMPUR)

    assert parsed == EXPECTED


@pytest.mark.parametrize(
    "raw_text",
    [
        "December 5, 2025 14:30 GMT+7",
        "December 5, 2025 14:30 UTC+07:00",
        "December 5, 2025 14:30 GMT-3",
        "2025/12/05 14:30 +0000",
    ],
)
def test_offset_tokens_do_not_shift_the_instant(raw_text):
    assert parse_to_canonical(raw_text, JAKARTA, KUALA_LUMPUR) == EXPECTED


@pytest.mark.parametrize("raw_text", ["5 Dec", "December 2025", "14:30", "Dec 5 14:30"])
def test_incomplete_dates_are_rejected(raw_text):
    """Test that a missing year, month or day is not filled in from today"""
    assert parse_to_canonical(raw_text, JAKARTA, KUALA_LUMPUR) is None


def test_parse_generic_uses_source_zone_wall_clock():
    parsed = parse_generic("2025/12/05 14:30 GMT+7", JAKARTA)

    assert parsed == datetime(2025, 12, 5, 14, 30, tzinfo=JAKARTA)
    assert parsed.tzinfo is JAKARTA


@pytest.mark.parametrize("raw_text", ["", "   ", "WIB", "UTC+7", None, "unknown"])
def test_unparsable_returns_none(raw_text):
    assert parse_to_canonical(raw_text, JAKARTA, KUALA_LUMPUR) is None


@pytest.mark.parametrize("fmt", DATE_FORMATS)
def test_round_trip_every_format(fmt):
    """Test that formatting an instant with each pattern parses back to it"""
    has_time = "%H" in fmt or "%I" in fmt
    instant = datetime(2025, 3, 9, 21, 5, tzinfo=JAKARTA) if has_time else datetime(
        2025, 3, 9, tzinfo=JAKARTA
    )

    parsed = parse_to_canonical(instant.strftime(fmt), JAKARTA, KUALA_LUMPUR)

    assert parsed == instant
    assert parsed.tzinfo == KUALA_LUMPUR


def test_parsers_return_none_instead_of_raising():
    """Test that every parser in the chain signals no-match with None"""
    for date_parser in PARSERS:
        assert date_parser("definitely not a date", JAKARTA) is None


def test_parse_with_format_attaches_source_zone():
    parsed = parse_with_format("2025-12-05", JAKARTA, "%Y-%m-%d")

    assert parsed == datetime(2025, 12, 5, tzinfo=JAKARTA)


def test_parse_generic_rejects_garbage():
    assert parse_generic("no date here at all", JAKARTA) is None


def test_clean_date_text():
    assert clean_date_text(" December  5, 2025\n14:30 WIB ") == "December 5, 2025 14:30"
