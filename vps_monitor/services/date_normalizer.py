"""Parse human-readable dates from the VPS info page into aware datetimes"""

import logging
import re
from collections.abc import Callable
from datetime import datetime, tzinfo
from functools import partial
from zoneinfo import ZoneInfo

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

# The page always renders in its own regional zone; embedded abbreviations are noise.
TIMEZONE_NOISE = re.compile(r"WIB|UTC\+?7", re.IGNORECASE)

# Tried in order, first match wins
DATE_FORMATS: tuple[str, ...] = (
    "%B %d, %Y %H:%M",
    "%B %d, %Y %I:%M %p",
    "%B %d, %Y",
    "%b %d, %Y %H:%M",
    "%b %d, %Y",
    "%d %b %Y %H:%M",
    "%d %b %Y %I:%M %p",
    "%d %b %Y",
    "%d %B %Y",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)

# Two defaults that differ in every date part; any part dateutil fills in shows up as a mismatch
GENERIC_DEFAULTS = (datetime(2000, 1, 1), datetime(2004, 2, 2))

DateParser = Callable[[str, tzinfo], datetime | None]


def _as_zone(zone: str | tzinfo) -> tzinfo:
    return ZoneInfo(zone) if isinstance(zone, str) else zone


def clean_date_text(raw_text: str) -> str:
    """Collapse whitespace and drop timezone abbreviations"""
    text = re.sub(r"\s+", " ", raw_text)
    text = TIMEZONE_NOISE.sub("", text)
    return re.sub(r"\s+", " ", text).strip()


def parse_with_format(text: str, zone: tzinfo, fmt: str) -> datetime | None:
    """Parse text with one strptime format as wall-clock time in zone"""
    try:
        naive = datetime.strptime(text, fmt)
    except ValueError:
        return None
    return naive.replace(tzinfo=zone)


def parse_generic(text: str, zone: tzinfo) -> datetime | None:
    """
    Last-resort parse with dateutil, always read as wall-clock time in zone

    Embedded offsets are ignored. Text without a full year, month and day is
    rejected rather than completed from a default date.
    """
    try:
        parsed = [
            dateutil_parser.parse(text, default=default, ignoretz=True)
            for default in GENERIC_DEFAULTS
        ]
    except (ValueError, OverflowError):
        return None

    first, second = parsed
    if first.date() != second.date():
        logger.debug(f"Date text '{text}' is missing a year, month or day")
        return None
    return first.replace(tzinfo=zone)


PARSERS: tuple[DateParser, ...] = tuple(
    partial(parse_with_format, fmt=fmt) for fmt in DATE_FORMATS
) + (parse_generic,)


def parse_to_canonical(
    raw_text: str | None,
    source_zone: str | tzinfo,
    display_zone: str | tzinfo,
) -> datetime | None:
    """
    Parse a date string from the remote page into an aware datetime

    Args:
        raw_text: Date text as extracted from the page
        source_zone: Zone the page renders wall-clock times in
        display_zone: Zone the result is converted to

    Returns:
        Aware datetime in display_zone, or None if no parser accepts the text
    """
    if not raw_text:
        return None

    cleaned = clean_date_text(raw_text)
    if not cleaned:
        return None

    source = _as_zone(source_zone)
    for date_parser in PARSERS:
        parsed = date_parser(cleaned, source)
        if parsed is not None:
            return parsed.astimezone(_as_zone(display_zone))

    logger.debug(f"No date format matched '{cleaned}'")
    return None
