"""Schedule helpers: time-slot bucketing and festival day numbers."""

from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum

from dateutil import parser as dateutil_parser

_TIME_RE = re.compile(r"(\d{1,2})[:.h](\d{2})")


class TimeSlot(str, Enum):
    """Part of the day an act starts in."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


def parse_iso_date(value: str | None) -> date | None:
    """Parse a ``YYYY-MM-DD`` string, returning ``None`` when absent or malformed."""
    if not value:
        return None
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_hour(value: str | None) -> int | None:
    """Return the hour of an ``HH:MM`` style time string, or ``None``."""
    if not value:
        return None
    match = _TIME_RE.search(value)
    if match is None:
        return None
    hour = int(match.group(1))
    return hour if 0 <= hour <= 23 else None


def time_slot_for(value: str | None) -> TimeSlot | None:
    """Bucket a start time: 06-12 morning, 12-17 afternoon, 17-22 evening, else night."""
    hour = parse_hour(value)
    if hour is None:
        return None
    if 6 <= hour < 12:
        return TimeSlot.MORNING
    if 12 <= hour < 17:
        return TimeSlot.AFTERNOON
    if 17 <= hour < 22:
        return TimeSlot.EVENING
    return TimeSlot.NIGHT


def festival_day_number(act_date: str | None, start_date: str | None) -> int | None:
    """1-based day of the festival on which *act_date* falls.

    Returns ``None`` when either date is missing or the act precedes the
    festival start.
    """
    act_day = parse_iso_date(act_date)
    first_day = parse_iso_date(start_date)
    if act_day is None or first_day is None:
        return None
    offset = (act_day - first_day).days
    if offset < 0:
        return None
    return offset + 1


_ORDINAL_RE = re.compile(r"(\d+)(st|nd|rd|th)\b", re.IGNORECASE)
# A day number alone ("Day 1") is not a date.
_DATE_HINT_RE = re.compile(
    r"\d{1,2}[./-]\d{1,2}|jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec", re.IGNORECASE
)


def normalize_date_text(value: str | None, default_year: int | None = None) -> str | None:
    """Coerce a free-text date ("Sat 21st July 2024", "21.07.2024") to ISO.

    Uses python-dateutil's fuzzy parser with day-first disambiguation, which
    matches how European festival sites write dates.  Returns ``None`` when
    nothing date-like is found.
    """
    if not value or not value.strip():
        return None
    if parse_iso_date(value.strip()) is not None:
        return value.strip()[:10]
    if not _DATE_HINT_RE.search(value):
        return None
    cleaned = _ORDINAL_RE.sub(r"\1", value.strip())
    default = datetime(default_year or datetime.now().year, 1, 1)
    try:
        parsed = dateutil_parser.parse(cleaned, fuzzy=True, dayfirst=True, default=default)
    except (ValueError, OverflowError):
        return None
    return parsed.date().isoformat()


def normalize_time_text(value: str | None) -> str | None:
    """Extract the first ``HH:MM`` (also ``HH.MM`` / ``HHhMM``) from *value*."""
    if not value:
        return None
    match = _TIME_RE.search(value)
    if match is None:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"
