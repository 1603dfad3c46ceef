"""
Cell-level parsers shared by the concierge report families.

Every function here is pure, total and side-effect free: it maps one cell (or
one pair of cells) to a normalized value, or to None/zero when the text does
not fit. None of them raise on bad input. Whether a None is a dropped row or a
validation error is decided by the transformers and validators.

Normalized dates are always the zero-padded 'MM.DD.YY' text form. Timestamps
are naive datetimes in the wall-clock time written in the sheet; no time zone
conversion is applied.

Example:
    >>> parse_weekly_date_range('12.1.24-12.7.24')
    DateRange(start='12.01.24', end='12.07.24')
    >>> parse_phone_time_duration('12:30 hours')
    12.5
    >>> extract_member_name_and_phone('Jane Doe (+15551234567)')
    MemberPhone(name='Jane Doe', phone='15551234567')
"""

from datetime import datetime
from typing import Dict, NamedTuple, Optional
import re


# =============================================================================
# CONSTANTS - Patterns
# =============================================================================

WEEKLY_DATE_RANGE_PATTERN = re.compile(
    r'(\d{1,2})\.(\d{1,2})\.(\d{2})-(\d{1,2})\.(\d{1,2})\.(\d{2})'
)

DAILY_DOT_DATE_PATTERN = re.compile(r'^(\d{1,2})\.(\d{1,2})\.(\d{2})$')
DAILY_SLASH_DATE_PATTERN = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')

AFTER_HOURS_TIMESTAMP_PATTERN = re.compile(
    r'^([A-Za-z]{3})\s+(\d{1,2}),\s+(\d{4}),\s+(\d{1,2}):(\d{2}):(\d{2})\s+(am|pm)$',
    re.IGNORECASE,
)

MEMBER_PHONE_PATTERN = re.compile(r'^(.+?)\s*\(\+?(\d+)\)$')

PHONE_HOURS_MINUTES_PATTERN = re.compile(r'(\d+):(\d+)\s*hours?', re.IGNORECASE)
PHONE_DECIMAL_HOURS_PATTERN = re.compile(r'(\d+\.?\d*)\s*hours?', re.IGNORECASE)
PHONE_MINUTES_PATTERN = re.compile(r'(\d+)\s*minutes?', re.IGNORECASE)

TASK_PAIR_PATTERN = re.compile(r'(\d+)\s*\|\s*(\d+)')
SINGLE_NUMBER_PATTERN = re.compile(r'(\d+)')

MONTH_ABBREVIATIONS: Dict[str, int] = {
    'Jan': 1, 'Feb': 2, 'Mar': 3, 'Apr': 4, 'May': 5, 'Jun': 6,
    'Jul': 7, 'Aug': 8, 'Sep': 9, 'Oct': 10, 'Nov': 11, 'Dec': 12,
}


# =============================================================================
# Result Types
# =============================================================================

class DateRange(NamedTuple):
    start: str
    end: str


class TaskPair(NamedTuple):
    incomplete: int
    next_week: int


class MemberPhone(NamedTuple):
    name: str
    phone: str


def _mmddyy(month: str, day: str, year: str) -> str:
    return f"{int(month):02d}.{int(day):02d}.{year[-2:]}"


# =============================================================================
# Weekly
# =============================================================================

def parse_weekly_date_range(text: str) -> Optional[DateRange]:
    """
    Parse a weekly section header like '12.01.24-12.07.24'.

    One- or two-digit months and days are accepted and zero-padded. The
    start/end values are taken as written; a start after the end is not
    rejected here.

    Returns:
        DateRange of 'MM.DD.YY' strings, or None when the text has no range.
    """
    if not text:
        return None
    match = WEEKLY_DATE_RANGE_PATTERN.search(text)
    if not match:
        return None
    m1, d1, y1, m2, d2, y2 = match.groups()
    return DateRange(start=_mmddyy(m1, d1, y1), end=_mmddyy(m2, d2, y2))


def parse_phone_time_duration(text: str) -> float:
    """
    Convert a Phone Time cell to decimal hours.

    Forms are tried in order: 'H:MM hours', decimal hours ('12.5 hours'),
    then minutes ('45 minutes'). Anything else, including a bare number, is 0.

    Example:
        >>> parse_phone_time_duration('1:30 hours')
        1.5
        >>> parse_phone_time_duration('45 minutes')
        0.75
    """
    if not text:
        return 0.0

    match = PHONE_HOURS_MINUTES_PATTERN.search(text)
    if match:
        return int(match.group(1)) + int(match.group(2)) / 60

    match = PHONE_DECIMAL_HOURS_PATTERN.search(text)
    if match:
        return float(match.group(1))

    match = PHONE_MINUTES_PATTERN.search(text)
    if match:
        return int(match.group(1)) / 60

    return 0.0


def is_recognized_phone_time(text: str) -> bool:
    """True when the cell matches one of the Phone Time forms."""
    if not text:
        return False
    return any(
        p.search(text) for p in (
            PHONE_HOURS_MINUTES_PATTERN,
            PHONE_DECIMAL_HOURS_PATTERN,
            PHONE_MINUTES_PATTERN,
        )
    )


def parse_incomplete_tasks_pair(text: str) -> TaskPair:
    """
    Parse an 'Incomplete/Next Week Tasks' cell like '3 | 5'.

    A lone number is read as the incomplete count with zero for next week;
    anything else is (0, 0).
    """
    if not text:
        return TaskPair(0, 0)

    match = TASK_PAIR_PATTERN.search(text)
    if match:
        return TaskPair(int(match.group(1)), int(match.group(2)))

    match = SINGLE_NUMBER_PATTERN.search(text)
    if match:
        return TaskPair(int(match.group(1)), 0)

    return TaskPair(0, 0)


# =============================================================================
# Daily
# =============================================================================

def parse_daily_interaction_date(text: str) -> Optional[str]:
    """Parse 'M.D.YY' or 'M/D/YYYY' into 'MM.DD.YY'; None otherwise."""
    if not text:
        return None
    value = text.strip()

    match = DAILY_DOT_DATE_PATTERN.match(value)
    if match:
        return _mmddyy(*match.groups())

    match = DAILY_SLASH_DATE_PATTERN.match(value)
    if match:
        return _mmddyy(*match.groups())

    return None


# =============================================================================
# After-hours
# =============================================================================

def parse_after_hours_timestamp(text: str) -> Optional[datetime]:
    """
    Parse 'Mon D, YYYY, H:MM:SS am|pm' into a naive datetime.

    The month must be a three-letter English abbreviation (any case). Hour is
    on the 12-hour clock: 12 am is midnight and 12 pm is noon. Impossible
    calendar dates and clock times yield None.

    Example:
        >>> parse_after_hours_timestamp('Dec 5, 2024, 11:45:00 pm')
        datetime.datetime(2024, 12, 5, 23, 45)
    """
    if not text:
        return None
    match = AFTER_HOURS_TIMESTAMP_PATTERN.match(text.strip())
    if not match:
        return None

    month_name, day, year, hour, minute, second, meridiem = match.groups()
    month = MONTH_ABBREVIATIONS.get(month_name.title())
    if month is None:
        return None

    hour_value = int(hour)
    if not 1 <= hour_value <= 12:
        return None
    if meridiem.lower() == 'pm' and hour_value != 12:
        hour_value += 12
    elif meridiem.lower() == 'am' and hour_value == 12:
        hour_value = 0

    try:
        return datetime(
            int(year), month, int(day), hour_value, int(minute), int(second)
        )
    except ValueError:
        return None


def extract_member_name_and_phone(text: str) -> MemberPhone:
    """
    Split 'Name (+15551234567)' into its name and phone digits.

    Without a trailing parenthesized number the whole (trimmed) text is the
    name and the phone is empty.
    """
    value = (text or '').strip()
    match = MEMBER_PHONE_PATTERN.match(value)
    if match:
        return MemberPhone(name=match.group(1).strip(), phone=match.group(2))
    return MemberPhone(name=value, phone='')


def format_phone_number(phone: str) -> str:
    """
    Render phone digits for display.

    10 digits become '(xxx) xxx-xxxx', 11 digits with a leading 1 become
    '+1 (xxx) xxx-xxxx', longer numbers keep their country prefix. Anything
    else is returned unchanged.
    """
    digits = re.sub(r'\D', '', phone or '')

    if len(digits) == 10:
        return f"({digits[0:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits.startswith('1'):
        return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    if len(digits) > 11:
        country = digits[:-10]
        local = digits[-10:]
        return f"+{country} ({local[0:3]}) {local[3:6]}-{local[6:]}"
    return phone


__all__ = [
    'DateRange',
    'TaskPair',
    'MemberPhone',
    'MONTH_ABBREVIATIONS',
    'parse_weekly_date_range',
    'parse_phone_time_duration',
    'is_recognized_phone_time',
    'parse_incomplete_tasks_pair',
    'parse_daily_interaction_date',
    'parse_after_hours_timestamp',
    'extract_member_name_and_phone',
    'format_phone_number',
]
