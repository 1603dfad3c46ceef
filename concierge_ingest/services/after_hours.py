"""
After-hours call-log report family.

After-hours sheets come from the answering service and are flat: every data
row is one call laid out as (timestamp, 'Name (+phone)', notes). There are no
section markers, so a row is either data or dropped. A non-empty first cell
is a candidate call only when it carries at least one digit: title and column
header rows ('Call Time', 'After Hours Log') have none and are dropped rather
than reported. Every other non-empty row becomes a record, and a timestamp
that does not parse ('Dec 5 2024 late', '12/05/2024 23:45') is left for the
validator to reject with a row error.

Timestamps are interpreted as naive wall-clock times exactly as written.
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import re

from concierge_ingest.models import (
    AfterHoursCall,
    AfterHoursSummary,
    CallDuplicate,
    CallerPriority,
    CallsByDate,
    HourBucket,
    IngestionRules,
    ResponsePatterns,
    RowKind,
    ValidationVerdict,
    WeekdayBucket,
)
from concierge_ingest.services.parsers import (
    extract_member_name_and_phone,
    parse_after_hours_timestamp,
)
from concierge_ingest.services.sheet import RawSheet

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

TIMESTAMP_COLUMN: int = 0
MEMBER_COLUMN: int = 1
NOTES_COLUMN: int = 2

MIN_PHONE_DIGITS: int = 10

# Summary buckets: late night is 22:00-00:59, early morning 01:00-06:59
LATE_NIGHT_HOURS = frozenset({22, 23, 0})
EARLY_MORNING_HOURS = frozenset(range(1, 7))

DEFAULT_PEAK_HOUR: int = 20

BASE_URGENCY_SCORE: int = 5
MAX_URGENCY_SCORE: int = 10
WEEKEND_URGENCY_POINTS: int = 3
LATE_NIGHT_URGENCY_POINTS: int = 2
DEEP_NIGHT_URGENCY_POINTS: int = 1

PEAK_TIMES_LIMIT: int = 3

DAY_NAMES: List[str] = [
    'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday',
]


def _cell(cells: Sequence[str], index: int) -> str:
    return cells[index].strip() if index < len(cells) else ''


# =============================================================================
# Time helpers
# =============================================================================

def is_weekend(moment: datetime) -> bool:
    return moment.weekday() >= 5


def is_late_night(moment: datetime) -> bool:
    """22:00 onwards or up to 06:59."""
    return moment.hour >= 22 or moment.hour <= 6


def calculate_urgency_score(moment: datetime) -> int:
    """
    Urgency from 5 to 10 for a call at the given time.

    Weekend calls add 3, late-night calls (22:00-06:59) add 2 and calls
    between midnight and 04:59 add 1 more.
    """
    score = BASE_URGENCY_SCORE
    if is_weekend(moment):
        score += WEEKEND_URGENCY_POINTS
    if is_late_night(moment):
        score += LATE_NIGHT_URGENCY_POINTS
    if 0 <= moment.hour <= 4:
        score += DEEP_NIGHT_URGENCY_POINTS
    return min(MAX_URGENCY_SCORE, score)


def format_hour_label(hour: int) -> str:
    """0 -> '12 AM', 13 -> '1 PM'."""
    if hour == 0:
        return '12 AM'
    if hour < 12:
        return f'{hour} AM'
    if hour == 12:
        return '12 PM'
    return f'{hour - 12} PM'


# =============================================================================
# Transformer
# =============================================================================

def classify_after_hours_row(cells: Sequence[str]) -> RowKind:
    """DATA when the first cell is non-empty and holds a digit, else DROPPED."""
    timestamp = _cell(cells, TIMESTAMP_COLUMN)
    if timestamp and re.search(r'\d', timestamp):
        return RowKind.DATA
    return RowKind.DROPPED


def transform_after_hours_row(row_number: int, cells: Sequence[str]) -> Optional[AfterHoursCall]:
    """
    Build a call record from the first three cells of a row.

    Returns None for rows classify_after_hours_row drops.
    """
    if classify_after_hours_row(cells) is RowKind.DROPPED:
        return None

    timestamp = _cell(cells, TIMESTAMP_COLUMN)
    member_with_phone = _cell(cells, MEMBER_COLUMN)
    name, phone = extract_member_name_and_phone(member_with_phone)

    notes = _cell(cells, NOTES_COLUMN)
    if notes.upper() == 'N/A':
        notes = ''

    return AfterHoursCall(
        row_number=row_number,
        raw_timestamp=timestamp,
        member_name_with_phone=member_with_phone,
        member_name=name,
        phone_number=phone,
        notes=notes or None,
    )


def transform_after_hours_sheet(
    sheet: RawSheet,
    rules: Optional[IngestionRules] = None,
) -> List[AfterHoursCall]:
    records: List[AfterHoursCall] = []
    for row_number, cells in sheet.numbered_rows():
        record = transform_after_hours_row(row_number, cells)
        if record is not None:
            records.append(record)

    logger.info(f"After-hours transform emitted {len(records)} records from {len(sheet.rows)} rows")
    return records


# =============================================================================
# Validator
# =============================================================================

def validate_after_hours_call(record: AfterHoursCall, rules: IngestionRules) -> ValidationVerdict:
    """
    Check one after-hours call.

    A call inside the business-hours window is accepted with a warning.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not record.raw_timestamp:
        errors.append("Call timestamp is required")
    else:
        moment = parse_after_hours_timestamp(record.raw_timestamp)
        if moment is None:
            errors.append(f"Invalid timestamp format: {record.raw_timestamp}")
        elif rules.business_hours_start <= moment.hour < rules.business_hours_end:
            warnings.append(
                f"Call at {record.raw_timestamp} appears to be during business hours"
            )

    if not record.member_name:
        errors.append("Member name is required")

    if record.phone_number:
        digits = re.sub(r'\D', '', record.phone_number)
        if len(digits) < MIN_PHONE_DIGITS:
            errors.append(f"Invalid phone number: {record.phone_number}")

    return ValidationVerdict(errors=errors, warnings=warnings)


# =============================================================================
# Analytics
# =============================================================================

def _timed(records: Sequence[AfterHoursCall]) -> List[Tuple[AfterHoursCall, datetime]]:
    timed = []
    for record in records:
        moment = parse_after_hours_timestamp(record.raw_timestamp)
        if moment is not None:
            timed.append((record, moment))
    return timed


def group_calls_by_date(records: Sequence[AfterHoursCall]) -> List[CallsByDate]:
    """Calls grouped by ISO calendar date, earliest first."""
    grouped: Dict[str, List[AfterHoursCall]] = defaultdict(list)
    for record, moment in _timed(records):
        grouped[moment.date().isoformat()].append(record)
    return [
        CallsByDate(date=day, count=len(calls), calls=calls)
        for day, calls in sorted(grouped.items())
    ]


def identify_high_priority_callers(records: Sequence[AfterHoursCall]) -> List[CallerPriority]:
    """Members calling more than once, by average urgency then call count."""
    scores: Dict[str, List[int]] = defaultdict(list)
    for record, moment in _timed(records):
        scores[record.member_name].append(calculate_urgency_score(moment))

    callers = [
        CallerPriority(member=member, call_count=len(seen), avg_urgency=sum(seen) / len(seen))
        for member, seen in scores.items()
        if len(seen) > 1
    ]
    return sorted(callers, key=lambda c: (c.avg_urgency, c.call_count), reverse=True)


def analyze_response_patterns(records: Sequence[AfterHoursCall]) -> ResponsePatterns:
    """
    Hour-of-day and day-of-week distributions plus the three busiest hours.
    """
    hour_counts: Dict[int, int] = defaultdict(int)
    day_counts: Dict[str, int] = defaultdict(int)
    for _, moment in _timed(records):
        hour_counts[moment.hour] += 1
        day_counts[DAY_NAMES[moment.weekday()]] += 1

    busiest = sorted(hour_counts.items(), key=lambda item: (-item[1], item[0]))
    return ResponsePatterns(
        hour_distribution=[
            HourBucket(hour=hour, count=hour_counts.get(hour, 0), label=format_hour_label(hour))
            for hour in range(24)
        ],
        day_of_week_distribution=[
            WeekdayBucket(day=day, count=day_counts.get(day, 0)) for day in DAY_NAMES
        ],
        peak_times=[format_hour_label(hour) for hour, _ in busiest[:PEAK_TIMES_LIMIT]],
    )


def detect_call_duplicates(
    records: Sequence[AfterHoursCall],
    window_minutes: int = 30,
) -> List[CallDuplicate]:
    """
    Pairs of calls from the same member strictly less than window_minutes apart.

    Every qualifying pair is reported, so three calls in quick succession
    yield three pairs.
    """
    timed = _timed(records)
    duplicates: List[CallDuplicate] = []
    for i, (first, first_at) in enumerate(timed):
        for second, second_at in timed[i + 1:]:
            if first.member_name != second.member_name:
                continue
            minutes_apart = abs((second_at - first_at).total_seconds()) / 60
            if minutes_apart < window_minutes:
                duplicates.append(CallDuplicate(
                    first=first, second=second, minutes_apart=minutes_apart,
                ))
    return duplicates


def summarize_after_hours_calls(
    records: Sequence[AfterHoursCall],
    rules: Optional[IngestionRules] = None,
) -> AfterHoursSummary:
    """
    Aggregate accepted after-hours calls.

    peak_hour is the hour with the most calls (earliest hour on ties) and
    defaults to 20 when no timestamp parses.
    """
    rules = rules or IngestionRules()
    timed = _timed(records)

    hour_counts: Dict[int, int] = defaultdict(int)
    for _, moment in timed:
        hour_counts[moment.hour] += 1

    peak_hour = DEFAULT_PEAK_HOUR
    peak_count = 0
    for hour in sorted(hour_counts):
        if hour_counts[hour] > peak_count:
            peak_hour, peak_count = hour, hour_counts[hour]

    days = {moment.date() for _, moment in timed}

    return AfterHoursSummary(
        total_calls=len(records),
        weekend_calls=sum(1 for _, m in timed if is_weekend(m)),
        late_night_calls=sum(1 for _, m in timed if m.hour in LATE_NIGHT_HOURS),
        early_morning_calls=sum(1 for _, m in timed if m.hour in EARLY_MORNING_HOURS),
        avg_calls_per_day=round(len(records) / len(days), 2) if days else 0.0,
        peak_hour=peak_hour,
        duplicate_calls=len(detect_call_duplicates(records, rules.duplicate_call_window_minutes)),
    )


__all__ = [
    'is_weekend',
    'is_late_night',
    'calculate_urgency_score',
    'format_hour_label',
    'classify_after_hours_row',
    'transform_after_hours_row',
    'transform_after_hours_sheet',
    'validate_after_hours_call',
    'group_calls_by_date',
    'identify_high_priority_callers',
    'analyze_response_patterns',
    'detect_call_duplicates',
    'summarize_after_hours_calls',
]
