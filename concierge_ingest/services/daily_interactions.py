"""
Daily member-interactions report family.

A daily sheet is a log grouped by day: a bare date in column 0 ('12.5.24' or
'12/5/2024') opens the day, and each following row is one interaction with
the member name in column 0, the issue in column 1 and optional notes in
column 2. A 'No calls' row records a day without interactions.

Key Functions:
- advance_daily / transform_daily_sheet: rows -> DailyInteraction records
- validate_daily_interaction: per-record verdict
- summarize_daily_interactions: batch summary over accepted records
- calculate_daily_volume, identify_common_issues, analyze_trends_by_category:
  issue analytics reused by the summary
"""

from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from concierge_ingest.models import (
    CategoryTrend,
    CommonIssue,
    DailyInteraction,
    DailyInteractionsSummary,
    DailyVolume,
    IngestionRules,
    IssueCount,
    IssueUrgency,
    RowKind,
    TrendDirection,
    ValidationVerdict,
)
from concierge_ingest.services.classifiers import (
    NO_CALLS_MEMBER_NAME,
    categorize_issue,
    clean_member_name,
    detect_issue_urgency,
    is_date_row,
    is_no_calls_row,
)
from concierge_ingest.services.parsers import parse_daily_interaction_date
from concierge_ingest.services.sheet import RawSheet

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

MEMBER_COLUMN: int = 0
ISSUE_COLUMN: int = 1
NOTES_COLUMN: int = 2

TOP_ISSUES_LIMIT: int = 10

DEFAULT_MIN_OCCURRENCES: int = 3

# Change in average daily count between halves that counts as a trend
TREND_CHANGE_THRESHOLD: float = 0.5


def _cell(cells: Sequence[str], index: int) -> str:
    return cells[index].strip() if index < len(cells) else ''


def date_sort_key(value: str) -> Tuple[int, int, int]:
    """Chronological sort key for 'MM.DD.YY' strings."""
    try:
        month, day, year = (int(part) for part in value.split('.'))
    except ValueError:
        return (0, 0, 0)
    return (year, month, day)


# =============================================================================
# Transformer
# =============================================================================

@dataclass(frozen=True)
class DailySectionState:
    current_date: Optional[str] = None


def classify_daily_row(
    state: DailySectionState,
    cells: Sequence[str],
    rules: IngestionRules,
) -> RowKind:
    """
    Kind of one daily row given the current day.

    A bare date is a marker. A member row is data once a day is open; blank
    rows, rows before the first date and ignored names are dropped.
    """
    first = _cell(cells, MEMBER_COLUMN)
    if not first:
        return RowKind.DROPPED

    if is_date_row(first):
        return RowKind.MARKER

    if state.current_date is None:
        return RowKind.DROPPED

    member_name = clean_member_name(first)
    if is_no_calls_row(member_name):
        return RowKind.DATA

    ignored = {name.lower() for name in rules.ignored_daily_names}
    if not member_name or member_name.lower() in ignored:
        return RowKind.DROPPED
    return RowKind.DATA


def advance_daily(
    state: DailySectionState,
    row_number: int,
    cells: Sequence[str],
    rules: IngestionRules,
) -> Tuple[DailySectionState, List[DailyInteraction]]:
    """
    Consume one row.

    Returns:
        (new_state, records emitted by this row); at most one record.
    """
    kind = classify_daily_row(state, cells, rules)
    if kind is RowKind.DROPPED:
        return state, []

    first = _cell(cells, MEMBER_COLUMN)
    if kind is RowKind.MARKER:
        return DailySectionState(current_date=parse_daily_interaction_date(first)), []

    member_name = clean_member_name(first)
    if is_no_calls_row(member_name):
        # Issue and notes cells on a no-calls row are ignored
        return state, [DailyInteraction(
            row_number=row_number,
            interaction_date=state.current_date,
            member_name=NO_CALLS_MEMBER_NAME,
            issue_description='',
            notes=None,
        )]

    return state, [DailyInteraction(
        row_number=row_number,
        interaction_date=state.current_date,
        member_name=member_name,
        issue_description=_cell(cells, ISSUE_COLUMN),
        notes=_cell(cells, NOTES_COLUMN) or None,
    )]


def transform_daily_sheet(sheet: RawSheet, rules: IngestionRules) -> List[DailyInteraction]:
    state = DailySectionState()
    records: List[DailyInteraction] = []
    for row_number, cells in sheet.numbered_rows():
        state, emitted = advance_daily(state, row_number, cells, rules)
        records.extend(emitted)

    logger.info(f"Daily transform emitted {len(records)} records from {len(sheet.rows)} rows")
    return records


# =============================================================================
# Validator
# =============================================================================

def validate_daily_interaction(
    record: DailyInteraction,
    rules: Optional[IngestionRules] = None,
) -> ValidationVerdict:
    errors: List[str] = []

    if not record.interaction_date:
        errors.append("Interaction date is required")
    elif parse_daily_interaction_date(record.interaction_date) is None:
        errors.append(f"Invalid date format: {record.interaction_date}")

    if not record.member_name:
        errors.append("Member name is required")

    return ValidationVerdict(errors=errors)


# =============================================================================
# Analytics
# =============================================================================

def _interactions(records: Sequence[DailyInteraction]) -> List[DailyInteraction]:
    return [r for r in records if r.member_name != NO_CALLS_MEMBER_NAME]


def calculate_daily_volume(records: Sequence[DailyInteraction]) -> List[DailyVolume]:
    """Interactions per day in chronological order; NO CALLS rows excluded."""
    counts = Counter(r.interaction_date for r in _interactions(records))
    return [
        DailyVolume(date=day, count=counts[day])
        for day in sorted(counts, key=date_sort_key)
    ]


def identify_common_issues(
    records: Sequence[DailyInteraction],
    min_occurrences: int = DEFAULT_MIN_OCCURRENCES,
) -> List[CommonIssue]:
    """
    Issue categories seen at least min_occurrences times, most frequent first.

    A category's urgency is high (or low) when more than half of its
    interactions are; otherwise medium.
    """
    urgencies: Dict[str, List[IssueUrgency]] = defaultdict(list)
    for record in _interactions(records):
        if not record.issue_description:
            continue
        category = categorize_issue(record.issue_description)
        urgencies[category].append(detect_issue_urgency(record.issue_description))

    results: List[CommonIssue] = []
    for category, seen in urgencies.items():
        if len(seen) < min_occurrences:
            continue
        half = len(seen) / 2
        if seen.count(IssueUrgency.HIGH) > half:
            urgency = IssueUrgency.HIGH
        elif seen.count(IssueUrgency.LOW) > half:
            urgency = IssueUrgency.LOW
        else:
            urgency = IssueUrgency.MEDIUM
        results.append(CommonIssue(
            issue=category, category=category, count=len(seen), urgency=urgency,
        ))

    return sorted(results, key=lambda c: c.count, reverse=True)


def analyze_trends_by_category(records: Sequence[DailyInteraction]) -> Dict[str, CategoryTrend]:
    """
    Compare each category's average daily count between the earlier and later
    half of the covered days.

    Edge Cases:
        - Fewer than two distinct days: every category is stable
        - NO CALLS days count toward the covered days but not toward any category
    """
    days = sorted({r.interaction_date for r in records}, key=date_sort_key)

    if len(days) < 2:
        totals = Counter(categorize_issue(r.issue_description) for r in _interactions(records))
        return {
            category: CategoryTrend(
                total=total,
                avg_per_day=total / (len(days) or 1),
                trend=TrendDirection.STABLE,
            )
            for category, total in totals.items()
        }

    midpoint = len(days) // 2
    first_half = set(days[:midpoint])
    second_half = set(days[midpoint:])

    first_counts: Counter = Counter()
    second_counts: Counter = Counter()
    for record in _interactions(records):
        category = categorize_issue(record.issue_description)
        if record.interaction_date in first_half:
            first_counts[category] += 1
        else:
            second_counts[category] += 1

    results: Dict[str, CategoryTrend] = {}
    for category in list(dict.fromkeys([*first_counts, *second_counts])):
        change = second_counts[category] / len(second_half) - first_counts[category] / len(first_half)
        if change > TREND_CHANGE_THRESHOLD:
            trend = TrendDirection.INCREASING
        elif change < -TREND_CHANGE_THRESHOLD:
            trend = TrendDirection.DECREASING
        else:
            trend = TrendDirection.STABLE
        total = first_counts[category] + second_counts[category]
        results[category] = CategoryTrend(
            total=total,
            avg_per_day=total / len(days),
            trend=trend,
        )
    return results


def summarize_daily_interactions(records: Sequence[DailyInteraction]) -> DailyInteractionsSummary:
    """
    Aggregate accepted daily records.

    total_interactions excludes NO CALLS records; no_calls_days counts the
    distinct days that logged one.
    """
    interactions = _interactions(records)
    categories = Counter(categorize_issue(r.issue_description) for r in interactions)

    top_issues = [
        IssueCount(issue=issue, count=count)
        for issue, count in sorted(categories.items(), key=lambda item: item[1], reverse=True)
    ][:TOP_ISSUES_LIMIT]

    return DailyInteractionsSummary(
        total_interactions=len(interactions),
        total_days=len({r.interaction_date for r in records}),
        no_calls_days=len({
            r.interaction_date for r in records if r.member_name == NO_CALLS_MEMBER_NAME
        }),
        issue_categories=dict(categories),
        top_issues=top_issues,
        category_trends=analyze_trends_by_category(records),
    )


__all__ = [
    'DailySectionState',
    'classify_daily_row',
    'advance_daily',
    'transform_daily_sheet',
    'validate_daily_interaction',
    'date_sort_key',
    'calculate_daily_volume',
    'identify_common_issues',
    'analyze_trends_by_category',
    'summarize_daily_interactions',
]
