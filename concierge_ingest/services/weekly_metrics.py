"""
Weekly agent-metrics report family.

A weekly sheet is organised in sections. A date-range row ('12.01.24-12.07.24'
in column 0) opens a section; a header row names the agents, one per column;
each metric row ('Members attended to', 'Phone Time', ...) then carries one
value per agent column. Every real value becomes one WeeklyMetric, so a single
metric row fans out into up to len(agents) records.

The transformer is a left fold over the rows: advance_weekly() takes the
current section state and one row and returns the new state plus the records
the row emits. transform_weekly_sheet() runs the fold over a whole sheet.

Rows that are neither date ranges, headers nor metric rows are dropped
silently, as are metric rows that appear before the first date range or
before any agent header. Placeholder values (empty, 'N/A', '?') emit nothing.

Key Functions:
- advance_weekly / transform_weekly_sheet: rows -> WeeklyMetric records
- validate_weekly_metric: per-record verdict
- summarize_weekly_metrics: batch summary over accepted records
- calculate_agent_performance_score / identify_top_performers: agent ranking
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import re

from concierge_ingest.models import (
    AgentScore,
    IngestionRules,
    MetricType,
    RowKind,
    ValidationVerdict,
    WeeklyMetric,
    WeeklyMetricsSummary,
)
from concierge_ingest.services.classifiers import (
    is_date_range_row,
    is_placeholder_value,
    match_agent_name,
    match_metric_type,
)
from concierge_ingest.services.parsers import (
    DateRange,
    TASK_PAIR_PATTERN,
    is_recognized_phone_time,
    parse_phone_time_duration,
    parse_weekly_date_range,
)
from concierge_ingest.services.sheet import RawSheet

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS - Performance Scoring
# =============================================================================

BASE_PERFORMANCE_SCORE: int = 50
MAX_PERFORMANCE_SCORE: int = 100

# (minimum members attended, points), checked top-down
MEMBERS_SCORE_TIERS: List[Tuple[int, int]] = [(100, 20), (75, 15), (50, 10)]

# (minimum CRM tasks, points), checked top-down
TASKS_SCORE_TIERS: List[Tuple[int, int]] = [(30, 15), (20, 10), (10, 5)]

# Phone minutes per member attended
IDEAL_MINUTES_PER_MEMBER: Tuple[float, float] = (3.0, 8.0)
ACCEPTABLE_MINUTES_PER_MEMBER: Tuple[float, float] = (2.0, 10.0)
IDEAL_MINUTES_POINTS: int = 15
ACCEPTABLE_MINUTES_POINTS: int = 10
BRIEF_MINUTES_POINTS: int = 5

NOTES_HEADER_LABEL: str = 'notes'

COUNT_METRICS = frozenset({
    MetricType.CRM_TASKS,
    MetricType.RX_REQUESTS,
    MetricType.IMAGING_REQUESTS,
    MetricType.LAB_REQUESTS,
    MetricType.APPT_REQUESTS,
})


def _count_value(value: str) -> int:
    digits = re.sub(r'\D', '', value or '')
    return int(digits) if digits else 0


# =============================================================================
# Transformer
# =============================================================================

@dataclass(frozen=True)
class WeeklySectionState:
    """
    Fold state carried from row to row.

    agent_columns maps column index to canonical agent name; notes_column is
    the column whose value is copied into every record of a metric row.
    """
    date_range: Optional[DateRange] = None
    raw_date_range: str = ''
    agent_columns: Tuple[Tuple[int, str], ...] = ()
    notes_column: Optional[int] = None


def read_header_columns(
    cells: Sequence[str],
    known_agents: Sequence[str],
) -> Tuple[Tuple[Tuple[int, str], ...], Optional[int]]:
    """
    Agent columns and notes column described by a header row.

    Column 0 holds the row label and is never an agent column. A row is an
    agent header only when every non-empty cell from column 1 through the
    last agent column is an agent name or the 'Notes' label; anything else
    is free text and describes no columns. The notes column is a column
    labelled 'Notes' or, failing that, the first unlabeled column after the
    last agent column.

    Returns:
        (agent_columns, notes_column); agent_columns is empty when the row
        is not an agent header.
    """
    agent_columns: List[Tuple[int, str]] = []
    for index, cell in enumerate(cells):
        if index == 0:
            continue
        agent = match_agent_name(cell, known_agents)
        if agent:
            agent_columns.append((index, agent))

    if not agent_columns:
        return (), None

    last_agent_index = agent_columns[-1][0]
    agent_indexes = {index for index, _ in agent_columns}
    for index in range(1, last_agent_index + 1):
        label = (cells[index] or '').strip().lower()
        if label and index not in agent_indexes and label != NOTES_HEADER_LABEL:
            return (), None

    notes_column: Optional[int] = None
    for index, cell in enumerate(cells):
        if index > 0 and (cell or '').strip().lower() == NOTES_HEADER_LABEL:
            notes_column = index
            break
    if notes_column is None:
        for index in range(last_agent_index + 1, len(cells)):
            if not (cells[index] or '').strip():
                notes_column = index
                break

    return tuple(agent_columns), notes_column


def initial_weekly_state(
    columns: Optional[Sequence[str]],
    known_agents: Sequence[str],
) -> WeeklySectionState:
    """Starting state; a sheet with named columns seeds the agent header."""
    if not columns:
        return WeeklySectionState()
    agent_columns, notes_column = read_header_columns(columns, known_agents)
    return WeeklySectionState(agent_columns=agent_columns, notes_column=notes_column)


def classify_weekly_row(
    state: WeeklySectionState,
    cells: Sequence[str],
    rules: IngestionRules,
) -> RowKind:
    """
    Kind of one weekly row given the section state before it.

    Checked in order: a date range in column 0 is a marker, then a metric
    label is data (dropped while no section or agent header is open), then an
    agent header row is a marker. Everything else is dropped.
    """
    first = (cells[0] if cells else '').strip()

    if is_date_range_row(first):
        return RowKind.MARKER

    if match_metric_type(first) is not None:
        if state.date_range is None or not state.agent_columns:
            return RowKind.DROPPED
        return RowKind.DATA

    agent_columns, _ = read_header_columns(cells, rules.known_agents)
    if agent_columns:
        return RowKind.MARKER
    return RowKind.DROPPED


def advance_weekly(
    state: WeeklySectionState,
    row_number: int,
    cells: Sequence[str],
    rules: IngestionRules,
) -> Tuple[WeeklySectionState, List[WeeklyMetric]]:
    """
    Consume one row.

    Args:
        state: Section state before this row.
        row_number: 1-based source row number.
        cells: Row cells.
        rules: Known agents and other conventions.

    Returns:
        (new_state, records emitted by this row)
    """
    kind = classify_weekly_row(state, cells, rules)
    if kind is RowKind.DROPPED:
        return state, []

    first = (cells[0] if cells else '').strip()
    if kind is RowKind.DATA:
        return state, _emit_metric_row(state, row_number, cells, match_metric_type(first))

    # A date-range row may carry the agent header in the same row
    agent_columns, notes_column = read_header_columns(cells, rules.known_agents)
    if agent_columns:
        state = replace(state, agent_columns=agent_columns, notes_column=notes_column)

    if is_date_range_row(first):
        state = replace(
            state,
            date_range=parse_weekly_date_range(first),
            raw_date_range=first,
        )

    return state, []


def _emit_metric_row(
    state: WeeklySectionState,
    row_number: int,
    cells: Sequence[str],
    metric_type: MetricType,
) -> List[WeeklyMetric]:
    notes: Optional[str] = None
    if state.notes_column is not None and state.notes_column < len(cells):
        notes = cells[state.notes_column].strip() or None

    records: List[WeeklyMetric] = []
    for index, agent in state.agent_columns:
        value = cells[index].strip() if index < len(cells) else ''
        if is_placeholder_value(value):
            continue
        records.append(WeeklyMetric(
            row_number=row_number,
            week_start=state.date_range.start,
            week_end=state.date_range.end,
            raw_date_range=state.raw_date_range,
            agent_name=agent,
            metric_type=metric_type.value,
            metric_value=value,
            notes=notes,
        ))
    return records


def transform_weekly_sheet(sheet: RawSheet, rules: IngestionRules) -> List[WeeklyMetric]:
    """Run the weekly fold over every row, in order."""
    state = initial_weekly_state(sheet.columns, rules.known_agents)
    records: List[WeeklyMetric] = []
    for row_number, cells in sheet.numbered_rows():
        state, emitted = advance_weekly(state, row_number, cells, rules)
        records.extend(emitted)

    logger.info(f"Weekly transform emitted {len(records)} records from {len(sheet.rows)} rows")
    return records


# =============================================================================
# Validator
# =============================================================================

def validate_weekly_metric(record: WeeklyMetric, rules: IngestionRules) -> ValidationVerdict:
    """
    Check one weekly record.

    Errors reject the record: missing fields, an unparseable date range, an
    unknown agent or metric, Phone Time outside [0, max_weekly_phone_hours],
    and a Members attended to count that is not a number in
    [0, max_members_attended]. Values whose format is not recognized but
    that do not break a bound only produce warnings.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not record.raw_date_range:
        errors.append("Date range is required")
    elif parse_weekly_date_range(record.raw_date_range) is None:
        errors.append(f"Invalid date range format: {record.raw_date_range}")

    if not record.agent_name:
        errors.append("Agent name is required")
    elif record.agent_name.lower() not in {a.lower() for a in rules.known_agents}:
        errors.append(f"Unknown agent: {record.agent_name}")

    metric: Optional[MetricType] = None
    if not record.metric_type:
        errors.append("Metric type is required")
    else:
        try:
            metric = MetricType(record.metric_type)
        except ValueError:
            errors.append(f"Unknown metric type: {record.metric_type}")

    value = record.metric_value.strip()
    if not value:
        errors.append("Metric value is required")
        return ValidationVerdict(errors=errors, warnings=warnings)

    if metric == MetricType.PHONE_TIME:
        hours = parse_phone_time_duration(value)
        if not is_recognized_phone_time(value):
            warnings.append(f"Phone time not in a recognized format: {value}")
        elif hours < 0 or hours > rules.max_weekly_phone_hours:
            errors.append(f"Phone time hours out of valid range: {hours}")

    elif metric == MetricType.MEMBERS_ATTENDED:
        digits = re.sub(r'\D', '', value)
        if not digits or int(digits) > rules.max_members_attended:
            errors.append(f"Invalid member count: {value}")

    elif metric == MetricType.INCOMPLETE_NEXT_WEEK_TASKS:
        if not TASK_PAIR_PATTERN.search(value) and not re.search(r'\d', value):
            warnings.append(f"Task counts not in 'incomplete | next week' format: {value}")

    elif metric in COUNT_METRICS:
        if not re.search(r'\d', value):
            warnings.append(f"Non-numeric value for {metric.value}: {value}")

    return ValidationVerdict(errors=errors, warnings=warnings)


# =============================================================================
# Summary & Scoring
# =============================================================================

def _first_value(records: Sequence[WeeklyMetric], metric: MetricType) -> Optional[str]:
    for record in records:
        if record.metric_type == metric.value:
            return record.metric_value
    return None


def calculate_agent_performance_score(
    records: Sequence[WeeklyMetric],
    agent_name: str,
    date_range: Optional[str] = None,
) -> int:
    """
    Score an agent from 0 to 100.

    Starts at 50 and adds points for members attended, phone minutes per
    member and CRM tasks. Each metric is taken from the agent's first record
    of that kind, optionally restricted to one week ('MM.DD.YY-MM.DD.YY').

    Edge Cases:
        - No members attended: the phone-minutes bonus is skipped
        - Agent with no records scores the base 50
    """
    agent_records = [
        r for r in records
        if r.agent_name == agent_name
        and (date_range is None or f"{r.week_start}-{r.week_end}" == date_range)
    ]

    score = BASE_PERFORMANCE_SCORE

    members_value = _first_value(agent_records, MetricType.MEMBERS_ATTENDED)
    members = _count_value(members_value) if members_value is not None else 0
    if members_value is not None:
        for minimum, points in MEMBERS_SCORE_TIERS:
            if members >= minimum:
                score += points
                break

    phone_value = _first_value(agent_records, MetricType.PHONE_TIME)
    if phone_value is not None and members > 0:
        minutes_per_member = parse_phone_time_duration(phone_value) * 60 / members
        if IDEAL_MINUTES_PER_MEMBER[0] <= minutes_per_member <= IDEAL_MINUTES_PER_MEMBER[1]:
            score += IDEAL_MINUTES_POINTS
        elif ACCEPTABLE_MINUTES_PER_MEMBER[0] <= minutes_per_member <= ACCEPTABLE_MINUTES_PER_MEMBER[1]:
            score += ACCEPTABLE_MINUTES_POINTS
        elif minutes_per_member < ACCEPTABLE_MINUTES_PER_MEMBER[0]:
            score += BRIEF_MINUTES_POINTS

    tasks_value = _first_value(agent_records, MetricType.CRM_TASKS)
    if tasks_value is not None:
        tasks = _count_value(tasks_value)
        for minimum, points in TASKS_SCORE_TIERS:
            if tasks >= minimum:
                score += points
                break

    return min(MAX_PERFORMANCE_SCORE, score)


def identify_top_performers(records: Sequence[WeeklyMetric]) -> List[AgentScore]:
    """All agents in the records, best score first (ties keep sheet order)."""
    agents: List[str] = list(dict.fromkeys(r.agent_name for r in records))
    scores = [
        AgentScore(agent=agent, score=calculate_agent_performance_score(records, agent))
        for agent in agents
    ]
    return sorted(scores, key=lambda s: s.score, reverse=True)


def summarize_weekly_metrics(records: Sequence[WeeklyMetric]) -> WeeklyMetricsSummary:
    """
    Aggregate accepted weekly records.

    total_members sums every Members attended to value, total_phone_hours
    sums Phone Time (rounded to one decimal) and total_tasks sums CRM Tasks.
    """
    date_ranges: List[str] = list(dict.fromkeys(
        f"{r.week_start}-{r.week_end}" for r in records
    ))

    total_members = 0
    total_phone_hours = 0.0
    total_tasks = 0
    for record in records:
        if record.metric_type == MetricType.MEMBERS_ATTENDED.value:
            total_members += _count_value(record.metric_value)
        elif record.metric_type == MetricType.PHONE_TIME.value:
            total_phone_hours += parse_phone_time_duration(record.metric_value)
        elif record.metric_type == MetricType.CRM_TASKS.value:
            total_tasks += _count_value(record.metric_value)

    return WeeklyMetricsSummary(
        total_weeks=len(date_ranges),
        date_ranges=date_ranges,
        agents=sorted({r.agent_name for r in records}),
        metrics=sorted({r.metric_type for r in records}),
        total_members=total_members,
        total_phone_hours=round(total_phone_hours, 1),
        total_tasks=total_tasks,
        top_performers=identify_top_performers(records),
    )


__all__ = [
    'WeeklySectionState',
    'read_header_columns',
    'initial_weekly_state',
    'classify_weekly_row',
    'advance_weekly',
    'transform_weekly_sheet',
    'validate_weekly_metric',
    'calculate_agent_performance_score',
    'identify_top_performers',
    'summarize_weekly_metrics',
]
