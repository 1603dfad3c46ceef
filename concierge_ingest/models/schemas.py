"""
Pydantic models for the concierge ingestion pipeline.

This module provides the typed records emitted by the per-family transformers,
the validation verdicts, the per-family summaries, the upload metadata and the
UploadBatch returned by the orchestrator.

Record fields mirror the staging table columns in
concierge_ingest/sql/concierge_queries.py. Records deliberately accept empty
strings: deciding whether a record is acceptable is the validators' job, not
the model's.

All models use Pydantic v2 syntax.
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from concierge_ingest.models.enums import (
    BatchStatus,
    IssueUrgency,
    ReportFamily,
    TrendDirection,
)


# =============================================================================
# Typed Records (one variant per report family)
# =============================================================================


class WeeklyMetric(BaseModel):
    """
    One agent's value for one metric in one reporting week.

    A single weekly metric row fans out into one WeeklyMetric per agent column
    carrying a real value.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "row_number": 3,
                "week_start": "12.01.24",
                "week_end": "12.07.24",
                "raw_date_range": "12.01.24-12.07.24",
                "agent_name": "Ace",
                "metric_type": "Members attended to",
                "metric_value": "87",
                "notes": None,
            }
        }
    )

    row_number: int = Field(..., ge=1, description="1-based source row number")
    week_start: str = Field(..., description="Week start, normalized MM.DD.YY")
    week_end: str = Field(..., description="Week end, normalized MM.DD.YY")
    raw_date_range: str = Field(..., description="Section header text as written")
    agent_name: str = Field(..., description="Canonical agent name")
    metric_type: str = Field(..., description="Metric catalog label")
    metric_value: str = Field(
        ...,
        description="Value as written: hours, a count, or an 'incomplete | next week' pair",
    )
    notes: Optional[str] = Field(default=None, description="Row notes column")


class DailyInteraction(BaseModel):
    """
    One member interaction logged on a given day.

    member_name == "NO CALLS" is the sentinel for a day without interactions
    and carries an empty issue description.
    """
    row_number: int = Field(..., ge=1, description="1-based source row number")
    interaction_date: str = Field(..., description="Interaction date, normalized MM.DD.YY")
    member_name: str = Field(..., description="Cleaned member name or NO CALLS")
    issue_description: str = Field(default="", description="Free-text issue")
    notes: Optional[str] = Field(default=None, description="Row notes column")


class AfterHoursCall(BaseModel):
    """One call logged by the after-hours answering service."""
    row_number: int = Field(..., ge=1, description="1-based source row number")
    raw_timestamp: str = Field(..., description="Timestamp as written, e.g. 'Dec 5, 2024, 11:45:00 pm'")
    member_name_with_phone: str = Field(default="", description="Caller cell as written")
    member_name: str = Field(..., description="Caller name without the phone suffix")
    phone_number: str = Field(default="", description="Digits from the phone suffix, if any")
    notes: Optional[str] = Field(default=None, description="Call notes")


TypedRecord = Union[WeeklyMetric, DailyInteraction, AfterHoursCall]


# =============================================================================
# Validation
# =============================================================================


class ValidationVerdict(BaseModel):
    """
    Verdict for a single record.

    Any error rejects the record; warnings never do.
    """
    model_config = ConfigDict(frozen=True)

    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def valid(self) -> bool:
        return not self.errors


class RowError(BaseModel):
    """
    Row-level (or batch-level, row_number == 0) error reported on a batch.
    """
    model_config = ConfigDict(frozen=True)

    row_number: int = Field(..., ge=0, description="Source row; 0 for batch-level errors")
    message: str = Field(..., description="Joined validation reasons")
    offending_record: Optional[Dict[str, Any]] = Field(
        default=None,
        description="The rejected record, when one exists",
    )


class RowWarning(BaseModel):
    """Non-blocking data-quality signal attached to an accepted record."""
    model_config = ConfigDict(frozen=True)

    row_number: int = Field(..., ge=1)
    message: str


# =============================================================================
# Analytics helpers
# =============================================================================


class AgentScore(BaseModel):
    agent: str
    score: int = Field(..., ge=0, le=100)


class IssueCount(BaseModel):
    issue: str
    count: int = Field(..., ge=0)


class DailyVolume(BaseModel):
    date: str
    count: int = Field(..., ge=0)


class CommonIssue(BaseModel):
    """Issue category seen at least a minimum number of times."""
    issue: str
    category: str
    count: int = Field(..., ge=0)
    urgency: IssueUrgency


class CategoryTrend(BaseModel):
    total: int = Field(..., ge=0)
    avg_per_day: float = Field(..., ge=0.0)
    trend: TrendDirection


class CallDuplicate(BaseModel):
    """Two calls from the same member close enough together to be one event."""
    first: AfterHoursCall
    second: AfterHoursCall
    minutes_apart: float = Field(..., ge=0.0)


class CallerPriority(BaseModel):
    member: str
    call_count: int = Field(..., ge=2)
    avg_urgency: float


class CallsByDate(BaseModel):
    date: str
    count: int = Field(..., ge=0)
    calls: List[AfterHoursCall] = Field(default_factory=list)


class HourBucket(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    count: int = Field(..., ge=0)
    label: str


class WeekdayBucket(BaseModel):
    day: str
    count: int = Field(..., ge=0)


class ResponsePatterns(BaseModel):
    hour_distribution: List[HourBucket] = Field(default_factory=list)
    day_of_week_distribution: List[WeekdayBucket] = Field(default_factory=list)
    peak_times: List[str] = Field(default_factory=list)


# =============================================================================
# Per-family Summaries
# =============================================================================


class WeeklyMetricsSummary(BaseModel):
    family: ReportFamily = ReportFamily.WEEKLY
    total_weeks: int = Field(..., ge=0)
    date_ranges: List[str] = Field(default_factory=list)
    agents: List[str] = Field(default_factory=list)
    metrics: List[str] = Field(default_factory=list)
    total_members: int = Field(..., ge=0)
    total_phone_hours: float = Field(..., ge=0.0)
    total_tasks: int = Field(..., ge=0)
    top_performers: List[AgentScore] = Field(default_factory=list)


class DailyInteractionsSummary(BaseModel):
    family: ReportFamily = ReportFamily.DAILY
    total_interactions: int = Field(..., ge=0)
    total_days: int = Field(..., ge=0)
    no_calls_days: int = Field(..., ge=0)
    issue_categories: Dict[str, int] = Field(default_factory=dict)
    top_issues: List[IssueCount] = Field(default_factory=list)
    category_trends: Dict[str, CategoryTrend] = Field(default_factory=dict)


class AfterHoursSummary(BaseModel):
    family: ReportFamily = ReportFamily.AFTER_HOURS
    total_calls: int = Field(..., ge=0)
    weekend_calls: int = Field(..., ge=0)
    late_night_calls: int = Field(..., ge=0)
    early_morning_calls: int = Field(..., ge=0)
    avg_calls_per_day: float = Field(..., ge=0.0)
    peak_hour: int = Field(..., ge=0, le=23)
    duplicate_calls: int = Field(default=0, ge=0)


FamilySummary = Union[WeeklyMetricsSummary, DailyInteractionsSummary, AfterHoursSummary]


# =============================================================================
# Upload Models
# =============================================================================


class UploadMetadata(BaseModel):
    """Caller-supplied context for one upload."""
    file_name: str = Field(..., description="Original file name")
    uploaded_by: Optional[str] = Field(default=None, description="Uploader id or email")
    org_id: Optional[str] = Field(default=None, description="Owning organisation id")


class UploadBatch(BaseModel):
    """
    Outcome of one ingestion call.

    Created once per call and never mutated after the orchestrator returns it.
    On a completed batch rows_processed == rows_succeeded + rows_failed; a
    failed batch always reports rows_succeeded == 0.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "batch_id": "0f9c4d8e-3a61-4c1e-9f5e-0d2f3b1c6a77",
                "family": "weekly",
                "file_name": "concierge_weekly_dec.csv",
                "status": "finalized",
                "success": True,
                "message": None,
                "rows_processed": 2,
                "rows_succeeded": 2,
                "rows_failed": 0,
                "errors": [],
                "warnings": [],
            }
        }
    )

    batch_id: str = Field(..., description="Opaque unique batch token")
    family: Optional[ReportFamily] = Field(
        default=None,
        description="Family used for the run; None when detection failed",
    )
    file_name: str
    status: BatchStatus
    success: bool
    message: Optional[str] = Field(default=None, description="Top-level message for failed batches")
    rows_processed: int = Field(default=0, ge=0)
    rows_succeeded: int = Field(default=0, ge=0)
    rows_failed: int = Field(default=0, ge=0)
    errors: List[RowError] = Field(default_factory=list)
    warnings: List[RowWarning] = Field(default_factory=list)
    summary: Optional[FamilySummary] = None


# =============================================================================
# Ingestion Rules
# =============================================================================


class IngestionRules(BaseModel):
    """
    Organisation conventions and data-quality thresholds for one run.

    The transformers, validators and summarizers take their knobs from this
    value instead of reading settings themselves, so they stay pure. Built
    from Settings by the orchestrator when the caller supplies none.
    """
    model_config = ConfigDict(frozen=True)

    known_agents: Tuple[str, ...] = ('Ace', 'Adam', 'Angee', 'Tupac', 'Leo', 'Julia')
    ignored_daily_names: Tuple[str, ...] = ('advisor',)
    business_hours_start: int = Field(default=8, ge=0, le=23)
    business_hours_end: int = Field(default=20, ge=1, le=24)
    max_weekly_phone_hours: float = Field(default=168.0, gt=0)
    max_members_attended: int = Field(default=1000, gt=0)
    duplicate_call_window_minutes: int = Field(default=30, ge=0)
    max_sheet_columns: int = Field(default=64, ge=3)
    persistence_timeout_seconds: float = Field(default=30.0, gt=0)

    @classmethod
    def from_settings(cls, settings: Any) -> "IngestionRules":
        return cls(
            known_agents=tuple(settings.known_agents),
            ignored_daily_names=tuple(settings.ignored_daily_names),
            business_hours_start=settings.business_hours_start,
            business_hours_end=settings.business_hours_end,
            max_weekly_phone_hours=settings.max_weekly_phone_hours,
            max_members_attended=settings.max_members_attended,
            duplicate_call_window_minutes=settings.duplicate_call_window_minutes,
            max_sheet_columns=settings.max_sheet_columns,
            persistence_timeout_seconds=settings.persistence_timeout_seconds,
        )
