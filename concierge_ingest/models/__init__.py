"""
Package initialization file for concierge ingestion models.

Re-exports all Pydantic schemas and enumerations from schemas.py and enums.py
so other modules can import them from concierge_ingest.models directly.

Usage:
    from concierge_ingest.models import (
        ReportFamily,
        WeeklyMetric,
        UploadBatch,
        # ... etc
    )
"""

# =============================================================================
# Enums
# =============================================================================

from concierge_ingest.models.enums import (
    ReportFamily,
    DetectedFormat,
    MetricType,
    DiagnosticSeverity,
    BatchStatus,
    IssueUrgency,
    TrendDirection,
    RowKind,
)


# =============================================================================
# Schemas
# =============================================================================

from concierge_ingest.models.schemas import (
    # -------------------------------------------------------------------------
    # Typed records
    # -------------------------------------------------------------------------
    WeeklyMetric,
    DailyInteraction,
    AfterHoursCall,
    TypedRecord,

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------
    ValidationVerdict,
    RowError,
    RowWarning,

    # -------------------------------------------------------------------------
    # Analytics helpers
    # -------------------------------------------------------------------------
    AgentScore,
    IssueCount,
    DailyVolume,
    CommonIssue,
    CategoryTrend,
    CallDuplicate,
    CallerPriority,
    CallsByDate,
    HourBucket,
    WeekdayBucket,
    ResponsePatterns,

    # -------------------------------------------------------------------------
    # Summaries
    # -------------------------------------------------------------------------
    WeeklyMetricsSummary,
    DailyInteractionsSummary,
    AfterHoursSummary,
    FamilySummary,

    # -------------------------------------------------------------------------
    # Uploads
    # -------------------------------------------------------------------------
    UploadMetadata,
    UploadBatch,
    IngestionRules,
)


__all__ = [
    # Enums
    'ReportFamily',
    'DetectedFormat',
    'MetricType',
    'DiagnosticSeverity',
    'BatchStatus',
    'IssueUrgency',
    'TrendDirection',
    'RowKind',
    # Typed records
    'WeeklyMetric',
    'DailyInteraction',
    'AfterHoursCall',
    'TypedRecord',
    # Validation
    'ValidationVerdict',
    'RowError',
    'RowWarning',
    # Analytics helpers
    'AgentScore',
    'IssueCount',
    'DailyVolume',
    'CommonIssue',
    'CategoryTrend',
    'CallDuplicate',
    'CallerPriority',
    'CallsByDate',
    'HourBucket',
    'WeekdayBucket',
    'ResponsePatterns',
    # Summaries
    'WeeklyMetricsSummary',
    'DailyInteractionsSummary',
    'AfterHoursSummary',
    'FamilySummary',
    # Uploads
    'UploadMetadata',
    'UploadBatch',
    'IngestionRules',
]
