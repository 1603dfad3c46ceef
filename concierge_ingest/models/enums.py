"""
Enumeration definitions for the concierge ingestion backend.

All enums inherit from both `str` and `Enum` so they serialize cleanly through
Pydantic models and into the staging tables.
"""

from enum import Enum
from typing import Optional


class ReportFamily(str, Enum):
    """
    Structurally distinct concierge spreadsheet families.

    Each family selects its own transformer, validator and summarizer, and
    is fixed for the whole run once declared or detected:
    - weekly: agent-performance metrics, date-range sections, agent columns
    - daily: member interaction log, one date header per day
    - after_hours: machine-generated after-hours call log
    """
    WEEKLY = "weekly"
    DAILY = "daily"
    AFTER_HOURS = "after_hours"


class DetectedFormat(str, Enum):
    """
    Outcome of structural family detection.

    UNKNOWN means no family fingerprint matched; the upload cannot proceed.
    """
    WEEKLY = "weekly"
    DAILY = "daily"
    AFTER_HOURS = "after_hours"
    UNKNOWN = "unknown"

    @property
    def family(self) -> Optional[ReportFamily]:
        """The matching ReportFamily, or None for UNKNOWN."""
        if self is DetectedFormat.UNKNOWN:
            return None
        return ReportFamily(self.value)


class MetricType(str, Enum):
    """
    Fixed catalog of weekly metric kinds.

    The value is the label exactly as it appears in the first column of a
    weekly sheet metric row.
    """
    MEMBERS_ATTENDED = "Members attended to"
    PHONE_TIME = "Phone Time"
    CRM_TASKS = "CRM Tasks"
    INCOMPLETE_NEXT_WEEK_TASKS = "Incomplete/Next Week Tasks"
    RX_REQUESTS = "RX Requests"
    IMAGING_REQUESTS = "Imaging Requests"
    LAB_REQUESTS = "Lab Requests"
    APPT_REQUESTS = "Appt Requests"


class DiagnosticSeverity(str, Enum):
    """Severity attached to a diagnostic written to the store."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class BatchStatus(str, Enum):
    """
    Orchestrator state machine for one upload.

    parsing -> transforming -> validating -> persisting -> finalized, with
    failed reachable from any step. Only finalized and failed are ever
    returned to the caller.
    """
    PARSING = "parsing"
    TRANSFORMING = "transforming"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    FINALIZED = "finalized"
    FAILED = "failed"


class IssueUrgency(str, Enum):
    """Urgency inferred from a daily interaction's issue description."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TrendDirection(str, Enum):
    """Direction of an issue category between the two halves of a period."""
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class RowKind(str, Enum):
    """
    What a transformer makes of one sheet row.

    Every row is exactly one of these: a marker opens or re-labels a section,
    a data row may emit records, and a dropped row is ignored.
    """
    MARKER = "marker"
    DATA = "data"
    DROPPED = "dropped"
