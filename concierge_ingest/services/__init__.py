"""
Concierge Ingestion Services

Business logic for the concierge report pipeline. Everything except the
orchestrator and the persistence store is pure and synchronous.

Services:
- sheet: delimited-text bytes -> RawSheet
- parsers: cell-level date, duration, timestamp and phone parsers
- classifiers: row predicates and keyword catalogs
- weekly_metrics / daily_interactions / after_hours: per-family transformer,
  validator and summarizer
- format_detection: ordered family fingerprints
- persistence: ConciergeStore protocol and its PostgreSQL implementation
- ingestion: the orchestrator (ingest)
"""

# =============================================================================
# Orchestrator
# =============================================================================

from concierge_ingest.services.ingestion import (
    ingest,
    resolve_family,
    partition_records,
    AUTO_DETECT,
    NO_VALID_RECORDS_MESSAGE,
)

# =============================================================================
# Sheet reader & parsers
# =============================================================================

from concierge_ingest.services.sheet import (
    RawSheet,
    SheetParseError,
    parse_sheet,
)
from concierge_ingest.services.parsers import (
    parse_weekly_date_range,
    parse_phone_time_duration,
    parse_incomplete_tasks_pair,
    parse_daily_interaction_date,
    parse_after_hours_timestamp,
    extract_member_name_and_phone,
    format_phone_number,
)

# =============================================================================
# Family detection
# =============================================================================

from concierge_ingest.services.format_detection import detect_format

# =============================================================================
# Per-family transformers, validators and summarizers
# =============================================================================

from concierge_ingest.services.weekly_metrics import (
    transform_weekly_sheet,
    validate_weekly_metric,
    summarize_weekly_metrics,
    identify_top_performers,
)
from concierge_ingest.services.daily_interactions import (
    transform_daily_sheet,
    validate_daily_interaction,
    summarize_daily_interactions,
    calculate_daily_volume,
    identify_common_issues,
    analyze_trends_by_category,
)
from concierge_ingest.services.after_hours import (
    transform_after_hours_sheet,
    validate_after_hours_call,
    summarize_after_hours_calls,
    group_calls_by_date,
    identify_high_priority_callers,
    analyze_response_patterns,
    detect_call_duplicates,
)

# =============================================================================
# Persistence
# =============================================================================

from concierge_ingest.services.persistence import (
    ConciergeStore,
    PersistenceError,
    PostgresConciergeStore,
)


__all__ = [
    # Orchestrator
    'ingest',
    'resolve_family',
    'partition_records',
    'AUTO_DETECT',
    'NO_VALID_RECORDS_MESSAGE',
    # Sheet reader & parsers
    'RawSheet',
    'SheetParseError',
    'parse_sheet',
    'parse_weekly_date_range',
    'parse_phone_time_duration',
    'parse_incomplete_tasks_pair',
    'parse_daily_interaction_date',
    'parse_after_hours_timestamp',
    'extract_member_name_and_phone',
    'format_phone_number',
    # Detection
    'detect_format',
    # Weekly
    'transform_weekly_sheet',
    'validate_weekly_metric',
    'summarize_weekly_metrics',
    'identify_top_performers',
    # Daily
    'transform_daily_sheet',
    'validate_daily_interaction',
    'summarize_daily_interactions',
    'calculate_daily_volume',
    'identify_common_issues',
    'analyze_trends_by_category',
    # After-hours
    'transform_after_hours_sheet',
    'validate_after_hours_call',
    'summarize_after_hours_calls',
    'group_calls_by_date',
    'identify_high_priority_callers',
    'analyze_response_patterns',
    'detect_call_duplicates',
    # Persistence
    'ConciergeStore',
    'PersistenceError',
    'PostgresConciergeStore',
]
