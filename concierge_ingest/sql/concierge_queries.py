"""
Concierge Queries Module.

Parameterized PostgreSQL statements for the concierge staging tables and the
upload audit tables. Accepted records land in one staging table per report
family with processing_status = 'pending'; downstream jobs promote them.

Tables:
- stg_concierge_weekly_metrics: one row per agent per metric per week
- stg_concierge_daily_interactions: one row per member interaction
- stg_concierge_after_hours: one row per after-hours call
- concierge_upload_errors: per-row diagnostics (rejections and warnings)
- concierge_data_quality_log: batch outcome (upload_complete / upload_failed)
- concierge_upload_templates: human-facing family descriptions for the UI

All statements use asyncpg positional parameters ($1, $2, ...).
"""

from typing import Dict, List, Optional, Tuple


# =============================================================================
# CONSTANTS
# =============================================================================

STAGING_TABLES: Dict[str, str] = {
    'weekly': 'stg_concierge_weekly_metrics',
    'daily': 'stg_concierge_daily_interactions',
    'after_hours': 'stg_concierge_after_hours',
}

# Columns shared by every staging table, in insert order
STAGING_BASE_COLUMNS: List[str] = [
    'org_id',
    'uploaded_by',
    'upload_batch_id',
    'file_name',
    'row_number',
]

STAGING_FAMILY_COLUMNS: Dict[str, List[str]] = {
    'weekly': [
        'week_start_date',
        'week_end_date',
        'date_range',
        'agent_name',
        'metric_type',
        'metric_value',
        'notes',
    ],
    'daily': [
        'interaction_date',
        'member_name',
        'issue_description',
        'notes',
    ],
    'after_hours': [
        'call_timestamp',
        'member_name_with_phone',
        'member_name',
        'phone_number',
        'notes',
    ],
}

PENDING_STATUS: str = 'pending'

CHECK_UPLOAD_COMPLETE: str = 'upload_complete'
CHECK_UPLOAD_FAILED: str = 'upload_failed'

DEFAULT_HISTORY_LIMIT: int = 20


def _staging_table(family: str) -> str:
    try:
        return STAGING_TABLES[family]
    except KeyError:
        raise ValueError(f"Unknown report family: {family}") from None


def get_staging_columns(family: str) -> List[str]:
    """Insert column order for a family's staging table (without processing_status)."""
    _staging_table(family)
    return STAGING_BASE_COLUMNS + STAGING_FAMILY_COLUMNS[family]


# =============================================================================
# STAGING INSERT / DELETE
# =============================================================================

def get_staging_insert_query(family: str) -> str:
    """
    INSERT for one staged record; executed with executemany.

    Parameters follow get_staging_columns(family). processing_status and
    created_at are filled in by the statement.
    """
    table = _staging_table(family)
    columns = get_staging_columns(family)
    placeholders = ', '.join(f'${i}' for i in range(1, len(columns) + 1))
    return f"""
        INSERT INTO {table} (
            {', '.join(columns)},
            processing_status, created_at
        ) VALUES (
            {placeholders},
            '{PENDING_STATUS}', NOW()
        )
    """


def get_staging_delete_query(family: str) -> str:
    """DELETE every staged row of one batch. $1 = upload_batch_id."""
    table = _staging_table(family)
    return f"""
        DELETE FROM {table}
        WHERE upload_batch_id = $1
    """


# =============================================================================
# DIAGNOSTICS
# =============================================================================

UPLOAD_ERROR_INSERT_QUERY: str = """
    INSERT INTO concierge_upload_errors (
        upload_batch_id, subdepartment, row_number,
        error_type, error_message, row_data, created_at
    ) VALUES (
        $1, $2, $3, $4, $5, $6::jsonb, NOW()
    )
"""

DATA_QUALITY_INSERT_QUERY: str = """
    INSERT INTO concierge_data_quality_log (
        upload_batch_id, subdepartment, check_type,
        severity, message, affected_rows, details, created_at
    ) VALUES (
        $1, $2, $3, $4, $5, $6, $7::jsonb, NOW()
    )
"""


# =============================================================================
# READ QUERIES
# =============================================================================

def get_upload_history_query(
    family: Optional[str] = None,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> Tuple[str, list]:
    """
    Completed uploads, newest first.

    Returns:
        (query, params) ready for conn.fetch(query, *params).
    """
    params: list = [CHECK_UPLOAD_COMPLETE]
    family_filter = ''
    if family is not None:
        _staging_table(family)
        params.append(family)
        family_filter = f'AND subdepartment = ${len(params)}'
    params.append(limit)

    query = f"""
        SELECT
            id, upload_batch_id, subdepartment, check_type, severity,
            message, affected_rows, details, created_at
        FROM concierge_data_quality_log
        WHERE check_type = $1
        {family_filter}
        ORDER BY created_at DESC
        LIMIT ${len(params)}
    """
    return query, params


UPLOAD_ERRORS_QUERY: str = """
    SELECT
        id, upload_batch_id, subdepartment, row_number,
        error_type, error_message, row_data, created_at
    FROM concierge_upload_errors
    WHERE upload_batch_id = $1
    ORDER BY row_number
"""

UPLOAD_TEMPLATES_QUERY: str = """
    SELECT *
    FROM concierge_upload_templates
    WHERE is_active = TRUE
    ORDER BY subdepartment
"""


__all__ = [
    'STAGING_TABLES',
    'PENDING_STATUS',
    'CHECK_UPLOAD_COMPLETE',
    'CHECK_UPLOAD_FAILED',
    'DEFAULT_HISTORY_LIMIT',
    'get_staging_columns',
    'get_staging_insert_query',
    'get_staging_delete_query',
    'UPLOAD_ERROR_INSERT_QUERY',
    'DATA_QUALITY_INSERT_QUERY',
    'get_upload_history_query',
    'UPLOAD_ERRORS_QUERY',
    'UPLOAD_TEMPLATES_QUERY',
]
