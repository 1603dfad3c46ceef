"""
SQL Query Module for the concierge ingestion backend.

Re-exports the parameterized statements for the staging tables and the
upload audit tables so callers can import from concierge_ingest.sql.

Example usage:
    from concierge_ingest.sql import get_staging_insert_query, get_staging_columns

    query = get_staging_insert_query('weekly')
    await conn.executemany(query, rows)
"""

# =============================================================================
# CONCIERGE QUERIES - Staging tables and upload audit log
# =============================================================================

from concierge_ingest.sql.concierge_queries import (
    STAGING_TABLES,
    PENDING_STATUS,
    CHECK_UPLOAD_COMPLETE,
    CHECK_UPLOAD_FAILED,
    DEFAULT_HISTORY_LIMIT,
    get_staging_columns,
    get_staging_insert_query,
    get_staging_delete_query,
    UPLOAD_ERROR_INSERT_QUERY,
    DATA_QUALITY_INSERT_QUERY,
    get_upload_history_query,
    UPLOAD_ERRORS_QUERY,
    UPLOAD_TEMPLATES_QUERY,
)


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
