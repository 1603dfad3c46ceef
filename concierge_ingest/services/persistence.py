"""
Persistence collaborator for the concierge ingestion pipeline.

The orchestrator talks to storage only through the ConciergeStore protocol:

- insert_records: bulk insert of accepted records for one batch (atomic)
- record_diagnostic: one audit row for a rejected/warned record, or for a
  batch-level failure when row_number == 0
- record_batch_summary: the batch outcome with its family summary
- discard_batch: remove every staged record of a batch

PostgresConciergeStore implements the protocol over the Supabase staging and
audit tables with asyncpg. Every database failure surfaces as a
PersistenceError so the orchestrator never has to know about asyncpg.

Concurrent batches are isolated by their unique upload_batch_id; the store
holds no per-batch state of its own.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple
import json
import logging

import asyncpg

from concierge_ingest.core.database import get_db_pool
from concierge_ingest.models import (
    AfterHoursCall,
    DailyInteraction,
    DiagnosticSeverity,
    FamilySummary,
    ReportFamily,
    TypedRecord,
    UploadMetadata,
    WeeklyMetric,
)
from concierge_ingest.sql import (
    CHECK_UPLOAD_COMPLETE,
    CHECK_UPLOAD_FAILED,
    DATA_QUALITY_INSERT_QUERY,
    DEFAULT_HISTORY_LIMIT,
    UPLOAD_ERROR_INSERT_QUERY,
    UPLOAD_ERRORS_QUERY,
    UPLOAD_TEMPLATES_QUERY,
    get_staging_delete_query,
    get_staging_insert_query,
    get_upload_history_query,
)

logger = logging.getLogger(__name__)


DEFAULT_ORG_ID: str = '00000000-0000-0000-0000-000000000000'
DEFAULT_UPLOADED_BY: str = 'system'

DATABASE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class PersistenceError(RuntimeError):
    """A store call failed; the batch that issued it cannot be finalized."""


class ConciergeStore(Protocol):
    """Storage surface the orchestrator depends on."""

    async def insert_records(
        self,
        family: ReportFamily,
        batch_id: str,
        records: Sequence[TypedRecord],
        metadata: UploadMetadata,
    ) -> int:
        ...

    async def record_diagnostic(
        self,
        batch_id: str,
        family: Optional[ReportFamily],
        row_number: int,
        severity: DiagnosticSeverity,
        message: str,
        raw_record: Optional[Dict[str, Any]] = None,
    ) -> None:
        ...

    async def record_batch_summary(
        self,
        batch_id: str,
        family: ReportFamily,
        summary: FamilySummary,
        affected_rows: int = 0,
    ) -> None:
        ...

    async def discard_batch(self, batch_id: str, family: ReportFamily) -> None:
        ...


# =============================================================================
# Row builders
# =============================================================================

def _family_values(record: TypedRecord) -> Tuple[Any, ...]:
    if isinstance(record, WeeklyMetric):
        return (
            record.week_start,
            record.week_end,
            record.raw_date_range,
            record.agent_name,
            record.metric_type,
            record.metric_value,
            record.notes,
        )
    if isinstance(record, DailyInteraction):
        return (
            record.interaction_date,
            record.member_name,
            record.issue_description or None,
            record.notes,
        )
    if isinstance(record, AfterHoursCall):
        return (
            record.raw_timestamp,
            record.member_name_with_phone,
            record.member_name,
            record.phone_number or None,
            record.notes,
        )
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def build_staging_rows(
    batch_id: str,
    records: Sequence[TypedRecord],
    metadata: UploadMetadata,
    default_org_id: str = DEFAULT_ORG_ID,
    default_uploaded_by: str = DEFAULT_UPLOADED_BY,
) -> List[Tuple[Any, ...]]:
    """
    Positional parameter tuples for get_staging_insert_query().

    Missing org_id and uploaded_by fall back to the configured defaults.
    """
    base = (
        metadata.org_id or default_org_id,
        metadata.uploaded_by or default_uploaded_by,
        batch_id,
        metadata.file_name,
    )
    return [base + (record.row_number,) + _family_values(record) for record in records]


def _json_or_none(value: Optional[Dict[str, Any]]) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


def _family_value(family: Optional[ReportFamily]) -> Optional[str]:
    return family.value if family is not None else None


# =============================================================================
# PostgreSQL store
# =============================================================================

class PostgresConciergeStore:
    """
    ConciergeStore backed by the Supabase PostgreSQL database.

    Args:
        pool: asyncpg pool to use; the shared application pool when omitted.
        default_org_id: org_id written when an upload carries none.
        default_uploaded_by: uploaded_by written when an upload carries none.
    """

    def __init__(
        self,
        pool: Optional[asyncpg.Pool] = None,
        default_org_id: str = DEFAULT_ORG_ID,
        default_uploaded_by: str = DEFAULT_UPLOADED_BY,
    ):
        self._pool = pool
        self.default_org_id = default_org_id
        self.default_uploaded_by = default_uploaded_by

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            self._pool = await get_db_pool()
        return self._pool

    async def insert_records(
        self,
        family: ReportFamily,
        batch_id: str,
        records: Sequence[TypedRecord],
        metadata: UploadMetadata,
    ) -> int:
        """
        Insert accepted records into the family's staging table.

        All rows go in one transaction: either every record of the batch is
        staged or none is.

        Returns:
            Number of rows inserted.

        Raises:
            PersistenceError: If the insert fails.
        """
        if not records:
            return 0

        rows = build_staging_rows(
            batch_id, records, metadata,
            default_org_id=self.default_org_id,
            default_uploaded_by=self.default_uploaded_by,
        )
        query = get_staging_insert_query(family.value)

        try:
            pool = await self._get_pool()
            async with pool.acquire() as conn:
                async with conn.transaction():
                    await conn.executemany(query, rows)
        except DATABASE_ERRORS as e:
            raise PersistenceError(f"Database insert failed: {e}") from e

        logger.info(f"Staged {len(rows)} {family.value} records for batch {batch_id}")
        return len(rows)

    async def record_diagnostic(
        self,
        batch_id: str,
        family: Optional[ReportFamily],
        row_number: int,
        severity: DiagnosticSeverity,
        message: str,
        raw_record: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Write one audit row.

        Row-level diagnostics go to concierge_upload_errors; a row 0
        diagnostic is a batch failure and goes to concierge_data_quality_log
        as upload_failed.

        Raises:
            PersistenceError: If the write fails.
        """
        try:
            pool = await self._get_pool()
            async with pool.acquire() as conn:
                if row_number == 0:
                    await conn.execute(
                        DATA_QUALITY_INSERT_QUERY,
                        batch_id,
                        _family_value(family),
                        CHECK_UPLOAD_FAILED,
                        severity.value,
                        message,
                        0,
                        _json_or_none(raw_record),
                    )
                else:
                    await conn.execute(
                        UPLOAD_ERROR_INSERT_QUERY,
                        batch_id,
                        _family_value(family),
                        row_number,
                        severity.value,
                        message,
                        _json_or_none(raw_record),
                    )
        except DATABASE_ERRORS as e:
            raise PersistenceError(f"Diagnostic write failed: {e}") from e

    async def record_batch_summary(
        self,
        batch_id: str,
        family: ReportFamily,
        summary: FamilySummary,
        affected_rows: int = 0,
    ) -> None:
        """
        Log a completed upload with its summary.

        Raises:
            PersistenceError: If the write fails.
        """
        message = f"Successfully uploaded {affected_rows} {family.value} records"
        try:
            pool = await self._get_pool()
            async with pool.acquire() as conn:
                await conn.execute(
                    DATA_QUALITY_INSERT_QUERY,
                    batch_id,
                    family.value,
                    CHECK_UPLOAD_COMPLETE,
                    DiagnosticSeverity.INFO.value,
                    message,
                    affected_rows,
                    summary.model_dump_json(),
                )
        except DATABASE_ERRORS as e:
            raise PersistenceError(f"Summary write failed: {e}") from e

    async def discard_batch(self, batch_id: str, family: ReportFamily) -> None:
        """
        Delete every staged row of a batch.

        Raises:
            PersistenceError: If the delete fails.
        """
        try:
            pool = await self._get_pool()
            async with pool.acquire() as conn:
                await conn.execute(get_staging_delete_query(family.value), batch_id)
        except DATABASE_ERRORS as e:
            raise PersistenceError(f"Batch discard failed: {e}") from e

        logger.info(f"Discarded staged {family.value} records for batch {batch_id}")

    # -------------------------------------------------------------------------
    # Read side (upload history for the UI)
    # -------------------------------------------------------------------------

    async def list_upload_history(
        self,
        family: Optional[ReportFamily] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> List[Dict[str, Any]]:
        """Completed uploads, newest first."""
        query, params = get_upload_history_query(_family_value(family), limit)
        try:
            pool = await self._get_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(query, *params)
        except DATABASE_ERRORS as e:
            raise PersistenceError(f"Upload history query failed: {e}") from e
        return [dict(row) for row in rows]

    async def list_upload_errors(self, batch_id: str) -> List[Dict[str, Any]]:
        """Per-row diagnostics of one batch, by row number."""
        try:
            pool = await self._get_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(UPLOAD_ERRORS_QUERY, batch_id)
        except DATABASE_ERRORS as e:
            raise PersistenceError(f"Upload errors query failed: {e}") from e
        return [dict(row) for row in rows]

    async def list_upload_templates(self) -> List[Dict[str, Any]]:
        """Active upload templates, one per family."""
        try:
            pool = await self._get_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(UPLOAD_TEMPLATES_QUERY)
        except DATABASE_ERRORS as e:
            raise PersistenceError(f"Upload templates query failed: {e}") from e
        return [dict(row) for row in rows]


__all__ = [
    'PersistenceError',
    'ConciergeStore',
    'PostgresConciergeStore',
    'build_staging_rows',
]
