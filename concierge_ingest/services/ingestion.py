"""
Concierge Report Ingestion Orchestrator

Single entry point for turning an uploaded concierge spreadsheet into staged
records and an UploadBatch.

State machine (BatchStatus):
    parsing -> transforming -> validating -> persisting -> finalized
with failed reachable from every step.

Failure model:
- Row-level issues never abort. A record that fails validation is reported
  as a RowError (and written to the store as a diagnostic); a warning is
  reported as a RowWarning and the record is still accepted.
- Batch-level issues always abort with status failed and rows_succeeded == 0:
  unreadable bytes, a sheet matching no family when auto-detecting, zero
  accepted records, or a store failure/timeout while persisting records or
  the batch summary.

Diagnostic writes are best-effort: a failing or slow diagnostic is logged and
never changes the batch outcome. Every other store call is bounded by
rules.persistence_timeout_seconds.

Usage:
    batch = await ingest(
        file_bytes,
        'auto',
        UploadMetadata(file_name='weekly_dec.csv', uploaded_by='ops@example.com'),
    )
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
import asyncio
import logging
import uuid

from concierge_ingest.core.config import get_settings
from concierge_ingest.models import (
    BatchStatus,
    DiagnosticSeverity,
    FamilySummary,
    IngestionRules,
    ReportFamily,
    RowError,
    RowWarning,
    TypedRecord,
    UploadBatch,
    UploadMetadata,
    ValidationVerdict,
)
from concierge_ingest.services.after_hours import (
    summarize_after_hours_calls,
    transform_after_hours_sheet,
    validate_after_hours_call,
)
from concierge_ingest.services.daily_interactions import (
    summarize_daily_interactions,
    transform_daily_sheet,
    validate_daily_interaction,
)
from concierge_ingest.services.format_detection import detect_format
from concierge_ingest.services.persistence import (
    ConciergeStore,
    PersistenceError,
    PostgresConciergeStore,
)
from concierge_ingest.services.sheet import RawSheet, SheetParseError, parse_sheet
from concierge_ingest.services.weekly_metrics import (
    summarize_weekly_metrics,
    transform_weekly_sheet,
    validate_weekly_metric,
)

logger = logging.getLogger(__name__)


AUTO_DETECT: str = 'auto'

NO_VALID_RECORDS_MESSAGE: str = "No valid records to insert"

UNKNOWN_FORMAT_MESSAGE: str = (
    "Could not detect report family: the sheet matches none of the weekly, "
    "daily or after-hours layouts"
)


# =============================================================================
# Family handlers
# =============================================================================

@dataclass(frozen=True)
class FamilyHandler:
    """Transformer, validator and summarizer for one report family."""
    transform: Callable[[RawSheet, IngestionRules], List[Any]]
    validate: Callable[[Any, IngestionRules], ValidationVerdict]
    summarize: Callable[[Sequence[Any], IngestionRules], FamilySummary]


FAMILY_HANDLERS: Dict[ReportFamily, FamilyHandler] = {
    ReportFamily.WEEKLY: FamilyHandler(
        transform=transform_weekly_sheet,
        validate=validate_weekly_metric,
        summarize=lambda records, rules: summarize_weekly_metrics(records),
    ),
    ReportFamily.DAILY: FamilyHandler(
        transform=transform_daily_sheet,
        validate=validate_daily_interaction,
        summarize=lambda records, rules: summarize_daily_interactions(records),
    ),
    ReportFamily.AFTER_HOURS: FamilyHandler(
        transform=transform_after_hours_sheet,
        validate=validate_after_hours_call,
        summarize=summarize_after_hours_calls,
    ),
}


def resolve_family(declared_family: Union[ReportFamily, str]) -> Optional[ReportFamily]:
    """
    Declared family as a ReportFamily, or None for 'auto'.

    Raises:
        ValueError: If the value is neither 'auto' nor a known family.
    """
    if isinstance(declared_family, ReportFamily):
        return declared_family
    if declared_family == AUTO_DETECT:
        return None
    return ReportFamily(declared_family)


# =============================================================================
# Helpers
# =============================================================================

def _failed_batch(
    batch_id: str,
    family: Optional[ReportFamily],
    metadata: UploadMetadata,
    message: str,
    rows_processed: int = 0,
    rows_failed: int = 0,
    errors: Optional[List[RowError]] = None,
    warnings: Optional[List[RowWarning]] = None,
) -> UploadBatch:
    return UploadBatch(
        batch_id=batch_id,
        family=family,
        file_name=metadata.file_name,
        status=BatchStatus.FAILED,
        success=False,
        message=message,
        rows_processed=rows_processed,
        rows_succeeded=0,
        rows_failed=rows_failed,
        errors=list(errors or []) + [RowError(row_number=0, message=message)],
        warnings=list(warnings or []),
        summary=None,
    )


async def _record_diagnostic(
    store: ConciergeStore,
    timeout: float,
    batch_id: str,
    family: Optional[ReportFamily],
    row_number: int,
    severity: DiagnosticSeverity,
    message: str,
    raw_record: Optional[Dict[str, Any]] = None,
) -> None:
    """Best-effort diagnostic write; failures are logged and dropped."""
    try:
        await asyncio.wait_for(
            store.record_diagnostic(
                batch_id, family, row_number, severity, message, raw_record
            ),
            timeout=timeout,
        )
    except (PersistenceError, asyncio.TimeoutError) as e:
        logger.warning(
            f"Failed to record diagnostic for batch {batch_id} row {row_number}: {e}"
        )


async def _discard_batch(
    store: ConciergeStore,
    timeout: float,
    batch_id: str,
    family: ReportFamily,
) -> None:
    try:
        await asyncio.wait_for(store.discard_batch(batch_id, family), timeout=timeout)
    except (PersistenceError, asyncio.TimeoutError) as e:
        logger.error(f"Failed to discard staged records for batch {batch_id}: {e}")


# =============================================================================
# Validation stage
# =============================================================================

@dataclass
class _Partition:
    accepted: List[TypedRecord]
    errors: List[RowError]
    warnings: List[RowWarning]


def partition_records(
    records: Sequence[TypedRecord],
    validate: Callable[[Any, IngestionRules], ValidationVerdict],
    rules: IngestionRules,
) -> _Partition:
    """Split records into accepted and rejected, keeping source order."""
    partition = _Partition(accepted=[], errors=[], warnings=[])
    for record in records:
        verdict = validate(record, rules)
        if verdict.valid:
            partition.accepted.append(record)
            partition.warnings.extend(
                RowWarning(row_number=record.row_number, message=w)
                for w in verdict.warnings
            )
        else:
            partition.errors.append(RowError(
                row_number=record.row_number,
                message='; '.join(verdict.errors),
                offending_record=record.model_dump(mode='json'),
            ))
    return partition


# =============================================================================
# MAIN INGESTION ORCHESTRATOR
# =============================================================================

async def ingest(
    file_bytes: bytes,
    declared_family: Union[ReportFamily, str],
    metadata: UploadMetadata,
    store: Optional[ConciergeStore] = None,
    rules: Optional[IngestionRules] = None,
) -> UploadBatch:
    """
    Ingest one concierge spreadsheet upload.

    Args:
        file_bytes: Raw delimited-text bytes.
        declared_family: A ReportFamily (or its value), or 'auto' to detect.
        metadata: Uploader, file name and organisation.
        store: Persistence collaborator; PostgresConciergeStore when omitted.
        rules: Conventions and thresholds; built from Settings when omitted.

    Returns:
        UploadBatch in status finalized or failed. Never raises for bad input
        or store failures.

    Raises:
        ValueError: If declared_family is neither 'auto' nor a known family.
    """
    family = resolve_family(declared_family)
    if rules is None:
        rules = IngestionRules.from_settings(get_settings())
    if store is None:
        settings = get_settings()
        store = PostgresConciergeStore(
            default_org_id=settings.default_org_id,
            default_uploaded_by=settings.default_uploaded_by,
        )
    timeout = rules.persistence_timeout_seconds

    batch_id = str(uuid.uuid4())
    logger.info(
        f"Starting ingestion batch {batch_id} for {metadata.file_name} "
        f"(family: {family.value if family else AUTO_DETECT})"
    )

    async def fail(message: str, batch_family: Optional[ReportFamily], **counts) -> UploadBatch:
        logger.error(f"Batch {batch_id} failed: {message}")
        await _record_diagnostic(
            store, timeout, batch_id, batch_family, 0, DiagnosticSeverity.ERROR, message
        )
        return _failed_batch(batch_id, batch_family, metadata, message, **counts)

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------
    logger.debug(f"Batch {batch_id} -> {BatchStatus.PARSING.value}")
    try:
        sheet = parse_sheet(file_bytes, max_columns=rules.max_sheet_columns)
    except SheetParseError as e:
        return await fail(f"CSV parsing failed: {e}", family)

    if family is None:
        family = detect_format(sheet, rules.known_agents).family
        if family is None:
            return await fail(UNKNOWN_FORMAT_MESSAGE, None)

    handler = FAMILY_HANDLERS[family]

    # -------------------------------------------------------------------------
    # Transforming
    # -------------------------------------------------------------------------
    logger.debug(f"Batch {batch_id} -> {BatchStatus.TRANSFORMING.value}")
    records = handler.transform(sheet, rules)
    rows_processed = len(records)

    # -------------------------------------------------------------------------
    # Validating
    # -------------------------------------------------------------------------
    logger.debug(f"Batch {batch_id} -> {BatchStatus.VALIDATING.value}")
    partition = partition_records(records, handler.validate, rules)
    rows_failed = len(partition.errors)

    for error in partition.errors:
        await _record_diagnostic(
            store, timeout, batch_id, family, error.row_number,
            DiagnosticSeverity.ERROR, error.message, error.offending_record,
        )
    for warning in partition.warnings:
        await _record_diagnostic(
            store, timeout, batch_id, family, warning.row_number,
            DiagnosticSeverity.WARNING, warning.message,
        )

    logger.info(
        f"Batch {batch_id}: {rows_processed} records, "
        f"{len(partition.accepted)} accepted, {rows_failed} rejected, "
        f"{len(partition.warnings)} warnings"
    )

    counts = dict(
        rows_processed=rows_processed,
        rows_failed=rows_failed,
        errors=partition.errors,
        warnings=partition.warnings,
    )

    if not partition.accepted:
        return await fail(NO_VALID_RECORDS_MESSAGE, family, **counts)

    # -------------------------------------------------------------------------
    # Persisting
    # -------------------------------------------------------------------------
    logger.debug(f"Batch {batch_id} -> {BatchStatus.PERSISTING.value}")
    summary = handler.summarize(partition.accepted, rules)

    try:
        await asyncio.wait_for(
            store.insert_records(family, batch_id, partition.accepted, metadata),
            timeout=timeout,
        )
    except PersistenceError as e:
        return await fail(str(e), family, **counts)
    except asyncio.TimeoutError:
        # A timed-out insert may still commit
        await _discard_batch(store, timeout, batch_id, family)
        return await fail(
            f"Database insert failed: timed out after {timeout} seconds", family, **counts
        )

    try:
        await asyncio.wait_for(
            store.record_batch_summary(
                batch_id, family, summary, affected_rows=len(partition.accepted)
            ),
            timeout=timeout,
        )
    except (PersistenceError, asyncio.TimeoutError) as e:
        await _discard_batch(store, timeout, batch_id, family)
        message = str(e) or f"Summary write timed out after {timeout} seconds"
        return await fail(message, family, **counts)

    # -------------------------------------------------------------------------
    # Finalized
    # -------------------------------------------------------------------------
    logger.debug(f"Batch {batch_id} -> {BatchStatus.FINALIZED.value}")
    logger.info(
        f"Ingestion complete for batch {batch_id}: "
        f"{len(partition.accepted)} of {rows_processed} records staged"
    )

    return UploadBatch(
        batch_id=batch_id,
        family=family,
        file_name=metadata.file_name,
        status=BatchStatus.FINALIZED,
        success=True,
        message=None,
        rows_processed=rows_processed,
        rows_succeeded=len(partition.accepted),
        rows_failed=rows_failed,
        errors=partition.errors,
        warnings=partition.warnings,
        summary=summary,
    )


__all__ = [
    'AUTO_DETECT',
    'NO_VALID_RECORDS_MESSAGE',
    'UNKNOWN_FORMAT_MESSAGE',
    'FamilyHandler',
    'FAMILY_HANDLERS',
    'resolve_family',
    'partition_records',
    'ingest',
]
