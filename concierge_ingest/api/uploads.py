"""
FastAPI router module for concierge report uploads.

Thin adapter over the ingestion pipeline:
- POST /concierge/uploads: ingest one spreadsheet (multipart upload)
- GET /concierge/uploads/history: recent completed uploads
- GET /concierge/uploads/{batch_id}/errors: per-row diagnostics of a batch
- GET /concierge/templates: human-facing family descriptions

A failed batch is still a 200 response carrying UploadBatch(success=False);
HTTP errors are reserved for malformed requests and store outages on the read
endpoints.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile
from pydantic import BaseModel, Field

from concierge_ingest.core.dependencies import SettingsDep, StoreDep
from concierge_ingest.models import IngestionRules, ReportFamily, UploadBatch, UploadMetadata
from concierge_ingest.services.ingestion import AUTO_DETECT, ingest, resolve_family
from concierge_ingest.services.persistence import PersistenceError
from concierge_ingest.sql import DEFAULT_HISTORY_LIMIT


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/concierge", tags=["concierge"])


# =============================================================================
# Local Pydantic Models for API Responses
# =============================================================================

class UploadHistoryResponse(BaseModel):
    uploads: List[Dict[str, Any]] = Field(default_factory=list)


class UploadErrorsResponse(BaseModel):
    batch_id: str
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class UploadTemplatesResponse(BaseModel):
    templates: List[Dict[str, Any]] = Field(default_factory=list)


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/uploads", response_model=UploadBatch)
async def upload_report(
    store: StoreDep,
    settings: SettingsDep,
    file: UploadFile = File(..., description="Concierge report as CSV"),
    family: str = Form(AUTO_DETECT, description="weekly, daily, after_hours or auto"),
    uploaded_by: Optional[str] = Form(None),
    org_id: Optional[str] = Form(None),
) -> UploadBatch:
    """
    Ingest one concierge spreadsheet.

    Returns the UploadBatch; check success and errors for the outcome.
    """
    try:
        resolve_family(family)
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail=f"Invalid family '{family}'. Must be one of: "
                   f"{', '.join([AUTO_DETECT] + [f.value for f in ReportFamily])}",
        )

    content = await file.read()
    metadata = UploadMetadata(
        file_name=file.filename or 'upload.csv',
        uploaded_by=uploaded_by,
        org_id=org_id,
    )

    batch = await ingest(
        content,
        family,
        metadata,
        store=store,
        rules=IngestionRules.from_settings(settings),
    )
    logger.info(
        f"Upload {batch.batch_id} ({metadata.file_name}): "
        f"success={batch.success} rows_succeeded={batch.rows_succeeded}"
    )
    return batch


@router.get("/uploads/history", response_model=UploadHistoryResponse)
async def upload_history(
    store: StoreDep,
    family: Optional[ReportFamily] = Query(None, description="Filter by report family"),
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=200),
) -> UploadHistoryResponse:
    try:
        uploads = await store.list_upload_history(family=family, limit=limit)
    except PersistenceError as e:
        logger.error(f"Failed to load upload history: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return UploadHistoryResponse(uploads=uploads)


@router.get("/uploads/{batch_id}/errors", response_model=UploadErrorsResponse)
async def upload_errors(batch_id: str, store: StoreDep) -> UploadErrorsResponse:
    try:
        errors = await store.list_upload_errors(batch_id)
    except PersistenceError as e:
        logger.error(f"Failed to load errors for batch {batch_id}: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return UploadErrorsResponse(batch_id=batch_id, errors=errors)


@router.get("/templates", response_model=UploadTemplatesResponse)
async def upload_templates(store: StoreDep) -> UploadTemplatesResponse:
    try:
        templates = await store.list_upload_templates()
    except PersistenceError as e:
        logger.error(f"Failed to load upload templates: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return UploadTemplatesResponse(templates=templates)
