"""
Concierge Report Ingestion Package.

Batch ingestion pipeline for the concierge department's spreadsheet exports.
Accepts raw delimited-text bytes for one of three report families (weekly
agent metrics, daily member interactions, after-hours call logs), detects the
family when it is not declared, transforms rows into typed records, validates
each record, persists the survivors and returns an UploadBatch.

Subpackages:
    - api: FastAPI route handlers (thin adapter over the pipeline)
    - core: Configuration, database pool, and dependencies
    - models: Pydantic schemas and enums
    - services: Parsers, classifiers, per-family transformers, detector, orchestrator
    - sql: Parameterized SQL for the staging and diagnostics tables
"""

__version__ = "1.0.0"
