"""
FastAPI dependency injection module for the concierge ingestion backend.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_store: Returns the PostgreSQL-backed ConciergeStore
- SettingsDep / StoreDep: Annotated aliases for endpoint signatures

Tests swap the store with app.dependency_overrides[get_store], so no endpoint
ever touches the database directly.

Usage Examples:
    @router.get("/uploads/history")
    async def upload_history(store: StoreDep, settings: SettingsDep):
        return await store.list_upload_history()
"""

from typing import Annotated

from fastapi import Depends

from concierge_ingest.core.config import Settings, get_settings


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it:

        app.dependency_overrides[get_settings_dependency] = lambda: mock_settings
    """
    return get_settings()


# =============================================================================
# Store Dependency
# =============================================================================

def get_store(settings: Annotated[Settings, Depends(get_settings_dependency)]):
    """
    Return the ConciergeStore used by the upload endpoints.

    The store acquires connections from the shared asyncpg pool lazily, so
    constructing it per request is cheap.
    """
    # Imported here to avoid a core -> services import cycle
    from concierge_ingest.services.persistence import PostgresConciergeStore

    return PostgresConciergeStore(
        default_org_id=settings.default_org_id,
        default_uploaded_by=settings.default_uploaded_by,
    )


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: async def endpoint(store: StoreDep)
StoreDep = Annotated[object, Depends(get_store)]
