"""
Core infrastructure package for the concierge ingestion backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL connectivity via asyncpg
- FastAPI dependency injection utilities

Re-exports the key components so other modules can write:

    from concierge_ingest.core import get_settings, init_db, StoreDep
"""

# =============================================================================
# Re-exports from concierge_ingest.core.config
# =============================================================================
from concierge_ingest.core.config import Settings, get_settings

# =============================================================================
# Re-exports from concierge_ingest.core.database
# =============================================================================
from concierge_ingest.core.database import init_db, close_db, get_db_pool

# =============================================================================
# Re-exports from concierge_ingest.core.dependencies
# =============================================================================
from concierge_ingest.core.dependencies import (
    get_settings_dependency,
    get_store,
    SettingsDep,
    StoreDep,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'get_store',
    'SettingsDep',
    'StoreDep',
]
