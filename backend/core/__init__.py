"""
Core infrastructure package for the FastAPI backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL database connectivity via asyncpg
- FastAPI dependency injection utilities, including the admin auth gate

This module re-exports key components from submodules for convenient importing
by other modules throughout the backend. This allows simplified imports like:

    from backend.core import get_settings, get_db_pool, DBSessionDep

Instead of:

    from backend.core.config import get_settings
    from backend.core.database import get_db_pool
    from backend.core.dependencies import DBSessionDep

Components Re-exported:
    Settings: Pydantic settings class with all configuration parameters
    get_settings: Function returning the cached Settings singleton
    init_db / ensure_schema / close_db: Pool and schema lifecycle
    get_db_pool: Async function to get the database connection pool
    get_db_session: FastAPI dependency yielding database connections
    get_settings_dependency: FastAPI dependency returning Settings
    get_current_admin: FastAPI dependency resolving the signed-in admin
    SettingsDep / DBSessionDep / CurrentAdminDep: Annotated dependency aliases

Usage Examples:
    # Database pool lifecycle (in FastAPI lifespan)
    from backend.core import init_db, ensure_schema, close_db

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db()
        await ensure_schema()
        yield
        await close_db()

    # Admin-only endpoint
    from backend.core import CurrentAdminDep, DBSessionDep

    @router.get("/submissions/stats")
    async def stats(db: DBSessionDep, admin: CurrentAdminDep) -> SubmissionStats:
        ...
"""

# =============================================================================
# Re-exports from backend.core.config
# =============================================================================
from backend.core.config import Settings, get_settings

# =============================================================================
# Re-exports from backend.core.database
# =============================================================================
from backend.core.database import init_db, ensure_schema, close_db, get_db_pool

# =============================================================================
# Re-exports from backend.core.dependencies
# =============================================================================
from backend.core.dependencies import (
    get_db_session,
    get_settings_dependency,
    get_current_admin,
    SettingsDep,
    DBSessionDep,
    CurrentAdminDep,
)

# =============================================================================
# Public API Definition
# =============================================================================

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool and schema lifecycle (from database.py)
    'init_db',
    'ensure_schema',
    'close_db',
    'get_db_pool',
    # FastAPI dependency injection (from dependencies.py)
    'get_db_session',
    'get_settings_dependency',
    'get_current_admin',
    'SettingsDep',
    'DBSessionDep',
    'CurrentAdminDep',
]
