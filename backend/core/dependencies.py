"""
FastAPI dependency injection module for the Follow-Up Health backend.

This module provides reusable FastAPI dependencies for database sessions,
configuration access, and admin authentication, so endpoint handlers stay
loosely coupled from infrastructure components.

Key Dependencies Provided:
- get_db_session: Async generator yielding database connections from the pool
- get_settings_dependency: Returns the cached Settings singleton
- get_current_admin: Verifies the admin session cookie (or Bearer token)
- SettingsDep / DBSessionDep / CurrentAdminDep: Annotated type aliases

Design Pattern:
Every dependency here can be swapped in tests through FastAPI's override
mechanism:

    app.dependency_overrides[get_db_session] = lambda: mock_connection
    app.dependency_overrides[get_current_admin] = lambda: admin_user

Usage Examples:
    @router.get("/submissions/{submission_id}")
    async def get_submission(
        submission_id: str,
        db: DBSessionDep,
        admin: CurrentAdminDep,
    ) -> SubmissionResponse:
        row = await db.fetchrow(SELECT_SUBMISSION_BY_ID, submission_id)
        ...

See Also:
    - backend/core/config.py: Settings management and environment variables
    - backend/core/database.py: Connection pool lifecycle management
    - backend/services/auth.py: Session token encoding and verification
"""

from typing import AsyncGenerator, Annotated, Optional

from fastapi import Cookie, Depends, Header, HTTPException
from asyncpg import Connection

from backend.core.config import Settings, get_settings
from backend.core.database import get_db_pool
from backend.models.schemas import AdminUser
from backend.services.auth import (
    SESSION_COOKIE_NAME,
    admin_from_claims,
    decode_session_token,
)


# =============================================================================
# Database Session Dependency
# =============================================================================

async def get_db_session() -> AsyncGenerator[Connection, None]:
    """
    Yield an async database connection from the pool.

    The connection is released back to the pool when the endpoint completes,
    regardless of whether the operation succeeded or raised an exception.

    Yields:
        asyncpg.Connection: An active database connection from the pool.

    Raises:
        asyncpg.PostgresError: If connection acquisition fails.
    """
    pool = await get_db_pool()
    async with pool.acquire() as connection:
        yield connection


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    This is a thin wrapper around get_settings() to enable FastAPI's
    dependency override mechanism for testing:
        app.dependency_overrides[get_settings_dependency] = lambda: mock_settings
    """
    return get_settings()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: async def endpoint(db: DBSessionDep)
DBSessionDep = Annotated[Connection, Depends(get_db_session)]


# =============================================================================
# Authentication Dependencies
# =============================================================================

def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_admin(
    settings: SettingsDep,
    admin_session: Annotated[Optional[str], Cookie(alias=SESSION_COOKIE_NAME)] = None,
    authorization: Annotated[Optional[str], Header()] = None,
) -> AdminUser:
    """
    Resolve the signed-in admin from the session cookie or a Bearer header.

    The cookie wins when both are present.

    Returns:
        AdminUser built from the verified token claims.

    Raises:
        HTTPException: 401 {"detail": "Unauthorized"} when no valid token is present.
    """
    token = admin_session or _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    claims = decode_session_token(token, settings)
    if claims is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    return admin_from_claims(claims)


# Usage: async def endpoint(admin: CurrentAdminDep)
CurrentAdminDep = Annotated[AdminUser, Depends(get_current_admin)]
