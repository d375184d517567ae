"""
FastAPI router module for admin console authentication.

Key Endpoints:
- POST /auth/login  - Verify credentials and set the admin_session cookie
- POST /auth/logout - Clear the admin_session cookie
- GET  /auth/me     - Return the signed-in admin

Session Cookie:
- Name: admin_session
- httpOnly, SameSite=Lax, path=/
- secure when APP_ENV=production
- Lifetime: SESSION_TTL_DAYS (default 7 days), matching the token expiry

Login failures always answer 401 "Invalid email or password" so the response
does not reveal which half of the credentials was wrong.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Response

from backend.core.dependencies import CurrentAdminDep, DBSessionDep, SettingsDep
from backend.models.schemas import AdminUser, LoginRequest
from backend.services.auth import (
    SESSION_COOKIE_NAME,
    create_session_token,
    normalize_admin_email,
    verify_password,
)
from backend.sql.admin_queries import SELECT_ADMIN_BY_EMAIL


logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/login")
async def login(
    credentials: LoginRequest,
    response: Response,
    db: DBSessionDep,
    settings: SettingsDep,
) -> Dict[str, Any]:
    """
    Sign an admin in.

    Returns:
        { success: true, user: { id, email, name } } and sets the session cookie.

    Raises:
        HTTPException 401: Unknown email or wrong password.
        HTTPException 500: If the user lookup fails.
    """
    email = normalize_admin_email(credentials.email)

    try:
        row = await db.fetchrow(SELECT_ADMIN_BY_EMAIL, email)
    except Exception as e:
        logger.error(f"Admin lookup failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Login failed")

    if not row or not verify_password(credentials.password, row["password_hash"]):
        logger.warning("Admin login rejected: invalid credentials")
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    user = AdminUser(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        created_at=row["created_at"],
    )
    token = create_session_token(user, settings)

    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )

    logger.info(f"Admin {user.email} signed in")
    return {"success": True, "user": user}


@router.post("/logout")
async def logout(response: Response, settings: SettingsDep) -> Dict[str, bool]:
    """Clear the session cookie. Safe to call when not signed in."""
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return {"success": True}


@router.get("/me")
async def me(admin: CurrentAdminDep) -> Dict[str, AdminUser]:
    """Return the signed-in admin: { user: {...} }."""
    return {"user": admin}
