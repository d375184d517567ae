"""
Admin Authentication Service

Password hashing and session tokens for the admin console.

- Passwords: PBKDF2-HMAC-SHA256 with a random per-user salt, stored as
  "salt:hexdigest" and verified with a constant-time comparison
- Sessions: HS256 JWTs (PyJWT) carrying sub, email, name, iat and exp,
  delivered in the admin_session httpOnly cookie

The token format is an implementation detail of this backend; the console only
relies on the cookie being present.

Usage:
    from backend.services.auth import hash_password, verify_password, create_session_token

    stored = hash_password("s3cret")
    verify_password("s3cret", stored)   # True
    token = create_session_token(user, settings)
    claims = decode_session_token(token, settings)   # None when invalid/expired
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from backend.core.config import Settings
from backend.models.schemas import AdminUser


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

SESSION_COOKIE_NAME = "admin_session"

JWT_ALGORITHM = "HS256"

PBKDF2_ITERATIONS = 100_000


# =============================================================================
# Password Hashing
# =============================================================================

def hash_password(password: str) -> str:
    """Hash a password as 'salt:hexdigest'."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{salt}:{digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Check a password against a stored 'salt:hexdigest' hash."""
    if not stored or ":" not in stored:
        return False
    salt, hash_hex = stored.split(":", 1)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return hmac.compare_digest(digest.hex(), hash_hex)


def normalize_admin_email(email: str) -> str:
    return email.strip().lower()


# =============================================================================
# Session Tokens
# =============================================================================

def create_session_token(
    user: AdminUser,
    settings: Settings,
    now: Optional[datetime] = None,
) -> str:
    """
    Issue a signed session token for an admin user.

    Args:
        user: The authenticated admin
        settings: Provides jwt_secret and session_ttl_days
        now: Issue time (defaults to the current UTC time)

    Returns:
        Encoded JWT string
    """
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.session_ttl_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_session_token(token: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """
    Verify a session token and return its claims.

    Returns:
        Claims dict, or None when the token is expired, tampered with,
        or missing required claims.
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired admin session token")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected invalid admin session token: {e}")
        return None

    if not claims.get("sub") or not claims.get("email"):
        return None
    return claims


def admin_from_claims(claims: Dict[str, Any]) -> AdminUser:
    return AdminUser(
        id=str(claims["sub"]),
        email=claims["email"],
        name=claims.get("name") or "",
    )
