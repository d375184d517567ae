"""
Admin account seeding job for the Follow-Up Health backend.

Creates the admin console account from ADMIN_EMAIL / ADMIN_PASSWORD /
ADMIN_NAME, or resets the password and name when the email already exists.
Ensures the schema first, so it can run against an empty database.

Usage:
    python -m backend.jobs.seed_admin

    # Or programmatically
    user = await seed_admin(email="owner@clinic.com", password="...", name="Owner")
"""

import asyncio
import logging
import sys
from typing import Optional

from backend.core.config import get_settings
from backend.core.database import close_db, ensure_schema, execute_query_one
from backend.models.schemas import AdminUser
from backend.services.auth import hash_password, normalize_admin_email
from backend.sql.admin_queries import UPSERT_ADMIN


logger = logging.getLogger(__name__)


async def seed_admin(
    email: Optional[str] = None,
    password: Optional[str] = None,
    name: Optional[str] = None,
) -> AdminUser:
    """
    Create or update an admin user.

    Arguments default to the ADMIN_* settings. The email is lowercased.

    Raises:
        ValueError: If the email or password is blank.
        asyncpg.PostgresError: If the upsert fails.
    """
    settings = get_settings()
    email = normalize_admin_email(email or settings.admin_email)
    password = password or settings.admin_password
    name = name or settings.admin_name

    if not email or not password:
        raise ValueError("Admin email and password are required")

    await ensure_schema()
    row = await execute_query_one(UPSERT_ADMIN, email, hash_password(password), name)

    user = AdminUser.model_validate(dict(row))
    logger.info(f"Admin user created/updated: {user.email} ({user.name})")
    return user


async def _main() -> int:
    try:
        user = await seed_admin()
    except Exception as e:
        logger.error(f"Failed to seed admin user: {e}", exc_info=True)
        return 1
    finally:
        await close_db()

    logger.info(f"You can now sign in at /admin/login as {user.email}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    sys.exit(asyncio.run(_main()))
