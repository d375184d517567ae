"""
Admin user SQL query module for the Follow-Up Health backend.

Emails are stored lowercased; callers normalize before querying so the
UNIQUE constraint on admin_users.email is effectively case-insensitive.
"""


SELECT_ADMIN_BY_EMAIL = """
SELECT id::text AS id, email, name, password_hash, created_at
FROM admin_users
WHERE email = $1
"""

# $1 email, $2 password_hash, $3 name. Re-seeding resets password and name.
UPSERT_ADMIN = """
INSERT INTO admin_users (email, password_hash, name)
VALUES ($1, $2, $3)
ON CONFLICT (email)
DO UPDATE SET password_hash = $2, name = $3
RETURNING id::text AS id, email, name, created_at
"""
