"""
Database schema (DDL) for the Follow-Up Health backend.

Every statement is idempotent (CREATE ... IF NOT EXISTS) and is applied at
application startup by backend.core.database.ensure_schema(), so a fresh
PostgreSQL database needs no separate migration step.

Tables:
- submissions: one row per calculator submission (inputs, recomputed results,
  driver codes, optional email)
- email_templates: one admin-editable report template per grade range
- admin_users: admin console accounts (PBKDF2 password hashes)
- job_digest_state: idempotency ledger for the daily lead digest
"""

from typing import List


CREATE_SUBMISSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS submissions (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    monthly_inquiries INTEGER NOT NULL,
    response_time TEXT NOT NULL,
    follow_up_depth TEXT NOT NULL,
    patient_value TEXT NOT NULL,
    after_hours TEXT NOT NULL,
    grade TEXT NOT NULL,
    grade_score INTEGER,
    loss_rate DOUBLE PRECISION NOT NULL,
    dropoff_pct INTEGER NOT NULL,
    risk_low INTEGER NOT NULL,
    risk_high INTEGER NOT NULL,
    drivers TEXT[] NOT NULL DEFAULT '{}',
    email TEXT
)
"""

CREATE_SUBMISSIONS_CREATED_AT_INDEX = """
CREATE INDEX IF NOT EXISTS idx_submissions_created_at
    ON submissions (created_at DESC)
"""

CREATE_EMAIL_TEMPLATES_TABLE = """
CREATE TABLE IF NOT EXISTS email_templates (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    grade_range TEXT NOT NULL UNIQUE,
    subject TEXT NOT NULL,
    body TEXT NOT NULL,
    config TEXT,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

CREATE_ADMIN_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS admin_users (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    name TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

CREATE_JOB_DIGEST_STATE_TABLE = """
CREATE TABLE IF NOT EXISTS job_digest_state (
    job_type TEXT NOT NULL,
    digest_date DATE NOT NULL,
    sent_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    digest_count INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (job_type, digest_date)
)
"""

# Applied in order
SCHEMA_STATEMENTS: List[str] = [
    CREATE_SUBMISSIONS_TABLE,
    CREATE_SUBMISSIONS_CREATED_AT_INDEX,
    CREATE_EMAIL_TEMPLATES_TABLE,
    CREATE_ADMIN_USERS_TABLE,
    CREATE_JOB_DIGEST_STATE_TABLE,
]
