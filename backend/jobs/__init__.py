"""
Background Jobs for the Follow-Up Health backend.

This module provides the command-line and scheduled jobs that run outside the
request cycle:
- Admin seeding (seed_admin.py): create or reset the admin console account
- Slack lead digest (lead_digest.py): daily summary of yesterday's submissions

Idempotency Guarantees:
-----------------------
- seed_admin: Upserts on email, so re-running only resets password and name.
- lead_digest: Never duplicates a digest for the same date. Sends are tracked
  in the job_digest_state table; force=True allows an intentional re-send.

Environment Requirements:
-------------------------
- ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME for seed_admin
- SLACK_WEBHOOK_URL for lead_digest

Usage Examples:
---------------
    from backend.jobs import seed_admin, send_lead_digest

    await seed_admin()
    result = await send_lead_digest(force=True)

    # From a shell or cron
    python -m backend.jobs.seed_admin
    python -m backend.jobs.lead_digest
"""

from backend.jobs.lead_digest import (
    send_lead_digest,
    check_already_sent,
    mark_digest_sent,
    fetch_daily_summary,
    format_slack_message,
)
from backend.jobs.seed_admin import seed_admin


__all__ = [
    # Lead digest
    "send_lead_digest",
    "check_already_sent",
    "mark_digest_sent",
    "fetch_daily_summary",
    "format_slack_message",
    # Admin seeding
    "seed_admin",
]
