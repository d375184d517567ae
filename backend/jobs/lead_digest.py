"""
Slack daily lead digest job for the Follow-Up Health backend.

Posts one Slack message per day summarizing the previous day's calculator
submissions, using the WebhookClient from slack-sdk.

Digest Contents:
- Total submissions and how many left an email (with the conversion rate)
- Grade distribution by template bucket (A / BC / DF)
- Average monthly revenue-at-risk midpoint across submissions

Idempotency Guarantees:
- Never sends twice for the same date; job_digest_state records each send
- force=True bypasses the check for manual re-sends
- Days with no submissions are skipped and not recorded, so a late backfill
  still gets a digest

Environment Requirements:
- SLACK_WEBHOOK_URL: Slack incoming webhook URL
  Format: https://hooks.slack.com/services/xxx/yyy/zzz

Usage:
    # Send the digest for yesterday (default)
    result = await send_lead_digest()

    # Send for a specific date, even if already sent
    result = await send_lead_digest(digest_date=date(2026, 1, 28), force=True)

    # From cron
    python -m backend.jobs.lead_digest
"""

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from slack_sdk.webhook import WebhookClient

from backend.core.config import get_settings
from backend.core.database import close_db, get_db_pool
from backend.sql.submission_queries import SELECT_DAILY_SUBMISSION_SUMMARY


logger = logging.getLogger(__name__)

JOB_TYPE = "lead_digest"


# =============================================================================
# Idempotency Functions
# =============================================================================

async def check_already_sent(digest_date: date) -> bool:
    """Return True if a digest has already been sent for the date."""
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            SELECT digest_date, sent_at
            FROM job_digest_state
            WHERE job_type = $1
              AND digest_date = $2
            """,
            JOB_TYPE,
            digest_date,
        )

        return row is not None


async def mark_digest_sent(digest_date: date) -> None:
    """
    Record a successful send for the date.

    Forced re-sends bump digest_count and sent_at on the existing row.
    """
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        await conn.execute(
            """
            INSERT INTO job_digest_state (job_type, digest_date, sent_at, digest_count)
            VALUES ($1, $2, $3, 1)
            ON CONFLICT (job_type, digest_date)
            DO UPDATE SET
                sent_at = EXCLUDED.sent_at,
                digest_count = job_digest_state.digest_count + 1
            """,
            JOB_TYPE,
            digest_date,
            datetime.now(timezone.utc),
        )


# =============================================================================
# Data Fetching
# =============================================================================

async def fetch_daily_summary(target_date: date) -> Dict[str, Any]:
    """
    Aggregate one calendar day of submissions.

    Returns:
        Dict with total, with_email, conversion_rate (percent, 1dp),
        grade_ranges {A, BC, DF} and avg_risk_midpoint (whole dollars).
    """
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        row = await conn.fetchrow(SELECT_DAILY_SUBMISSION_SUMMARY, target_date)

    if row is None or not row["total"]:
        return {
            "total": 0,
            "with_email": 0,
            "conversion_rate": 0.0,
            "grade_ranges": {"A": 0, "BC": 0, "DF": 0},
            "avg_risk_midpoint": 0,
        }

    total = int(row["total"])
    with_email = int(row["with_email"])

    return {
        "total": total,
        "with_email": with_email,
        "conversion_rate": round(with_email / total * 100, 1),
        "grade_ranges": {
            "A": int(row["grade_a"]),
            "BC": int(row["grade_bc"]),
            "DF": int(row["grade_df"]),
        },
        "avg_risk_midpoint": int(round(float(row["avg_risk_midpoint"]))),
    }


# =============================================================================
# Slack Message Formatting
# =============================================================================

def format_slack_message(target_date: date, summary: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Build the Slack Block Kit blocks for one day's digest.

    Layout: header, headline counts, grade distribution, average risk, footer.
    """
    blocks: List[Dict[str, Any]] = []

    date_str = target_date.strftime('%B %d, %Y')
    blocks.append({
        "type": "header",
        "text": {
            "type": "plain_text",
            "text": f"Follow-Up Health Leads - {date_str}",
            "emoji": True,
        },
    })

    blocks.append({"type": "divider"})

    blocks.append({
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": (
                f"*Submissions:* {summary['total']:,}\n"
                f"*With email:* {summary['with_email']:,} "
                f"({summary['conversion_rate']}%)"
            ),
        },
    })

    grade_ranges = summary["grade_ranges"]
    blocks.append({
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": (
                "*Grade distribution*\n"
                f"A: *{grade_ranges['A']:,}*  |  "
                f"B-C: *{grade_ranges['BC']:,}*  |  "
                f"D-F: *{grade_ranges['DF']:,}*"
            ),
        },
    })

    blocks.append({
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": (
                "*Average monthly revenue at risk (midpoint):* "
                f"${summary['avg_risk_midpoint']:,}"
            ),
        },
    })

    blocks.append({"type": "divider"})

    timestamp = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')
    blocks.append({
        "type": "context",
        "elements": [
            {
                "type": "mrkdwn",
                "text": f"Generated at {timestamp} | Follow-Up Health Dashboard",
            }
        ],
    })

    return blocks


# =============================================================================
# Main Entry Point
# =============================================================================

async def send_lead_digest(
    digest_date: Optional[date] = None,
    force: bool = False,
) -> Dict[str, Any]:
    """
    Send the daily lead digest to Slack.

    Args:
        digest_date: Day to summarize (default: yesterday)
        force: Send even if a digest was already sent for the date

    Returns:
        Dict with:
        - success: True if the digest was sent or skipped appropriately
        - skipped / reason: Present when nothing was sent
        - date: The digest date as string
        - total / with_email: Counts included in the message (when sent)
        - error: Error message (if failed)

    No exceptions are raised; failures are logged and reported in the dict.
    """
    settings = get_settings()

    if not settings.slack_webhook_url:
        logger.warning("SLACK_WEBHOOK_URL not configured, skipping lead digest")
        return {
            'success': False,
            'error': 'SLACK_WEBHOOK_URL not configured. Set this environment variable to enable Slack digests.',
        }

    target_date = digest_date or (date.today() - timedelta(days=1))

    if not force:
        try:
            if await check_already_sent(target_date):
                logger.info(f"Lead digest already sent for {target_date}, skipping")
                return {
                    'success': True,
                    'skipped': True,
                    'reason': f'Digest already sent for {target_date}',
                    'date': str(target_date),
                }
        except Exception as e:
            logger.error(f"Failed to check lead digest state: {e}", exc_info=True)
            return {
                'success': False,
                'error': f'Failed to check digest state: {str(e)}',
                'date': str(target_date),
            }

    try:
        summary = await fetch_daily_summary(target_date)
    except Exception as e:
        logger.error(f"Failed to fetch lead summary for {target_date}: {e}", exc_info=True)
        return {
            'success': False,
            'error': f'Failed to fetch submission summary: {str(e)}',
            'date': str(target_date),
        }

    if summary['total'] == 0:
        logger.info(f"No submissions for {target_date}, skipping lead digest")
        return {
            'success': True,
            'skipped': True,
            'reason': f'No submissions for {target_date}',
            'date': str(target_date),
        }

    blocks = format_slack_message(target_date, summary)

    try:
        client = WebhookClient(settings.slack_webhook_url)
        response = client.send(blocks=blocks)
    except Exception as e:
        logger.error(f"Failed to send lead digest: {e}", exc_info=True)
        return {
            'success': False,
            'error': f'Failed to send Slack message: {str(e)}',
            'date': str(target_date),
        }

    if response.status_code != 200:
        logger.error(f"Slack returned {response.status_code} for lead digest: {response.body}")
        return {
            'success': False,
            'error': f'Slack API returned status {response.status_code}: {response.body}',
            'date': str(target_date),
        }

    try:
        await mark_digest_sent(target_date)
    except Exception as e:
        # Message is out; worst case is a duplicate on the next run
        logger.error(f"Lead digest sent but state not recorded: {e}", exc_info=True)

    logger.info(f"Lead digest sent for {target_date} ({summary['total']} submissions)")
    return {
        'success': True,
        'date': str(target_date),
        'total': summary['total'],
        'with_email': summary['with_email'],
    }


async def _main() -> None:
    try:
        result = await send_lead_digest()
        logger.info(f"Lead digest result: {result}")
    finally:
        await close_db()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(_main())
