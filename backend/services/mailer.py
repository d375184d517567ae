"""
Mail Transport Service

Sends report emails through the Mailgun messages API using `requests`.

Delivery is best-effort: send_email() returns True on success and False when
Mailgun is not configured or the request fails. It never raises, so callers
can treat a failed send as a logged, non-fatal outcome.

Environment Requirements:
- MAILGUN_API_KEY: Mailgun private API key
- MAILGUN_DOMAIN: Verified sending domain (sender is noreply@<domain>)
- MAILGUN_API_BASE: Optional region override (https://api.eu.mailgun.net)

Usage:
    from backend.services.mailer import send_email_async

    sent = await send_email_async(to, subject, html)
"""

import asyncio
import logging
from typing import Optional

import requests

from backend.core.config import Settings, get_settings


logger = logging.getLogger(__name__)


SENDER_NAME = "Follow-Up Health"


def build_sender(domain: str) -> str:
    return f"{SENDER_NAME} <noreply@{domain}>"


def send_email(
    to: str,
    subject: str,
    html: str,
    settings: Optional[Settings] = None,
) -> bool:
    """
    Send one HTML email via Mailgun.

    Args:
        to: Recipient address
        subject: Subject line
        html: Complete HTML document
        settings: Optional settings override (defaults to get_settings())

    Returns:
        True if Mailgun accepted the message, False otherwise.
    """
    settings = settings or get_settings()
    domain = settings.mailgun_domain
    api_key = settings.mailgun_api_key

    logger.info(
        f"Sending email to {to}: subject={subject!r}, domain={domain or 'NOT SET'}, "
        f"api_key_configured={bool(api_key)}"
    )

    if not domain or not api_key:
        logger.warning("Mailgun not configured (domain or API key missing), skipping email send")
        return False

    url = f"{settings.mailgun_api_base.rstrip('/')}/v3/{domain}/messages"

    try:
        response = requests.post(
            url,
            auth=("api", api_key),
            data={
                "from": build_sender(domain),
                "to": [to],
                "subject": subject,
                "html": html,
            },
            timeout=settings.mail_timeout_seconds,
        )
        response.raise_for_status()
    except requests.HTTPError as e:
        body = e.response.text if e.response is not None else ""
        logger.error(f"Mailgun rejected email to {to}: {e}; response body: {body}")
        return False
    except requests.RequestException as e:
        logger.error(f"Failed to send email to {to}: {e}", exc_info=True)
        return False

    try:
        message_id = response.json().get("id", "unknown")
    except ValueError:
        message_id = "unknown"

    logger.info(f"Email sent to {to}, message id {message_id}")
    return True


async def send_email_async(
    to: str,
    subject: str,
    html: str,
    settings: Optional[Settings] = None,
) -> bool:
    """Run send_email() in a worker thread so the event loop is not blocked."""
    return await asyncio.to_thread(send_email, to, subject, html, settings)
