"""
Backend Services Module

This module contains the business logic services for the Follow-Up Health
backend. Each service is stateless and testable in isolation.

Services:
- scoring: Loss rate, revenue at risk, grade, severity and component scores
- drivers: Fixed three-driver leakage explanations
- email_composer: Template merge, link hardening and HTML document assembly
- mailer: Mailgun transport (best-effort, never raises)
- auth: Admin password hashing and session tokens

All services are designed to be consumed by the API layer (backend/api/) and
the jobs (backend/jobs/).
"""

# =============================================================================
# Scoring Service Exports
# =============================================================================

from backend.services.scoring import (
    calculate_loss_rate,
    calculate_revenue_at_risk,
    grade_from_score,
    calculate_grade,
    calculate_severity,
    get_scores,
    calculate_results,
    get_grade_range,
    round_half_up,
)

# =============================================================================
# Driver Service Exports
# =============================================================================

from backend.services.drivers import (
    get_top_drivers,
    get_top_driver_codes,
)

# =============================================================================
# Email Composer Exports
# =============================================================================

from backend.services.email_composer import (
    build_email_html,
    build_placeholders,
    compose_report_email,
    harden_links,
    parse_template_config,
    resolve_cta_url,
    resolve_subject,
)

# =============================================================================
# Mail Transport Exports
# =============================================================================

from backend.services.mailer import (
    send_email,
    send_email_async,
)

# =============================================================================
# Admin Auth Exports
# =============================================================================

from backend.services.auth import (
    SESSION_COOKIE_NAME,
    hash_password,
    verify_password,
    normalize_admin_email,
    create_session_token,
    decode_session_token,
    admin_from_claims,
)


__all__ = [
    # Scoring
    "calculate_loss_rate",
    "calculate_revenue_at_risk",
    "grade_from_score",
    "calculate_grade",
    "calculate_severity",
    "get_scores",
    "calculate_results",
    "get_grade_range",
    "round_half_up",
    # Drivers
    "get_top_drivers",
    "get_top_driver_codes",
    # Email composer
    "build_email_html",
    "build_placeholders",
    "compose_report_email",
    "harden_links",
    "parse_template_config",
    "resolve_cta_url",
    "resolve_subject",
    # Mail transport
    "send_email",
    "send_email_async",
    # Admin auth
    "SESSION_COOKIE_NAME",
    "hash_password",
    "verify_password",
    "normalize_admin_email",
    "create_session_token",
    "decode_session_token",
    "admin_from_claims",
]
