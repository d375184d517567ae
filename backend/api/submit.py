"""
FastAPI router module for the public calculator endpoints.

Key Endpoints:
- POST /calculate - Score a set of answers for live UI updates (no persistence)
- POST /submit - Score, persist and optionally email the report

Submit Flow:
1. Validate inputs (pydantic, 422) and the optional email (400)
2. Recompute results and drivers server-side; client-sent results are ignored
   and any disagreement is logged
3. Persist the submission (best-effort: a failed insert is logged and the
   flow continues)
4. If an email was given: look up the template for the grade range, compose
   the report and send it (best-effort: a failed send is logged)
5. Respond with { success: true, results, drivers, emailSent }

Neither a database outage nor a Mailgun outage fails the request; the visitor
already has their results on screen.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException

from backend.core.database import get_db_pool
from backend.core.dependencies import SettingsDep
from backend.core.config import Settings
from backend.models.schemas import (
    CalculateResponse,
    CalculationResults,
    CalculatorInputs,
    SubmitRequest,
    SubmitResponse,
    normalize_email,
)
from backend.services.drivers import get_top_driver_codes, get_top_drivers
from backend.services.email_composer import compose_report_email
from backend.services.mailer import send_email_async
from backend.services.scoring import calculate_results, get_grade_range
from backend.sql.submission_queries import INSERT_SUBMISSION, submission_values
from backend.sql.template_queries import SELECT_TEMPLATE_BY_GRADE_RANGE


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()

# Client result fields compared against the server's recomputation
_COMPARED_FIELDS = ("grade", "gradeScore", "dropoffPercent")


# =============================================================================
# Helper Functions
# =============================================================================


def _log_client_mismatch(client_results: Optional[Dict[str, Any]], results: CalculationResults) -> None:
    if not client_results:
        return
    server = results.model_dump()
    mismatched = [
        field for field in _COMPARED_FIELDS
        if field in client_results and client_results[field] != server[field]
    ]
    if mismatched:
        logger.warning(
            f"Client-computed results disagree with server on {', '.join(mismatched)}; "
            f"using server values (grade={results.grade}, score={results.gradeScore})"
        )


async def _persist_submission(
    inputs: CalculatorInputs,
    results: CalculationResults,
    driver_codes: List[str],
    email: Optional[str],
) -> bool:
    try:
        pool = await get_db_pool()
        async with pool.acquire() as conn:
            await conn.fetchrow(
                INSERT_SUBMISSION,
                *submission_values(inputs, results, driver_codes, email),
            )
    except Exception as e:
        logger.error(f"Failed to insert submission (continuing): {e}", exc_info=True)
        return False

    logger.info(f"Stored submission: grade={results.grade}, has_email={email is not None}")
    return True


async def _fetch_template(grade_range: str) -> Optional[Dict[str, Any]]:
    try:
        pool = await get_db_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(SELECT_TEMPLATE_BY_GRADE_RANGE, grade_range)
    except Exception as e:
        logger.error(f"Failed to load email template for {grade_range}: {e}", exc_info=True)
        return None

    return dict(row) if row else None


async def _send_report(email: str, results: CalculationResults, settings: Settings) -> bool:
    grade_range = get_grade_range(results.grade).value
    template = await _fetch_template(grade_range)

    if template:
        logger.info(f"Template found for grade range {grade_range}")
    else:
        logger.info(f"No template found for grade range {grade_range}, using defaults")

    composed = compose_report_email(results, template, settings.app_url)
    sent = await send_email_async(email, composed.subject, composed.html, settings)

    if sent:
        logger.info(f"Report email sent for grade range {grade_range}")
    else:
        logger.error(f"Report email failed for grade range {grade_range}")
    return sent


# =============================================================================
# POST /calculate - Live Scoring
# =============================================================================


@router.post("/calculate", response_model=CalculateResponse)
async def calculate(inputs: CalculatorInputs) -> CalculateResponse:
    """
    Score a set of calculator answers without storing anything.

    Example Request:
        POST /api/calculate
        {"monthlyInquiries": 100, "responseTime": "5-30", "followUpDepth": "2-3",
         "patientValue": "250-500", "afterHours": "sometimes"}
    """
    return CalculateResponse(
        results=calculate_results(inputs),
        drivers=get_top_drivers(inputs),
    )


# =============================================================================
# POST /submit - Persist and Email
# =============================================================================


@router.post("/submit", response_model=SubmitResponse)
async def submit(payload: SubmitRequest, settings: SettingsDep) -> SubmitResponse:
    """
    Record a calculator submission and email the report when requested.

    Returns:
        { success: true, results, drivers, emailSent }

    Raises:
        HTTPException 400: If the email address is malformed.
        HTTPException 500: On unexpected failures outside the best-effort steps.
    """
    try:
        email = normalize_email(payload.email)
    except ValueError:
        logger.warning("POST /submit rejected: malformed email address")
        raise HTTPException(status_code=400, detail="Invalid email address")

    try:
        inputs = payload.inputs
        results = calculate_results(inputs)
        drivers = get_top_drivers(inputs)
        _log_client_mismatch(payload.results, results)

        await _persist_submission(inputs, results, get_top_driver_codes(inputs), email)

        email_sent = False
        if email:
            email_sent = await _send_report(email, results, settings)
        else:
            logger.info("No email provided, skipping email send")

        return SubmitResponse(
            success=True,
            results=results,
            drivers=drivers,
            emailSent=email_sent,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Submit error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
