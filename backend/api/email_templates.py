"""
FastAPI router module for admin email template management.

One template per grade range (A, BC, DF). The submit flow picks the template
for a visitor's grade range; when none exists it falls back to the default
subject and an empty content block.

Key Endpoints:
- GET  /email-templates          - All templates ordered by grade range
- PUT  /email-templates          - Create or replace the template for a grade range
- POST /email-templates/preview  - Render a draft template without saving or sending

Template Body Placeholders:
    {{grade}}, {{risk_low}}, {{risk_high}}, {{dropoff_percent}}, {{cta_url}}

Template Config:
    Optional JSON object stored as text. Known key: cta_url (overrides APP_URL
    for {{cta_url}}). Saving rejects anything that is not a JSON object; at send
    time an unreadable stored config is ignored.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException

from backend.core.dependencies import CurrentAdminDep, DBSessionDep, SettingsDep
from backend.models.enums import (
    AfterHoursCoverage,
    FollowUpDepth,
    GradeRange,
    PatientValue,
    ResponseTime,
)
from backend.models.schemas import (
    CalculatorInputs,
    EmailTemplateResponse,
    EmailTemplateUpsert,
    TemplatePreviewRequest,
)
from backend.services.email_composer import compose_report_email
from backend.services.scoring import calculate_results, get_grade_range
from backend.sql.template_queries import SELECT_ALL_TEMPLATES, UPSERT_TEMPLATE


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()

VALID_GRADE_RANGES = {grade_range.value for grade_range in GradeRange}

# Scored when a preview request carries no inputs
SAMPLE_PREVIEW_INPUTS = CalculatorInputs(
    monthlyInquiries=100,
    responseTime=ResponseTime.MIN_5_TO_30,
    followUpDepth=FollowUpDepth.TWO_TO_THREE,
    patientValue=PatientValue.FROM_250_TO_500,
    afterHours=AfterHoursCoverage.SOMETIMES,
)


# =============================================================================
# Helper Functions
# =============================================================================


def _validate_config(config: Optional[str]) -> Optional[str]:
    """Return the config to store (None when blank) or raise 400."""
    if config is None or not config.strip():
        return None
    try:
        data = json.loads(config)
    except ValueError:
        raise HTTPException(status_code=400, detail="Config must be valid JSON")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Config must be a JSON object")
    return config.strip()


def _record_to_template(record: Any) -> EmailTemplateResponse:
    return EmailTemplateResponse.model_validate(dict(record))


# =============================================================================
# GET /email-templates
# =============================================================================


@router.get("")
async def list_templates(
    admin: CurrentAdminDep,
    db: DBSessionDep,
) -> Dict[str, List[EmailTemplateResponse]]:
    """List all templates: { templates: [...] }."""
    try:
        rows = await db.fetch(SELECT_ALL_TEMPLATES)
        return {"templates": [_record_to_template(row) for row in rows]}

    except Exception as e:
        logger.error(f"Templates fetch error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch templates")


# =============================================================================
# PUT /email-templates
# =============================================================================


@router.put("")
async def upsert_template(
    template: EmailTemplateUpsert,
    admin: CurrentAdminDep,
    db: DBSessionDep,
) -> Dict[str, EmailTemplateResponse]:
    """
    Create or replace the template for one grade range.

    Raises:
        HTTPException 400: Invalid grade range, missing subject/body, or a
            config that is not a JSON object.
        HTTPException 500: If the database write fails.
    """
    if template.grade_range not in VALID_GRADE_RANGES:
        raise HTTPException(status_code=400, detail="Invalid grade range")

    if not template.subject or not template.subject.strip() or not template.body or not template.body.strip():
        raise HTTPException(status_code=400, detail="Subject and body are required")

    config = _validate_config(template.config)

    try:
        row = await db.fetchrow(
            UPSERT_TEMPLATE,
            template.grade_range,
            template.subject,
            template.body,
            config,
        )
        if not row:
            raise HTTPException(status_code=500, detail="Failed to update template")

        logger.info(f"Admin {admin.email} saved email template for grade range {template.grade_range}")
        return {"template": _record_to_template(row)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Template update error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update template")


# =============================================================================
# POST /email-templates/preview
# =============================================================================


@router.post("/preview")
async def preview_template(
    draft: TemplatePreviewRequest,
    admin: CurrentAdminDep,
    settings: SettingsDep,
) -> Dict[str, Any]:
    """
    Render a draft template against sample (or supplied) inputs.

    Returns:
        { subject, html, gradeRange, results }
    """
    inputs = draft.inputs or SAMPLE_PREVIEW_INPUTS
    results = calculate_results(inputs)

    composed = compose_report_email(
        results,
        {"subject": draft.subject, "body": draft.body, "config": draft.config},
        settings.app_url,
    )

    return {
        "subject": composed.subject,
        "html": composed.html,
        "gradeRange": get_grade_range(results.grade).value,
        "results": results,
    }
