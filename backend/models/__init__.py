"""
Package initialization file for backend models.

This module exports all Pydantic schemas and enumerations from schemas.py and enums.py,
making them importable from backend.models directly. This provides a clean public API
for other backend modules to import data models without needing to know the internal
module structure.

Usage:
    from backend.models import (
        CalculatorInputs,
        CalculationResults,
        Driver,
        ResponseTime,
        # ... etc
    )
"""

# =============================================================================
# Enums - Import and re-export all enumerations from enums.py
# =============================================================================

from backend.models.enums import (
    # Calculator inputs
    ResponseTime,
    FollowUpDepth,
    PatientValue,
    AfterHoursCoverage,
    # Calculator outputs
    SeverityLevel,
    DriverCode,
    GradeRange,
)


# =============================================================================
# Schemas - Import and re-export all Pydantic models from schemas.py
# =============================================================================

from backend.models.schemas import (
    # Helpers
    EMAIL_RE,
    normalize_email,
    # Calculator domain
    CalculatorInputs,
    RevenueAtRisk,
    ComponentScores,
    CalculationResults,
    Driver,
    CalculateResponse,
    # Submit flow
    SubmitRequest,
    SubmitResponse,
    # Email templates
    TemplateConfig,
    EmailPlaceholders,
    ComposedEmail,
    EmailTemplateResponse,
    EmailTemplateUpsert,
    TemplatePreviewRequest,
    # Submissions
    SubmissionWrite,
    SubmissionResponse,
    Pagination,
    SubmissionListResponse,
    SubmissionStats,
    # Admin auth
    LoginRequest,
    AdminUser,
)


__all__ = [
    # =========================================================================
    # Enums
    # =========================================================================
    "ResponseTime",
    "FollowUpDepth",
    "PatientValue",
    "AfterHoursCoverage",
    "SeverityLevel",
    "DriverCode",
    "GradeRange",

    # =========================================================================
    # Schemas - Calculator
    # =========================================================================
    "EMAIL_RE",
    "normalize_email",
    "CalculatorInputs",
    "RevenueAtRisk",
    "ComponentScores",
    "CalculationResults",
    "Driver",
    "CalculateResponse",
    "SubmitRequest",
    "SubmitResponse",

    # =========================================================================
    # Schemas - Email Templates
    # =========================================================================
    "TemplateConfig",
    "EmailPlaceholders",
    "ComposedEmail",
    "EmailTemplateResponse",
    "EmailTemplateUpsert",
    "TemplatePreviewRequest",

    # =========================================================================
    # Schemas - Submissions
    # =========================================================================
    "SubmissionWrite",
    "SubmissionResponse",
    "Pagination",
    "SubmissionListResponse",
    "SubmissionStats",

    # =========================================================================
    # Schemas - Admin Auth
    # =========================================================================
    "LoginRequest",
    "AdminUser",
]
