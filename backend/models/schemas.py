"""
Pydantic request/response models for the Follow-Up Health backend.

This module provides type-safe data validation and serialization for every API
contract: calculator inputs and results, leakage drivers, email templates and
their config, stored submissions, pagination and admin authentication.

Naming follows the wire formats the calculator UI already speaks:
- Calculator inputs and results use camelCase (monthlyInquiries, gradeScore, ...)
- Stored rows (submissions, email_templates) use the snake_case column names

All models use Pydantic v2 syntax with proper field validation and examples.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.models.enums import (
    AfterHoursCoverage,
    DriverCode,
    FollowUpDepth,
    GradeRange,
    PatientValue,
    ResponseTime,
    SeverityLevel,
)


# Loose shape check, same as the calculator's email capture form
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(value: Optional[str]) -> Optional[str]:
    """
    Trim an optional email address and validate its shape.

    Blank strings collapse to None (no email supplied).

    Raises:
        ValueError: If a non-blank value does not look like an email address.
    """
    if value is None:
        return None
    email = value.strip()
    if not email:
        return None
    if not EMAIL_RE.match(email):
        raise ValueError(f"Invalid email address: {email!r}")
    return email


# =============================================================================
# Calculator Domain Models
# =============================================================================


class CalculatorInputs(BaseModel):
    """
    The five answers a visitor gives the calculator.

    Immutable: the scoring engine and driver selector both read the same
    instance and neither may mutate it.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "monthlyInquiries": 100,
                "responseTime": "5-30",
                "followUpDepth": "2-3",
                "patientValue": "250-500",
                "afterHours": "sometimes",
            }
        },
    )

    monthlyInquiries: int = Field(
        ...,
        ge=1,
        le=10000,
        description="New patient inquiries per month (UI slider range 25-400)",
    )
    responseTime: ResponseTime = Field(..., description="Typical first-response time")
    followUpDepth: FollowUpDepth = Field(..., description="Follow-up touches per inquiry")
    patientValue: PatientValue = Field(..., description="Average new-patient value band")
    afterHours: AfterHoursCoverage = Field(..., description="Evening/weekend coverage")


class RevenueAtRisk(BaseModel):
    """Monthly revenue-at-risk range in whole dollars (low <= high)."""
    low: int = Field(..., ge=0, description="70% of the midpoint estimate")
    high: int = Field(..., ge=0, description="130% of the midpoint estimate")


class ComponentScores(BaseModel):
    """Per-dimension 0-100 scores, a linear rescale of each deduction."""
    speed: int = Field(..., ge=0, le=100)
    persistence: int = Field(..., ge=0, le=100)
    coverage: int = Field(..., ge=0, le=100)


class CalculationResults(BaseModel):
    """
    Everything the scoring engine derives from one set of inputs.

    Always freshly produced by calculate_results(); never patched in place.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "grade": "B-",
                "gradeScore": 81,
                "revenueAtRisk": {"low": 2310, "high": 4290},
                "severity": "Slow Leak",
                "dropoffPercent": 9,
                "lossRate": 0.088,
                "scores": {"speed": 83, "persistence": 64, "coverage": 40},
            }
        }
    )

    grade: str = Field(..., description="Letter grade, A+ through F")
    gradeScore: int = Field(..., ge=0, le=100, description="100 minus total deductions")
    revenueAtRisk: RevenueAtRisk
    severity: SeverityLevel
    dropoffPercent: int = Field(..., ge=0, le=100, description="round(lossRate * 100)")
    lossRate: float = Field(..., ge=0.05, le=0.25, description="Clamped monthly loss rate")
    scores: ComponentScores


class Driver(BaseModel):
    """One leakage driver explanation."""
    model_config = ConfigDict(frozen=True)

    code: DriverCode
    title: str
    description: str


class CalculateResponse(BaseModel):
    """Response for the live-update calculate endpoint."""
    results: CalculationResults
    drivers: List[Driver]


# =============================================================================
# Submit Flow Models
# =============================================================================


class SubmitRequest(BaseModel):
    """
    Public submission payload.

    `results` and `drivers` are accepted for compatibility with older clients
    but are never trusted; the server recomputes both from `inputs`.
    """
    inputs: CalculatorInputs
    email: Optional[str] = Field(default=None, description="Optional report recipient")
    results: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Client-computed results (ignored, recomputed server-side)",
    )
    drivers: Optional[List[str]] = Field(
        default=None,
        description="Client-computed driver codes (ignored, recomputed server-side)",
    )


class SubmitResponse(BaseModel):
    """Response for the public submission endpoint."""
    success: bool = True
    results: CalculationResults
    drivers: List[Driver]
    emailSent: bool = Field(default=False, description="Whether the report email was sent")


# =============================================================================
# Email Template Models
# =============================================================================


class TemplateConfig(BaseModel):
    """
    Known fields of the optional JSON config stored with an email template.

    Unknown keys are ignored; a missing or unparseable config is equivalent
    to an empty one.
    """
    model_config = ConfigDict(extra="ignore")

    cta_url: Optional[str] = Field(default=None, description="Custom call-to-action URL")


class EmailPlaceholders(BaseModel):
    """Pre-formatted values for the template placeholder tokens."""
    grade: str
    risk_low: str
    risk_high: str
    dropoff_percent: str
    cta_url: Optional[str] = None


class ComposedEmail(BaseModel):
    """Final subject and HTML body ready for the mail transport."""
    subject: str
    html: str


class EmailTemplateResponse(BaseModel):
    """A stored email template row."""
    id: str
    grade_range: GradeRange
    subject: str
    body: str
    config: Optional[str] = None
    updated_at: Optional[datetime] = None


class EmailTemplateUpsert(BaseModel):
    """
    Admin upsert payload, keyed by grade_range.

    Fields are loosely typed so the router can answer with 400 and the same
    messages the admin console already displays.
    """
    grade_range: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    config: Optional[str] = None


class TemplatePreviewRequest(BaseModel):
    """Render a draft template without saving or sending it."""
    subject: Optional[str] = None
    body: str = ""
    config: Optional[str] = None
    inputs: Optional[CalculatorInputs] = Field(
        default=None,
        description="Inputs to score for the preview (defaults to a sample clinic)",
    )


# =============================================================================
# Submission Models
# =============================================================================


class SubmissionWrite(BaseModel):
    """
    Admin create/edit payload for a submission.

    Only inputs and email are writable; results are always recomputed.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "monthly_inquiries": 120,
                "response_time": "30-2h",
                "follow_up_depth": "1",
                "patient_value": "500-1000",
                "after_hours": "no",
                "email": "office@example-clinic.com",
            }
        }
    )

    monthly_inquiries: int = Field(..., ge=1, le=10000)
    response_time: ResponseTime
    follow_up_depth: FollowUpDepth
    patient_value: PatientValue
    after_hours: AfterHoursCoverage
    email: Optional[str] = None

    def to_inputs(self) -> CalculatorInputs:
        return CalculatorInputs(
            monthlyInquiries=self.monthly_inquiries,
            responseTime=self.response_time,
            followUpDepth=self.follow_up_depth,
            patientValue=self.patient_value,
            afterHours=self.after_hours,
        )


class SubmissionResponse(BaseModel):
    """A stored submission row."""
    id: str
    created_at: Optional[datetime] = None
    monthly_inquiries: int
    response_time: ResponseTime
    follow_up_depth: FollowUpDepth
    patient_value: PatientValue
    after_hours: AfterHoursCoverage
    grade: str
    grade_score: Optional[int] = None
    loss_rate: float
    dropoff_pct: int
    risk_low: int
    risk_high: int
    drivers: List[str] = Field(default_factory=list)
    email: Optional[str] = None


class Pagination(BaseModel):
    """Pagination block for list responses."""
    page: int
    limit: int
    total: int
    totalPages: int


class SubmissionListResponse(BaseModel):
    """Response for the admin submissions list."""
    submissions: List[SubmissionResponse] = Field(default_factory=list)
    pagination: Pagination


class SubmissionStats(BaseModel):
    """Headline counts for the admin dashboard."""
    total: int = 0
    withEmail: int = 0
    conversionRate: float = Field(default=0.0, description="withEmail / total, percent, 1dp")


# =============================================================================
# Admin Auth Models
# =============================================================================


class LoginRequest(BaseModel):
    """Admin login credentials."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminUser(BaseModel):
    """An admin user as exposed to the console (never includes the hash)."""
    id: str
    email: str
    name: str
    created_at: Optional[datetime] = None
