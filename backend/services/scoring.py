"""
Scoring Engine Service

This module turns the five calculator answers into a letter grade, an estimated
monthly revenue-at-risk range, a leak severity and three component scores. It is
the single source of truth for scoring: the public submit endpoint, the admin
create/edit endpoints and the template preview all call calculate_results() and
never trust numbers computed elsewhere.

Scoring Model:
- Loss rate: an 8% base monthly drop-off scaled by three practice multipliers
  (response time, follow-up depth, after-hours coverage), clamped to 5%-25%
- Revenue at risk: inquiries x loss rate x patient value midpoint, reported as a
  70%-130% band around that midpoint
- Grade: 100 minus fixed per-dimension deductions, mapped onto an A+ to F ladder
- Severity: bucketed from the rounded drop-off percentage

Every function here is pure and synchronous. There is no validation layer: the
pydantic enums on CalculatorInputs reject out-of-domain values at the HTTP
boundary, and the lookup tables below are exhaustive over those enums.
"""

import math
from typing import Dict, List, Tuple

from backend.models.enums import (
    AfterHoursCoverage,
    FollowUpDepth,
    GradeRange,
    PatientValue,
    ResponseTime,
    SeverityLevel,
)
from backend.models.schemas import (
    CalculationResults,
    CalculatorInputs,
    ComponentScores,
    RevenueAtRisk,
)


# =============================================================================
# Loss Rate Model
# =============================================================================

BASE_LOSS_RATE = 0.08
MIN_LOSS_RATE = 0.05
MAX_LOSS_RATE = 0.25

# Revenue-at-risk band around the midpoint estimate
RISK_LOW_FACTOR = 0.7
RISK_HIGH_FACTOR = 1.3

RESPONSE_TIME_MULTIPLIERS: Dict[ResponseTime, float] = {
    ResponseTime.UNDER_5_MIN: 0.9,
    ResponseTime.MIN_5_TO_30: 1.0,
    ResponseTime.MIN_30_TO_2H: 1.1,
    ResponseTime.SAME_DAY: 1.25,
    ResponseTime.NEXT_DAY: 1.45,
}

FOLLOW_UP_MULTIPLIERS: Dict[FollowUpDepth, float] = {
    FollowUpDepth.FOUR_TO_SIX: 0.9,
    FollowUpDepth.TWO_TO_THREE: 1.0,
    FollowUpDepth.ONE: 1.25,
    FollowUpDepth.NOT_SURE: 1.35,
}

COVERAGE_MULTIPLIERS: Dict[AfterHoursCoverage, float] = {
    AfterHoursCoverage.YES: 1.0,
    AfterHoursCoverage.SOMETIMES: 1.1,
    AfterHoursCoverage.NO: 1.2,
}

# Dollar midpoint of each patient value band
PATIENT_VALUE_MIDPOINTS: Dict[PatientValue, int] = {
    PatientValue.UNDER_250: 200,
    PatientValue.FROM_250_TO_500: 375,
    PatientValue.FROM_500_TO_1000: 750,
    PatientValue.OVER_1000: 1500,
}


# =============================================================================
# Grade Deductions
# Worst case per dimension: speed 30, persistence 22, coverage 10 (62 total).
# =============================================================================

SPEED_DEDUCTIONS: Dict[ResponseTime, int] = {
    ResponseTime.UNDER_5_MIN: 0,
    ResponseTime.MIN_5_TO_30: 5,
    ResponseTime.MIN_30_TO_2H: 12,
    ResponseTime.SAME_DAY: 20,
    ResponseTime.NEXT_DAY: 30,
}

PERSISTENCE_DEDUCTIONS: Dict[FollowUpDepth, int] = {
    FollowUpDepth.FOUR_TO_SIX: 0,
    FollowUpDepth.TWO_TO_THREE: 8,
    FollowUpDepth.ONE: 18,
    FollowUpDepth.NOT_SURE: 22,
}

COVERAGE_DEDUCTIONS: Dict[AfterHoursCoverage, int] = {
    AfterHoursCoverage.YES: 0,
    AfterHoursCoverage.SOMETIMES: 6,
    AfterHoursCoverage.NO: 10,
}

MAX_SPEED_DEDUCTION = 30
MAX_PERSISTENCE_DEDUCTION = 22
MAX_COVERAGE_DEDUCTION = 10

# (minimum score, grade), checked top-down
GRADE_LADDER: List[Tuple[int, str]] = [
    (97, "A+"),
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (63, "D"),
    (60, "D-"),
]
FAILING_GRADE = "F"

# Upper bounds (inclusive) on the rounded drop-off percentage
QUIET_LEAK_MAX_DROPOFF = 7
SLOW_LEAK_MAX_DROPOFF = 12


# =============================================================================
# Helpers
# =============================================================================


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves going up.

    Python's round() uses banker's rounding (round(2.5) == 2). The calculator UI
    rounds halves up, and both sides must agree on the dollar figures.
    """
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# =============================================================================
# Scoring Functions
# =============================================================================


def calculate_loss_rate(inputs: CalculatorInputs) -> float:
    """
    Compute the clamped monthly loss rate.

    loss = 0.08 x RTM[responseTime] x FUM[followUpDepth] x CM[afterHours],
    clamped to [0.05, 0.25].
    """
    raw = (
        BASE_LOSS_RATE
        * RESPONSE_TIME_MULTIPLIERS[inputs.responseTime]
        * FOLLOW_UP_MULTIPLIERS[inputs.followUpDepth]
        * COVERAGE_MULTIPLIERS[inputs.afterHours]
    )
    return _clamp(raw, MIN_LOSS_RATE, MAX_LOSS_RATE)


def calculate_revenue_at_risk(inputs: CalculatorInputs, loss_rate: float) -> RevenueAtRisk:
    """
    Compute the monthly revenue-at-risk band.

    Args:
        inputs: Calculator answers (monthlyInquiries and patientValue are used)
        loss_rate: Output of calculate_loss_rate()

    Returns:
        RevenueAtRisk with low = round(mid x 0.7), high = round(mid x 1.3)
    """
    midpoint = (
        inputs.monthlyInquiries
        * loss_rate
        * PATIENT_VALUE_MIDPOINTS[inputs.patientValue]
    )
    return RevenueAtRisk(
        low=round_half_up(midpoint * RISK_LOW_FACTOR),
        high=round_half_up(midpoint * RISK_HIGH_FACTOR),
    )


def grade_from_score(score: int) -> str:
    """Map a 0-100 score onto the letter grade ladder."""
    for minimum, grade in GRADE_LADDER:
        if score >= minimum:
            return grade
    return FAILING_GRADE


def calculate_grade(inputs: CalculatorInputs) -> Tuple[str, int]:
    """
    Compute the letter grade and numeric score.

    Returns:
        Tuple of (grade, score) where score = max(0, 100 - total deductions)
    """
    deductions = (
        SPEED_DEDUCTIONS[inputs.responseTime]
        + PERSISTENCE_DEDUCTIONS[inputs.followUpDepth]
        + COVERAGE_DEDUCTIONS[inputs.afterHours]
    )
    score = max(0, 100 - deductions)
    return grade_from_score(score), score


def calculate_severity(loss_rate: float) -> Tuple[SeverityLevel, int]:
    """
    Compute the leak severity and the rounded drop-off percentage.

    Returns:
        Tuple of (severity, dropoff_percent)
    """
    dropoff_percent = round_half_up(loss_rate * 100)

    if dropoff_percent <= QUIET_LEAK_MAX_DROPOFF:
        severity = SeverityLevel.QUIET_LEAK
    elif dropoff_percent <= SLOW_LEAK_MAX_DROPOFF:
        severity = SeverityLevel.SLOW_LEAK
    else:
        severity = SeverityLevel.ACTIVE_LEAK

    return severity, dropoff_percent


def _component_score(deduction: int, max_deduction: int) -> int:
    scaled = 100 - deduction * (100 / max_deduction)
    return round_half_up(_clamp(scaled, 0, 100))


def get_scores(inputs: CalculatorInputs) -> ComponentScores:
    """
    Rescale each dimension's deduction onto 0-100 (100 = no deduction).

    The worst option in each dimension scores 0.
    """
    return ComponentScores(
        speed=_component_score(
            SPEED_DEDUCTIONS[inputs.responseTime], MAX_SPEED_DEDUCTION
        ),
        persistence=_component_score(
            PERSISTENCE_DEDUCTIONS[inputs.followUpDepth], MAX_PERSISTENCE_DEDUCTION
        ),
        coverage=_component_score(
            COVERAGE_DEDUCTIONS[inputs.afterHours], MAX_COVERAGE_DEDUCTION
        ),
    )


def calculate_results(inputs: CalculatorInputs) -> CalculationResults:
    """
    Produce the full results for one set of calculator answers.

    This is the entry point used by every API path. It returns a new
    CalculationResults on each call; repeated calls with equal inputs
    return equal results.

    Example:
        >>> results = calculate_results(CalculatorInputs(
        ...     monthlyInquiries=100, responseTime="5-30", followUpDepth="2-3",
        ...     patientValue="250-500", afterHours="sometimes"))
        >>> results.grade, results.gradeScore, results.dropoffPercent
        ('B-', 81, 9)
    """
    loss_rate = calculate_loss_rate(inputs)
    revenue_at_risk = calculate_revenue_at_risk(inputs, loss_rate)
    grade, grade_score = calculate_grade(inputs)
    severity, dropoff_percent = calculate_severity(loss_rate)

    return CalculationResults(
        grade=grade,
        gradeScore=grade_score,
        revenueAtRisk=revenue_at_risk,
        severity=severity,
        dropoffPercent=dropoff_percent,
        lossRate=loss_rate,
        scores=get_scores(inputs),
    )


def get_grade_range(grade: str) -> GradeRange:
    """
    Map a letter grade to its email template bucket.

    A+/A/A- -> A, any B or C grade -> BC, everything else -> DF.
    """
    if grade.startswith("A"):
        return GradeRange.A
    if grade.startswith("B") or grade.startswith("C"):
        return GradeRange.BC
    return GradeRange.DF
