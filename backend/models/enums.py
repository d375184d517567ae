"""
Enumeration definitions for the Follow-Up Health backend.

This module provides type-safe enumeration values for every categorical input the
calculator accepts and every categorical output the scoring engine produces.

All enums inherit from both `str` and `Enum` to ensure JSON serialization compatibility
with Pydantic models, so request bodies and stored rows carry the same wire values
the calculator UI sends (e.g. '5-30', 'notsure', '1000+').

Orderings matter: each input enum is declared from the best practice to the worst
(or lowest to highest for patient value). The scoring and driver lookup tables are
keyed by these members and must stay exhaustive.
"""

from enum import Enum


class ResponseTime(str, Enum):
    """
    How quickly the clinic responds to a new inquiry.

    Values (fastest -> slowest): 'under5' | '5-30' | '30-2h' | 'sameday' | 'nextday'
    """
    UNDER_5_MIN = "under5"
    MIN_5_TO_30 = "5-30"
    MIN_30_TO_2H = "30-2h"
    SAME_DAY = "sameday"
    NEXT_DAY = "nextday"


class FollowUpDepth(str, Enum):
    """
    How many follow-up touches an unanswered inquiry receives.

    Values (most -> least persistent): '4-6' | '2-3' | '1' | 'notsure'

    'notsure' means follow-up is not tracked at all.
    """
    FOUR_TO_SIX = "4-6"
    TWO_TO_THREE = "2-3"
    ONE = "1"
    NOT_SURE = "notsure"


class PatientValue(str, Enum):
    """
    Average first-year value of a new patient, in dollars.

    Values (lowest -> highest): 'under250' | '250-500' | '500-1000' | '1000+'
    """
    UNDER_250 = "under250"
    FROM_250_TO_500 = "250-500"
    FROM_500_TO_1000 = "500-1000"
    OVER_1000 = "1000+"


class AfterHoursCoverage(str, Enum):
    """
    Whether evening and weekend inquiries get a response.

    Values (best -> worst coverage): 'yes' | 'sometimes' | 'no'
    """
    YES = "yes"
    SOMETIMES = "sometimes"
    NO = "no"


class SeverityLevel(str, Enum):
    """
    Leak severity derived from the rounded drop-off percentage.

    - Quiet Leak: drop-off <= 7%
    - Slow Leak: drop-off <= 12%
    - Active Leak: anything higher
    """
    QUIET_LEAK = "Quiet Leak"
    SLOW_LEAK = "Slow Leak"
    ACTIVE_LEAK = "Active Leak"


class DriverCode(str, Enum):
    """
    Leakage driver identifiers, one per scored dimension.

    The stored `drivers` column of a submission is always exactly
    [slowResponse, followUpEarly, afterHoursGaps] in that order.
    """
    SLOW_RESPONSE = "slowResponse"
    FOLLOW_UP_EARLY = "followUpEarly"
    AFTER_HOURS_GAPS = "afterHoursGaps"


class GradeRange(str, Enum):
    """
    Email template bucket for a letter grade.

    - A: A+, A, A-
    - BC: B+ through C-
    - DF: D+ through F
    """
    A = "A"
    BC = "BC"
    DF = "DF"
