"""
Leakage Driver Service

Explains where a clinic's inquiries leak, one driver per scored dimension:

- slowResponse   (response speed)
- followUpEarly  (follow-up persistence)
- afterHoursGaps (after-hours coverage)

Selection is fixed: every result carries exactly these three drivers in this
order, each with copy chosen by the clinic's answer for that dimension. The best
answer in a dimension yields a "(Working)" variant, so a clinic that is already
doing well sees that called out rather than a problem.

Patient value and inquiry volume drive the dollar estimate only and never
influence driver selection.
"""

from typing import Dict, List

from backend.models.enums import (
    AfterHoursCoverage,
    DriverCode,
    FollowUpDepth,
    ResponseTime,
)
from backend.models.schemas import CalculatorInputs, Driver


# =============================================================================
# Driver Copy Tables
# Exhaustive over each input enum. Titles and descriptions are the
# customer-facing text shown on the results page and stored with submissions.
# =============================================================================

SPEED_DRIVERS: Dict[ResponseTime, Driver] = {
    ResponseTime.UNDER_5_MIN: Driver(
        code=DriverCode.SLOW_RESPONSE,
        title="Response Speed (Working)",
        description="Replies inside 5 minutes keep inquiries warm while intent is highest.",
    ),
    ResponseTime.MIN_5_TO_30: Driver(
        code=DriverCode.SLOW_RESPONSE,
        title="Response Window Slipping",
        description=(
            "A 5-30 minute wait lets some inquiries contact the next clinic on their list."
        ),
    ),
    ResponseTime.MIN_30_TO_2H: Driver(
        code=DriverCode.SLOW_RESPONSE,
        title="Slow Response Window",
        description="Responses after 30 minutes lose attention fast.",
    ),
    ResponseTime.SAME_DAY: Driver(
        code=DriverCode.SLOW_RESPONSE,
        title="Same-Day Response Lag",
        description=(
            "Waiting until later in the day means many inquiries have already booked elsewhere."
        ),
    ),
    ResponseTime.NEXT_DAY: Driver(
        code=DriverCode.SLOW_RESPONSE,
        title="Next-Day Response Gap",
        description=(
            "By the next day, most inquiries have moved on or forgotten why they reached out."
        ),
    ),
}

PERSISTENCE_DRIVERS: Dict[FollowUpDepth, Driver] = {
    FollowUpDepth.FOUR_TO_SIX: Driver(
        code=DriverCode.FOLLOW_UP_EARLY,
        title="Follow-Up Persistence (Working)",
        description="4-6 touches matches how many attempts most inquiries need to convert.",
    ),
    FollowUpDepth.TWO_TO_THREE: Driver(
        code=DriverCode.FOLLOW_UP_EARLY,
        title="Follow-Up Ends Early",
        description=(
            "Most inquiries need 2-6 touches to convert; stopping at 2-3 leaves some unconverted."
        ),
    ),
    FollowUpDepth.ONE: Driver(
        code=DriverCode.FOLLOW_UP_EARLY,
        title="Follow-Up Ends Too Early",
        description=(
            "A single attempt misses everyone who was busy the first time you reached out."
        ),
    ),
    FollowUpDepth.NOT_SURE: Driver(
        code=DriverCode.FOLLOW_UP_EARLY,
        title="Follow-Up Not Tracked",
        description="When follow-up isn't tracked, leakage becomes invisible.",
    ),
}

COVERAGE_DRIVERS: Dict[AfterHoursCoverage, Driver] = {
    AfterHoursCoverage.YES: Driver(
        code=DriverCode.AFTER_HOURS_GAPS,
        title="After-Hours Coverage (Working)",
        description="Evening and weekend inquiries get a timely response.",
    ),
    AfterHoursCoverage.SOMETIMES: Driver(
        code=DriverCode.AFTER_HOURS_GAPS,
        title="Inconsistent After-Hours Coverage",
        description="Patchy evening/weekend coverage creates gaps where inquiries go cold.",
    ),
    AfterHoursCoverage.NO: Driver(
        code=DriverCode.AFTER_HOURS_GAPS,
        title="After-Hours Coverage Gaps",
        description="Missed evenings/weekends create silent drop-off.",
    ),
}

def get_top_drivers(inputs: CalculatorInputs) -> List[Driver]:
    """
    Return the three leakage drivers for a set of answers.

    Always [speed, persistence, coverage]; never sorted, filtered or deduplicated.
    """
    return [
        SPEED_DRIVERS[inputs.responseTime],
        PERSISTENCE_DRIVERS[inputs.followUpDepth],
        COVERAGE_DRIVERS[inputs.afterHours],
    ]


def get_top_driver_codes(inputs: CalculatorInputs) -> List[str]:
    """
    Return the driver codes stored with a submission.

    Identical for every input: ["slowResponse", "followUpEarly", "afterHoursGaps"].
    """
    return [driver.code.value for driver in get_top_drivers(inputs)]
