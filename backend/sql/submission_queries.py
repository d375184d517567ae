"""
Submission SQL query module for the Follow-Up Health backend.

Parameterized PostgreSQL queries for the submissions table: the public submit
flow inserts rows, and the admin console lists, filters, counts, edits and
deletes them.

Every user-supplied value travels as a $n parameter. The only dynamic SQL is
the WHERE clause assembled by build_submission_filters(), and it is built
from fixed condition strings; filter values are never interpolated.

Filter semantics:
- grade: letter prefix match ('B' matches B+, B and B-)
- has_email: True -> email IS NOT NULL, False -> email IS NULL
- start_date / end_date: inclusive calendar-day bounds on created_at
"""

from datetime import date
from typing import Any, List, Optional, Tuple


# id is cast so rows map straight onto the str-typed response models
SUBMISSION_COLUMNS = """
    id::text AS id,
    created_at,
    monthly_inquiries,
    response_time,
    follow_up_depth,
    patient_value,
    after_hours,
    grade,
    grade_score,
    loss_rate,
    dropoff_pct,
    risk_low,
    risk_high,
    drivers,
    email
"""

# $1-$5 inputs, $6-$11 results, $12 drivers, $13 email
INSERT_SUBMISSION = f"""
INSERT INTO submissions (
    monthly_inquiries, response_time, follow_up_depth, patient_value, after_hours,
    grade, grade_score, loss_rate, dropoff_pct, risk_low, risk_high,
    drivers, email
) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
RETURNING {SUBMISSION_COLUMNS}
"""

SELECT_SUBMISSION_BY_ID = f"""
SELECT {SUBMISSION_COLUMNS}
FROM submissions
WHERE id = $1::uuid
"""

# $1 id, then the same 13 values as INSERT_SUBMISSION
UPDATE_SUBMISSION = f"""
UPDATE submissions SET
    monthly_inquiries = $2,
    response_time = $3,
    follow_up_depth = $4,
    patient_value = $5,
    after_hours = $6,
    grade = $7,
    grade_score = $8,
    loss_rate = $9,
    dropoff_pct = $10,
    risk_low = $11,
    risk_high = $12,
    drivers = $13,
    email = $14
WHERE id = $1::uuid
RETURNING {SUBMISSION_COLUMNS}
"""

DELETE_SUBMISSION = """
DELETE FROM submissions
WHERE id = $1::uuid
RETURNING id::text AS id
"""

SELECT_SUBMISSION_STATS = """
SELECT
    COUNT(*) AS total,
    COUNT(*) FILTER (WHERE email IS NOT NULL) AS with_email
FROM submissions
"""

# Lead digest: one calendar day of submissions, bucketed by first grade letter
SELECT_DAILY_SUBMISSION_SUMMARY = """
SELECT
    COUNT(*) AS total,
    COUNT(*) FILTER (WHERE email IS NOT NULL) AS with_email,
    COUNT(*) FILTER (WHERE grade LIKE 'A%') AS grade_a,
    COUNT(*) FILTER (WHERE grade LIKE 'B%' OR grade LIKE 'C%') AS grade_bc,
    COUNT(*) FILTER (WHERE grade NOT LIKE 'A%' AND grade NOT LIKE 'B%' AND grade NOT LIKE 'C%') AS grade_df,
    COALESCE(AVG((risk_low + risk_high) / 2.0), 0) AS avg_risk_midpoint
FROM submissions
WHERE created_at >= $1::date
  AND created_at < ($1::date + 1)
"""


def submission_values(
    inputs: Any,
    results: Any,
    driver_codes: List[str],
    email: Optional[str],
) -> Tuple[Any, ...]:
    """
    Flatten inputs, results and drivers into the 13 positional values shared by
    INSERT_SUBMISSION and UPDATE_SUBMISSION.

    Args:
        inputs: CalculatorInputs
        results: CalculationResults computed from those inputs
        driver_codes: Output of get_top_driver_codes()
        email: Normalized email or None
    """
    return (
        inputs.monthlyInquiries,
        inputs.responseTime.value,
        inputs.followUpDepth.value,
        inputs.patientValue.value,
        inputs.afterHours.value,
        results.grade,
        results.gradeScore,
        results.lossRate,
        results.dropoffPercent,
        results.revenueAtRisk.low,
        results.revenueAtRisk.high,
        list(driver_codes),
        email,
    )


def build_submission_filters(
    grade: Optional[str] = None,
    has_email: Optional[bool] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[str, List[Any]]:
    """
    Build the WHERE clause and parameters for the submissions list.

    Returns:
        Tuple of (where_clause, params). where_clause is '' when no filter
        applies, otherwise 'WHERE ...' using $1..$n in params order.

    Example:
        >>> build_submission_filters(grade='B', has_email=True)
        ('WHERE grade LIKE $1 AND email IS NOT NULL', ['B%'])
    """
    conditions: List[str] = []
    params: List[Any] = []

    if grade:
        params.append(f"{grade}%")
        conditions.append(f"grade LIKE ${len(params)}")

    if has_email is True:
        conditions.append("email IS NOT NULL")
    elif has_email is False:
        conditions.append("email IS NULL")

    if start_date is not None:
        params.append(start_date)
        conditions.append(f"created_at >= ${len(params)}::date")

    if end_date is not None:
        params.append(end_date)
        conditions.append(f"created_at < (${len(params)}::date + 1)")

    where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where_clause, params


def build_list_submissions_query(
    where_clause: str,
    params: List[Any],
    page: int,
    limit: int,
) -> Tuple[str, List[Any]]:
    """
    Newest-first page of submissions for an already-built filter.

    LIMIT and OFFSET take the next two parameter slots after the filters.
    """
    offset = (page - 1) * limit
    limit_index = len(params) + 1
    sql = f"""
SELECT {SUBMISSION_COLUMNS}
FROM submissions
{where_clause}
ORDER BY created_at DESC
LIMIT ${limit_index} OFFSET ${limit_index + 1}
"""
    return sql, [*params, limit, offset]


def build_count_submissions_query(where_clause: str) -> str:
    """Total row count for the same filter as the list query."""
    return f"SELECT COUNT(*) AS count FROM submissions {where_clause}"
