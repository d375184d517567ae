"""
FastAPI router module for admin submission management.

All endpoints require an authenticated admin (CurrentAdminDep).

Key Endpoints:
- GET    /submissions             - Filtered, paginated list (newest first)
- HEAD   /submissions             - Headline counts as X-Total-Submissions / X-With-Email
- GET    /submissions/stats       - Headline counts as JSON with conversion rate
- GET    /submissions/{id}        - One submission
- POST   /submissions             - Admin-entered submission (results recomputed)
- PUT    /submissions/{id}        - Edit inputs/email (results recomputed)
- DELETE /submissions/{id}        - Remove a submission

Response Shapes:
- GET list: { submissions: [...], pagination: { page, limit, total, totalPages } }
- GET one: { submission: {...} }
- POST / PUT: { success: true, submission: {...} }
- DELETE: { success: true }

Stored results are never accepted from the client. Every write path runs the
scoring engine and driver selector on the submitted inputs.
"""

import logging
import math
import re
from datetime import date
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response

from backend.core.dependencies import CurrentAdminDep, DBSessionDep
from backend.models.schemas import (
    Pagination,
    SubmissionListResponse,
    SubmissionResponse,
    SubmissionStats,
    SubmissionWrite,
    normalize_email,
)
from backend.services.drivers import get_top_driver_codes
from backend.services.scoring import calculate_results
from backend.sql.submission_queries import (
    DELETE_SUBMISSION,
    INSERT_SUBMISSION,
    SELECT_SUBMISSION_BY_ID,
    SELECT_SUBMISSION_STATS,
    UPDATE_SUBMISSION,
    build_count_submissions_query,
    build_list_submissions_query,
    build_submission_filters,
    submission_values,
)


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT: int = 50

MAX_LIST_LIMIT: int = 200

# A letter, optionally followed by +/- (e.g. "B", "C+")
GRADE_FILTER_RE = re.compile(r"^[A-F][+-]?$")

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================


def _record_to_submission(record: Any) -> SubmissionResponse:
    return SubmissionResponse.model_validate(dict(record))


def _parse_submission_id(submission_id: str) -> str:
    """Reject ids that cannot be a stored UUID with the same 404 as a miss."""
    try:
        return str(UUID(submission_id))
    except ValueError:
        raise HTTPException(status_code=404, detail="Submission not found")


def _parse_grade_filter(grade: Optional[str]) -> Optional[str]:
    if grade is None or not grade.strip():
        return None
    value = grade.strip().upper()
    if not GRADE_FILTER_RE.match(value):
        raise HTTPException(status_code=400, detail="Invalid grade filter")
    return value


def _parse_has_email(has_email: Optional[str]) -> Optional[bool]:
    # Anything other than true/false means "no filter"
    if has_email == "true":
        return True
    if has_email == "false":
        return False
    return None


def _parse_date(value: Optional[str], name: str) -> Optional[date]:
    if value is None or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}, expected YYYY-MM-DD")


def _normalize_write_email(email: Optional[str]) -> Optional[str]:
    try:
        return normalize_email(email)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid email address")


async def _fetch_stats(db: Any) -> SubmissionStats:
    row = await db.fetchrow(SELECT_SUBMISSION_STATS)
    total = int(row["total"]) if row else 0
    with_email = int(row["with_email"]) if row else 0
    conversion_rate = round(with_email / total * 100, 1) if total > 0 else 0.0
    return SubmissionStats(total=total, withEmail=with_email, conversionRate=conversion_rate)


# =============================================================================
# GET /submissions - List Submissions
# =============================================================================


@router.get("", response_model=SubmissionListResponse)
async def list_submissions(
    admin: CurrentAdminDep,
    db: DBSessionDep,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(
        default=DEFAULT_LIST_LIMIT,
        ge=1,
        le=MAX_LIST_LIMIT,
        description="Rows per page",
    ),
    grade: Optional[str] = Query(default=None, description="Grade letter prefix, e.g. 'B'"),
    hasEmail: Optional[str] = Query(default=None, description="'true' or 'false'"),
    startDate: Optional[str] = Query(default=None, description="Inclusive start date"),
    endDate: Optional[str] = Query(default=None, description="Inclusive end date"),
) -> SubmissionListResponse:
    """
    List submissions newest first with optional filters.

    Raises:
        HTTPException 400: If grade or date filters are malformed.
        HTTPException 500: If database query fails.
    """
    where_clause, params = build_submission_filters(
        grade=_parse_grade_filter(grade),
        has_email=_parse_has_email(hasEmail),
        start_date=_parse_date(startDate, "startDate"),
        end_date=_parse_date(endDate, "endDate"),
    )

    try:
        sql, args = build_list_submissions_query(where_clause, params, page, limit)
        rows = await db.fetch(sql, *args)
        total = await db.fetchval(build_count_submissions_query(where_clause), *params)
        total = int(total or 0)

        return SubmissionListResponse(
            submissions=[_record_to_submission(row) for row in rows],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                totalPages=math.ceil(total / limit),
            ),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching submissions: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch submissions")


# =============================================================================
# HEAD /submissions and GET /submissions/stats - Headline Counts
# =============================================================================


@router.head("")
async def submission_count_headers(admin: CurrentAdminDep, db: DBSessionDep) -> Response:
    """Return headline counts as response headers with an empty body."""
    try:
        stats = await _fetch_stats(db)
    except Exception as e:
        logger.error(f"Error fetching submission stats: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch stats")

    return Response(
        status_code=200,
        headers={
            "X-Total-Submissions": str(stats.total),
            "X-With-Email": str(stats.withEmail),
        },
    )


@router.get("/stats", response_model=SubmissionStats)
async def submission_stats(admin: CurrentAdminDep, db: DBSessionDep) -> SubmissionStats:
    """
    Headline counts for the dashboard cards.

    conversionRate is the share of submissions that left an email, as a
    percentage rounded to one decimal (0.0 when there are no submissions).
    """
    try:
        return await _fetch_stats(db)
    except Exception as e:
        logger.error(f"Error fetching submission stats: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch stats")


# =============================================================================
# Single Submission CRUD
# =============================================================================


@router.get("/{submission_id}", response_model=Dict[str, SubmissionResponse])
async def get_submission(
    submission_id: str,
    admin: CurrentAdminDep,
    db: DBSessionDep,
) -> Dict[str, SubmissionResponse]:
    """Fetch one submission by id."""
    parsed_id = _parse_submission_id(submission_id)

    try:
        row = await db.fetchrow(SELECT_SUBMISSION_BY_ID, parsed_id)
        if not row:
            raise HTTPException(status_code=404, detail="Submission not found")
        return {"submission": _record_to_submission(row)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching submission {parsed_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch submission")


@router.post("", status_code=201)
async def create_submission(
    submission: SubmissionWrite,
    admin: CurrentAdminDep,
    db: DBSessionDep,
) -> Dict[str, Any]:
    """
    Create a submission on a clinic's behalf.

    Results and drivers are computed from the inputs exactly as in the public
    submit flow. No email is sent.
    """
    email = _normalize_write_email(submission.email)
    inputs = submission.to_inputs()

    try:
        results = calculate_results(inputs)
        row = await db.fetchrow(
            INSERT_SUBMISSION,
            *submission_values(inputs, results, get_top_driver_codes(inputs), email),
        )
        if not row:
            raise HTTPException(status_code=500, detail="Failed to create submission")

        logger.info(f"Admin {admin.email} created submission {row['id']} (grade={results.grade})")
        return {"success": True, "submission": _record_to_submission(row)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating submission: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create submission")


@router.put("/{submission_id}")
async def update_submission(
    submission_id: str,
    submission: SubmissionWrite,
    admin: CurrentAdminDep,
    db: DBSessionDep,
) -> Dict[str, Any]:
    """Edit a submission's inputs and email; results and drivers are recomputed."""
    parsed_id = _parse_submission_id(submission_id)
    email = _normalize_write_email(submission.email)
    inputs = submission.to_inputs()

    try:
        results = calculate_results(inputs)
        row = await db.fetchrow(
            UPDATE_SUBMISSION,
            parsed_id,
            *submission_values(inputs, results, get_top_driver_codes(inputs), email),
        )
        if not row:
            raise HTTPException(status_code=404, detail="Submission not found")

        logger.info(f"Admin {admin.email} updated submission {parsed_id} (grade={results.grade})")
        return {"success": True, "submission": _record_to_submission(row)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating submission {parsed_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update submission")


@router.delete("/{submission_id}")
async def delete_submission(
    submission_id: str,
    admin: CurrentAdminDep,
    db: DBSessionDep,
) -> Dict[str, Any]:
    """Delete a submission."""
    parsed_id = _parse_submission_id(submission_id)

    try:
        row = await db.fetchrow(DELETE_SUBMISSION, parsed_id)
        if not row:
            raise HTTPException(status_code=404, detail="Submission not found")

        logger.info(f"Admin {admin.email} deleted submission {parsed_id}")
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting submission {parsed_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete submission")
