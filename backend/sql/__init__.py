"""
SQL Query Module for the Follow-Up Health backend.

Provides parameterized SQL for:
- Schema bootstrap (schema)
- Calculator submissions (submission_queries)
- Per-grade-range email templates (template_queries)
- Admin console accounts (admin_queries)

Follows Repository Pattern for clean separation between business logic and
data access. All queries use asyncpg $n placeholders.

Example usage:
    from backend.sql import (
        INSERT_SUBMISSION,
        build_submission_filters,
        build_list_submissions_query,
    )

    where_clause, params = build_submission_filters(grade='B', has_email=True)
    sql, args = build_list_submissions_query(where_clause, params, page=1, limit=50)
    rows = await conn.fetch(sql, *args)
"""

# =============================================================================
# SCHEMA
# =============================================================================

from backend.sql.schema import SCHEMA_STATEMENTS

# =============================================================================
# SUBMISSION QUERIES
# =============================================================================

from backend.sql.submission_queries import (
    SUBMISSION_COLUMNS,
    INSERT_SUBMISSION,
    SELECT_SUBMISSION_BY_ID,
    UPDATE_SUBMISSION,
    DELETE_SUBMISSION,
    SELECT_SUBMISSION_STATS,
    SELECT_DAILY_SUBMISSION_SUMMARY,
    submission_values,
    build_submission_filters,
    build_list_submissions_query,
    build_count_submissions_query,
)

# =============================================================================
# TEMPLATE QUERIES
# =============================================================================

from backend.sql.template_queries import (
    SELECT_ALL_TEMPLATES,
    SELECT_TEMPLATE_BY_GRADE_RANGE,
    UPSERT_TEMPLATE,
)

# =============================================================================
# ADMIN QUERIES
# =============================================================================

from backend.sql.admin_queries import (
    SELECT_ADMIN_BY_EMAIL,
    UPSERT_ADMIN,
)


__all__ = [
    # Schema
    "SCHEMA_STATEMENTS",
    # Submissions
    "SUBMISSION_COLUMNS",
    "INSERT_SUBMISSION",
    "SELECT_SUBMISSION_BY_ID",
    "UPDATE_SUBMISSION",
    "DELETE_SUBMISSION",
    "SELECT_SUBMISSION_STATS",
    "SELECT_DAILY_SUBMISSION_SUMMARY",
    "submission_values",
    "build_submission_filters",
    "build_list_submissions_query",
    "build_count_submissions_query",
    # Templates
    "SELECT_ALL_TEMPLATES",
    "SELECT_TEMPLATE_BY_GRADE_RANGE",
    "UPSERT_TEMPLATE",
    # Admin users
    "SELECT_ADMIN_BY_EMAIL",
    "UPSERT_ADMIN",
]
