"""
Backend API package initialization.

This package contains FastAPI router modules for the Follow-Up Health backend:
- submit: Public calculator endpoints (calculate, submit)
- auth: Admin console sign-in, sign-out and session check
- submissions: Admin submission listing, stats and CRUD
- email_templates: Admin per-grade-range email templates and preview

All routers are mounted under /api by backend.main.
"""

from fastapi import APIRouter

# Import router modules
from backend.api.submit import router as submit_router
from backend.api.auth import router as auth_router
from backend.api.submissions import router as submissions_router
from backend.api.email_templates import router as email_templates_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(submit_router, tags=["calculator"])  # /calculate and /submit
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(submissions_router, prefix="/submissions", tags=["submissions"])
api_router.include_router(email_templates_router, prefix="/email-templates", tags=["email-templates"])

# Export all routers for selective imports
__all__ = [
    "api_router",
    "submit_router",
    "auth_router",
    "submissions_router",
    "email_templates_router",
]
