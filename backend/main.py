"""
FastAPI application entry point for the Follow-Up Health API.

This module serves as the central orchestration file for the Python backend service layer.
It configures logging and CORS, ensures the database schema on startup, registers the API
routers under /api, and starts the ASGI server when run directly.

Routes:
- /api/calculate, /api/submit: public calculator endpoints
- /api/auth/*: admin console sessions
- /api/submissions, /api/email-templates: admin-only management
- /health, /: liveness and API info
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import __version__
from backend.api import api_router
from backend.core.config import get_settings
from backend.core.database import close_db, ensure_schema, init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()
logging.getLogger().setLevel(settings.log_level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Initialize database connection pool
        - Create any missing tables

    On shutdown:
        - Close database connection pool
    """
    logger.info(f"Follow-Up Health API starting (env={settings.app_env})")
    try:
        await init_db()
        await ensure_schema()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        # /calculate and /health work without a database; submit persists best-effort

    yield

    logger.info("Follow-Up Health API shutting down")
    try:
        await close_db()
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


# Create FastAPI application
app = FastAPI(
    title="Follow-Up Health API",
    version=__version__,
    description=(
        "Backend for the Follow-Up Health Dashboard. Scores clinic inquiry-handling "
        "practices, emails grade-specific reports and serves the admin console."
    ),
    lifespan=lifespan,
)

# Credentials are required for the admin_session cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Submissions", "X-With-Email"],
)

app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Follow-Up Health API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
