"""
Health Check Router

Provides health check endpoints for monitoring application status.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import text
from app.db.config import get_catalog_sessions
from app.models.course import HealthCheckResponse
from app.utils.feature_flags import feature_flags
import logging
import time
import os
from datetime import datetime

# Initialize router
router = APIRouter()
logger = logging.getLogger(__name__)

# Application start time for uptime calculation
_start_time = time.time()


@router.get("/health", response_model=HealthCheckResponse, summary="Basic Health Check")
async def health_check():
    """
    Basic health check endpoint

    Returns application status, version, and environment information.
    This endpoint is used by load balancers and monitoring systems.
    """
    return HealthCheckResponse(
        status="healthy",
        version=os.getenv("APP_VERSION", "1.0.0"),
        environment=os.getenv("ENVIRONMENT", "development"),
        timestamp=datetime.utcnow(),
        uptime=time.time() - _start_time
    )


@router.get("/health/detailed", summary="Detailed Health Check")
async def detailed_health_check(request: Request):
    """
    Detailed health check

    Reports background scheduler state, feature flags and any required
    configuration that is still missing.
    """
    schedulers = getattr(request.app.state, "schedulers", [])
    settings = getattr(request.app.state, "settings", None)
    missing = settings.missing_required() if settings else []

    return {
        "status": "degraded" if missing else "healthy",
        "version": os.getenv("APP_VERSION", "1.0.0"),
        "environment": os.getenv("ENVIRONMENT", "development"),
        "timestamp": datetime.utcnow().isoformat(),
        "uptime": time.time() - _start_time,
        "components": {
            "schedulers": [s.to_dict() for s in schedulers],
            "feature_flags": feature_flags.get_environment_info(),
            "missing_configuration": missing,
        },
    }


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check(sessions=Depends(get_catalog_sessions)):
    """
    Kubernetes-style readiness probe

    Returns 200 when the catalog store answers a trivial query, 503 otherwise.
    """
    try:
        async with sessions() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        raise HTTPException(
            status_code=503,
            detail="Application not ready: catalog store unavailable"
        )
    return {"status": "ready", "timestamp": datetime.utcnow().isoformat()}


@router.get("/health/live", summary="Liveness Check")
async def liveness_check():
    """
    Kubernetes-style liveness probe
    """
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "pid": os.getpid()
    }
