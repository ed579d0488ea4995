# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

import os
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.supabase_client import SupabaseClient

router = APIRouter()

API_VERSION = "1.0.0"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual dependency checks."""
    catalog: str
    local_store: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health status for load balancers and monitoring."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Checks that the catalog can be read from Supabase and that the local
    draft store directory is writable.
    """
    checks = ChecksResponse(catalog="unknown", local_store="unknown")

    try:
        client = SupabaseClient.get_client()
        client.table("items").select("id").limit(1).execute()
        checks.catalog = "healthy"
    except Exception as e:
        checks.catalog = f"unhealthy: {str(e)[:50]}"

    store_dir = Path(settings.LOCAL_STORE_DIR)
    try:
        store_dir.mkdir(parents=True, exist_ok=True)
        checks.local_store = "healthy" if os.access(store_dir, os.W_OK) else "unhealthy: not writable"
    except OSError as e:
        checks.local_store = f"unhealthy: {str(e)[:50]}"

    all_healthy = checks.catalog == "healthy" and checks.local_store == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live")
async def liveness_check():
    """Whether the service process is alive."""
    return {"status": "alive", "timestamp": _now()}
