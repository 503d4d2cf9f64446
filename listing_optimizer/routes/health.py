# listing_optimizer/routes/health.py
"""
Health check endpoints: liveness, readiness and the database status probe
used by the browser client.
"""

import time
from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from listing_optimizer.config import settings
from listing_optimizer.db.pool import db_health_check
from listing_optimizer.db.postgres import check_db
from listing_optimizer.services.openai_service import openai_service

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "listing-optimizer"}


@router.get("/api/health")
async def api_health():
    """Database connectivity probe. 503 when the database cannot be reached."""
    db_result = await check_db()
    timestamp = datetime.now(UTC).isoformat()

    if db_result is True:
        return {"status": "healthy", "timestamp": timestamp, "database": "connected"}

    return JSONResponse(
        status_code=503,
        content={
            "status": "unhealthy",
            "timestamp": timestamp,
            "database": "disconnected",
            "error": db_result,
        },
    )


@router.get("/readyz")
async def readyz():
    """
    Readiness check covering the database pool and configuration.
    """
    checks = {}
    overall_ok = True

    # 1) Database pool health check
    t0 = time.time()
    try:
        db_health = await db_health_check()
        is_healthy = db_health.get("healthy", False)

        checks["database"] = {
            "ok": is_healthy,
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }

        if "pool_stats" in db_health:
            checks["database"].update(db_health["pool_stats"])

        if "warnings" in db_health:
            checks["database"]["warnings"] = db_health["warnings"]

        if not is_healthy:
            checks["database"]["error"] = db_health.get("error", "Database unhealthy")

        overall_ok = overall_ok and is_healthy

    except Exception as e:
        checks["database"] = {
            "ok": False,
            "error": f"{type(e).__name__}: {e}",
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        overall_ok = False

    # 2) AI service configuration
    ai_health = await openai_service.health_check()
    checks["openai"] = {
        "ok": ai_health["healthy"],
        "client_initialized": ai_health["client_initialized"],
    }
    overall_ok = overall_ok and ai_health["healthy"]

    # 3) Configuration checks
    config_issues = []

    if not settings.DATABASE_URL:
        config_issues.append("DATABASE_URL not set")

    if not settings.OPENAI_API_KEY:
        config_issues.append("OPENAI_API_KEY not set")

    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "environment": settings.environment,
        "max_optimizations_per_day": settings.MAX_OPTIMIZATIONS_PER_DAY,
    }
    overall_ok = overall_ok and not config_issues

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
