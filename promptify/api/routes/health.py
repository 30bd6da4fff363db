"""Health check endpoints for monitoring and load balancers."""

from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlmodel import text

from promptify.api.deps import SessionDep
from promptify.core.config import settings
from promptify.models import utc_now

router = APIRouter(tags=["health"])


def health_payload() -> dict[str, Any]:
    return {
        "status": "OK",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": utc_now().isoformat(),
    }


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> dict[str, Any]:
    """Returns 200 while the process is serving requests."""
    return health_payload()


@router.get("/health/ready")
def readiness_check(session: SessionDep) -> Any:
    """
    Readiness check - verifies the database is reachable.
    Returns 200 if ready to accept traffic, 503 if not ready.
    """
    checks = {**health_payload(), "status": "ready", "checks": {}}
    try:
        session.exec(text("SELECT 1"))
        checks["checks"]["database"] = "healthy"
    except Exception as e:
        checks["checks"]["database"] = f"unhealthy: {e}"
        checks["status"] = "not_ready"
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=checks)
    return checks
