"""Service-level routes."""

from datetime import datetime, timezone

from fastapi import APIRouter

from socialnet.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Status, timestamp in ISO8601 format, and the credential store in use
    """
    settings = get_settings()
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "credential_store": settings.credential_store,
    }

    if settings.credential_store == "postgres":
        from socialnet.database import health_check as db_health_check

        db_healthy = await db_health_check()
        health_status["database"] = "healthy" if db_healthy else "unhealthy"
        if not db_healthy:
            health_status["status"] = "degraded"

    return health_status
