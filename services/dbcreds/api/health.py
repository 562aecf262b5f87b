"""
Health check endpoints for the dbcreds role service.

/health answers as long as the process serves requests. /ready also
requires the target database and the role storage to respond.
"""

from fastapi import APIRouter, Response, status

from dbcreds.db.session import get_db_health
from dbcreds.logging_config import get_logger
from dbcreds.storage import get_storage_health

router = APIRouter(tags=["health"])
logger = get_logger(__name__)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    """Liveness probe endpoint."""
    return {"status": "healthy"}


@router.get("/ready", status_code=status.HTTP_200_OK)
async def ready(response: Response) -> dict[str, str | dict[str, str]]:
    """Readiness probe endpoint.

    Pings the target database and the storage backend.
    """
    checks = {
        "database": "healthy" if await get_db_health() else "unhealthy",
        "storage": "healthy" if await get_storage_health() else "unhealthy",
    }

    if "unhealthy" in checks.values():
        logger.warning("Readiness check failed", checks=checks)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not ready", "checks": checks}

    return {"status": "ready", "checks": checks}
