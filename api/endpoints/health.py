"""
RecipeShare Health Check Endpoints
Service liveness and database connectivity
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
import time

from core.config import settings
from core.database import DatabaseHealthCheck
from utils.responses import with_timestamp

router = APIRouter()

STARTED_AT = time.monotonic()


@router.get("")
async def health_check():
    """
    Health check with a database probe

    Returns 503 with status "degraded" when the database does not answer.
    """
    database = DatabaseHealthCheck.check_connection()
    healthy = database["status"] == "connected"

    payload = with_timestamp({
        "status": "healthy" if healthy else "degraded",
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": settings.ENVIRONMENT,
        "version": settings.VERSION,
        "database": database,
    })
    if healthy:
        return payload
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)
