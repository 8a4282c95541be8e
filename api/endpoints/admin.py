"""
RecipeShare Admin Endpoints
Database schema lifecycle: initialize, reset, force reset and status
"""

from fastapi import APIRouter
import structlog

from core.config import settings
from core.database import check_tables_exist, create_tables, drop_tables, force_drop_everything
from core.dependencies import AdminAccess
from core.exceptions import server_error
from middleware.logging import log_business_event
from utils.responses import with_timestamp

logger = structlog.get_logger()
router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[AdminAccess])


def failure_message(error: Exception) -> str:
    """Expose database errors outside production only"""
    return "Internal server error" if settings.is_production else str(error)


@router.post("/init")
async def initialize_database():
    """Create any missing tables and seed the default categories"""
    try:
        tables = create_tables()
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise server_error("Database initialization failed", failure_message(e))

    log_business_event("database_initialized", {"tables": len(tables)})
    return with_timestamp({"message": "Database initialized successfully"})


@router.post("/reset")
async def reset_database():
    """Drop and recreate every application table"""
    try:
        drop_tables()
        create_tables()
    except Exception as e:
        logger.error("Database reset failed", error=str(e))
        raise server_error("Database reset failed", failure_message(e))

    log_business_event("database_reset", {"mode": "reset"})
    return with_timestamp({
        "message": "Database reset successfully",
        "warning": "All data has been deleted",
    })


@router.post("/force-reset")
async def force_reset_database():
    """Drop every table in the database, including foreign ones, then recreate the schema"""
    try:
        force_drop_everything()
        create_tables()
    except Exception as e:
        logger.error("Database force reset failed", error=str(e))
        raise server_error("Database force reset failed", failure_message(e))

    log_business_event("database_reset", {"mode": "force"})
    return with_timestamp({
        "message": "Database force reset successfully",
        "warning": "All data has been completely wiped",
    })


@router.get("/status")
async def database_status():
    try:
        tables = check_tables_exist()
    except Exception as e:
        logger.error("Database status check failed", error=str(e))
        raise server_error("Failed to get database status", failure_message(e))

    return with_timestamp({"status": "connected", "tables": tables, "tableCount": len(tables)})
