"""Health check endpoints for monitoring."""

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import DB
from app.core.config import settings
from app.utils.envelopes import api_success

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


async def _database_status(db: DB) -> str:
    try:
        await db.execute(text("SELECT 1"))
        return "healthy"
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        return f"unhealthy: {str(e)}"


@router.get("/health", response_model=dict)
async def health_check(db: DB):
    """Health check endpoint for load balancers and monitoring."""
    db_status = await _database_status(db)
    health_data = {
        "status": "ok" if db_status == "healthy" else "degraded",
        "service": settings.APP_NAME,
        "database": db_status,
        "workflowQueue": "configured" if settings.SERVICEBUS_CONNECTION_STRING else "not configured",
        "reminderLeadDays": list(settings.reminder_lead_days),
    }
    return api_success(health_data)


@router.get("/health/ready", response_model=dict)
async def readiness_check(db: DB):
    """Readiness probe: database reachable."""
    return api_success({"ready": await _database_status(db) == "healthy"})


@router.get("/health/live", response_model=dict)
async def liveness_check():
    """Liveness probe."""
    return api_success({"alive": True})
