"""Health checks and monitoring endpoints"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from app.config.database import get_db
from app.core.route_permissions import ROUTE_PERMISSIONS
from app.models.role import Permission

logger = logging.getLogger(__name__)

health_router = APIRouter()


@health_router.get("")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "e-service-portal-api"}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """Detailed health check with database and permission catalog state"""
    checks = {
        "api": "healthy",
        "database": "unknown",
        "permission_catalog": "unknown",
        "overall": "unknown"
    }

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"

        seeded = db.query(Permission).count()
        expected = len(ROUTE_PERMISSIONS.permissions())
        checks["permission_catalog"] = "healthy" if seeded >= expected else f"unseeded: {seeded} rows"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        checks["database"] = f"unhealthy: {str(e)}"

    if all(status == "healthy" for status in checks.values() if status != "unknown"):
        checks["overall"] = "healthy"
    else:
        checks["overall"] = "degraded"

    return checks
