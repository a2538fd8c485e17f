"""Health checks and monitoring endpoints"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.api.dependencies import get_db

logger = logging.getLogger(__name__)

health_router = APIRouter()


@health_router.get("/")
def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "booking-api"}


@health_router.get("/detailed")
def detailed_health_check(db: Session = Depends(get_db)):
    """Detailed health check with dependencies"""
    checks = {
        "api": "healthy",
        "database": "unknown",
        "overall": "unknown"
    }

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        checks["database"] = f"unhealthy: {str(e)}"

    if all(status == "healthy" for key, status in checks.items() if key != "overall"):
        checks["overall"] = "healthy"
    else:
        checks["overall"] = "degraded"

    return checks
