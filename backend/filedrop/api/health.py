"""
Health check endpoint.
Verifies database connectivity.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from filedrop.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.
    Returns status of the database connection.
    """
    health_status = {
        "status": "healthy",
        "database": "unknown"
    }
    
    try:
        await db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception:
        logger.error(
            "Health check database query failed",
            extra={"event": "health_check_failed"},
            exc_info=True
        )
        health_status["database"] = "error"
        health_status["status"] = "unhealthy"
    
    if health_status["status"] == "unhealthy":
        raise HTTPException(status_code=503, detail=health_status)
    
    return health_status
