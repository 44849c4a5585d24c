"""
Health check endpoint.

Used by load balancers and monitoring to verify the
application is running and can reach its database.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bank_ledger.models.base import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Return application health status including database connectivity.

    If the database check fails, the endpoint still answers
    but reports itself as degraded.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "bank-ledger",
        "database": db_status,
    }
