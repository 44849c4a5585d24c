"""
Dashboard statistics endpoint.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bank_ledger.api.deps import get_current_subject
from bank_ledger.models.base import get_db
from bank_ledger.services.query_service import QueryService
from bank_ledger.schemas.stats import DashboardStats

router = APIRouter(
    prefix="/stats",
    tags=["Stats"],
    dependencies=[Depends(get_current_subject)],
)


@router.get("", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db)):
    """Customer count, account count and total balance held."""
    return QueryService(db).dashboard_stats()
