from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from inventory_tracker.dependencies import get_db, require_auth
from inventory_tracker.schemas.dashboard import DashboardSummary
from inventory_tracker.services.dashboard_service import dashboard_summary

router = APIRouter(prefix="/dashboard", tags=["Dashboard"], dependencies=[Depends(require_auth)])


@router.get("", response_model=DashboardSummary)
def get_dashboard(db: Session = Depends(get_db)):
    return dashboard_summary(db)


__all__ = ["router"]
