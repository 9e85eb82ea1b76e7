from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_owner, require_writable_owner
from ..models import BusinessOwner
from ..schemas import DashboardTotals, OverdueReport, OverdueScanResult
from ..services import reports as reports_service

router = APIRouter()


@router.get("/dashboard/totals", response_model=DashboardTotals)
def dashboard_totals(
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> DashboardTotals:
    return reports_service.dashboard_totals(db, owner.id)


@router.get("/overdue-reminders", response_model=OverdueReport)
def overdue_reminders(
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> OverdueReport:
    return reports_service.overdue_reminders(db, owner.id)


@router.post("/overdue-reminders/scan", response_model=OverdueScanResult)
def scan_overdue(
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> OverdueScanResult:
    return OverdueScanResult(marked=reports_service.mark_overdue(db, owner.id))
