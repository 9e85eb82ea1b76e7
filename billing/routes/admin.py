from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_admin
from ..models import BusinessOwner
from ..schemas import (
    AdminActionRequest,
    AdminLoginRequest,
    AdminToken,
    BusinessDeleteResult,
    BusinessStatusChange,
    BusinessSummary,
)
from ..security import ADMIN_ROLE
from ..services import admin as admin_service

router = APIRouter()


def _summary(db: Session, owner: BusinessOwner) -> BusinessSummary:
    summary = BusinessSummary.model_validate(owner)
    counts = admin_service.business_counts(db, owner)
    summary.invoice_count = counts["invoice_count"]
    summary.customer_count = counts["customer_count"]
    return summary


@router.post("/login", response_model=AdminToken)
def admin_login(payload: AdminLoginRequest) -> AdminToken:
    token = admin_service.admin_login(payload.username, payload.password)
    return AdminToken(access_token=token, role=ADMIN_ROLE)


@router.get("/businesses", response_model=list[BusinessSummary])
def list_businesses(
    search: str | None = None,
    status: str | None = None,
    admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> list[BusinessSummary]:
    rows = admin_service.list_businesses(db, search, status)
    summaries = []
    for row in rows:
        summary = BusinessSummary.model_validate(row["owner"])
        summary.invoice_count = row["invoice_count"]
        summary.customer_count = row["customer_count"]
        summaries.append(summary)
    return summaries


@router.get("/businesses/{business_id}", response_model=BusinessSummary)
def get_business(
    business_id: int,
    admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> BusinessSummary:
    return _summary(db, admin_service.get_business(db, business_id))


@router.put("/businesses/{business_id}/status", response_model=BusinessSummary)
def set_status(
    business_id: int,
    payload: BusinessStatusChange,
    admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> BusinessSummary:
    owner = admin_service.set_status(
        db, business_id, payload.status, admin, payload.reason
    )
    return _summary(db, owner)


@router.put("/businesses/{business_id}/lock", response_model=BusinessSummary)
def lock_business(
    business_id: int,
    payload: AdminActionRequest | None = None,
    admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> BusinessSummary:
    reason = payload.reason if payload else None
    return _summary(db, admin_service.set_locked(db, business_id, True, admin, reason))


@router.put("/businesses/{business_id}/unlock", response_model=BusinessSummary)
def unlock_business(
    business_id: int,
    payload: AdminActionRequest | None = None,
    admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> BusinessSummary:
    reason = payload.reason if payload else None
    return _summary(db, admin_service.set_locked(db, business_id, False, admin, reason))


@router.post("/businesses/{business_id}/logout", response_model=BusinessSummary)
def force_logout(
    business_id: int,
    payload: AdminActionRequest | None = None,
    admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> BusinessSummary:
    reason = payload.reason if payload else None
    return _summary(db, admin_service.force_logout(db, business_id, admin, reason))


@router.delete("/businesses/{business_id}", response_model=BusinessDeleteResult)
def delete_business(
    business_id: int,
    admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> BusinessDeleteResult:
    return admin_service.delete_business(db, business_id, admin)
