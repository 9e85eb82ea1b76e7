from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_owner, require_writable_owner
from ..models import BusinessOwner
from ..schemas import InvoiceDefaults, SettingsRead, SettingsUpdate
from ..services import business_settings as settings_service

router = APIRouter()


@router.get("/", response_model=SettingsRead)
def get_settings(
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> SettingsRead:
    return settings_service.get_or_create_settings(db, owner)


@router.put("/", response_model=SettingsRead)
def update_settings(
    payload: SettingsUpdate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> SettingsRead:
    return settings_service.update_settings(db, owner, payload)


@router.get("/invoice-defaults", response_model=InvoiceDefaults)
def invoice_defaults(
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> InvoiceDefaults:
    return settings_service.invoice_defaults(db, owner)
