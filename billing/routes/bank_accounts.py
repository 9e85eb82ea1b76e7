from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_owner, require_writable_owner
from ..models import BusinessOwner
from ..schemas import (
    BankAccountCreate,
    BankAccountRead,
    BankAccountUpdate,
    BankValidationRequest,
    BankValidationResult,
)
from ..services import bank_accounts as bank_service

router = APIRouter()


@router.get("/", response_model=list[BankAccountRead])
def list_accounts(
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> list[BankAccountRead]:
    return bank_service.list_accounts(db, owner.id)


@router.post("/", response_model=BankAccountRead, status_code=status.HTTP_201_CREATED)
def add_account(
    payload: BankAccountCreate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> BankAccountRead:
    return bank_service.add_account(db, owner, payload)


@router.post("/validate", response_model=BankValidationResult)
def validate_details(
    payload: BankValidationRequest,
    owner: BusinessOwner = Depends(get_current_owner),
) -> BankValidationResult:
    return bank_service.validate_details(payload.ifsc_code, payload.pan_card_number)


@router.put("/{account_id}", response_model=BankAccountRead)
def update_account(
    account_id: int,
    payload: BankAccountUpdate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> BankAccountRead:
    return bank_service.update_account(db, owner, account_id, payload)


@router.put("/{account_id}/primary", response_model=BankAccountRead)
def set_primary(
    account_id: int,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> BankAccountRead:
    return bank_service.set_primary(db, owner, account_id)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: int,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> None:
    bank_service.delete_account(db, owner, account_id)
