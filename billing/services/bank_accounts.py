import logging
import re

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
from ..models import BankAccount, BusinessOwner
from ..schemas import BankAccountCreate, BankAccountUpdate

logger = logging.getLogger(__name__)

IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
ACCOUNT_TYPES = ("Current", "Savings", "Other")


def _normalize_code(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip().upper()
    return value or None


def is_valid_ifsc(value: str | None) -> bool:
    return bool(value) and IFSC_PATTERN.match(value) is not None


def is_valid_pan(value: str | None) -> bool:
    return bool(value) and PAN_PATTERN.match(value) is not None


def validate_details(ifsc_code: str | None, pan_card_number: str | None) -> dict:
    ifsc = _normalize_code(ifsc_code)
    pan = _normalize_code(pan_card_number)
    return {
        "ifsc_valid": is_valid_ifsc(ifsc) if ifsc is not None else None,
        "pan_valid": is_valid_pan(pan) if pan is not None else None,
    }


def _check_fields(changes: dict) -> dict:
    if "ifsc_code" in changes:
        changes["ifsc_code"] = _normalize_code(changes["ifsc_code"])
        if changes["ifsc_code"] and not is_valid_ifsc(changes["ifsc_code"]):
            raise ValidationError("Invalid IFSC code format.", field="ifsc_code")
    if "pan_card_number" in changes:
        changes["pan_card_number"] = _normalize_code(changes["pan_card_number"])
        if changes["pan_card_number"] and not is_valid_pan(changes["pan_card_number"]):
            raise ValidationError("Invalid PAN format.", field="pan_card_number")
    if "account_type" in changes and changes["account_type"] not in ACCOUNT_TYPES:
        raise ValidationError(
            "Account type must be one of: " + ", ".join(ACCOUNT_TYPES),
            field="account_type",
        )
    return changes


def list_accounts(db: Session, owner_id: int) -> list[BankAccount]:
    return list(
        db.scalars(
            select(BankAccount)
            .where(BankAccount.owner_id == owner_id)
            .order_by(BankAccount.is_primary.desc(), BankAccount.id)
        )
    )


def primary_account(db: Session, owner_id: int) -> BankAccount | None:
    """The active primary account, else the first active one."""
    return db.scalar(
        select(BankAccount)
        .where(BankAccount.owner_id == owner_id, BankAccount.is_active.is_(True))
        .order_by(BankAccount.is_primary.desc(), BankAccount.id)
        .limit(1)
    )


def get_account(db: Session, owner_id: int, account_id: int) -> BankAccount:
    account = db.get(BankAccount, account_id)
    if account is None or account.owner_id != owner_id:
        raise NotFoundError("Bank account not found")
    return account


def _clear_primary(db: Session, owner_id: int) -> None:
    db.execute(
        update(BankAccount)
        .where(BankAccount.owner_id == owner_id)
        .values(is_primary=False)
    )


def add_account(
    db: Session, owner: BusinessOwner, payload: BankAccountCreate
) -> BankAccount:
    data = _check_fields(payload.model_dump())
    make_primary = data.pop("is_primary") or primary_account(db, owner.id) is None
    if make_primary:
        _clear_primary(db, owner.id)
    account = BankAccount(owner_id=owner.id, is_primary=make_primary, **data)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


def update_account(
    db: Session, owner: BusinessOwner, account_id: int, payload: BankAccountUpdate
) -> BankAccount:
    account = get_account(db, owner.id, account_id)
    changes = _check_fields(payload.model_dump(exclude_unset=True))
    for key in ("bank_name", "account_number", "account_holder_name", "account_type", "is_active"):
        if key in changes and changes[key] is None:
            changes.pop(key)
    for key, value in changes.items():
        setattr(account, key, value)
    if account.is_primary and not account.is_active:
        account.is_primary = False
        _promote_replacement(db, owner.id, exclude_id=account.id)
    db.commit()
    db.refresh(account)
    return account


def _promote_replacement(db: Session, owner_id: int, exclude_id: int) -> None:
    replacement = db.scalar(
        select(BankAccount)
        .where(
            BankAccount.owner_id == owner_id,
            BankAccount.is_active.is_(True),
            BankAccount.id != exclude_id,
        )
        .order_by(BankAccount.id)
        .limit(1)
    )
    if replacement is not None:
        replacement.is_primary = True
        logger.info("Promoted bank account %s to primary", replacement.id)


def delete_account(db: Session, owner: BusinessOwner, account_id: int) -> None:
    account = get_account(db, owner.id, account_id)
    was_primary = account.is_primary
    db.delete(account)
    db.flush()
    if was_primary:
        _promote_replacement(db, owner.id, exclude_id=account_id)
    db.commit()


def set_primary(db: Session, owner: BusinessOwner, account_id: int) -> BankAccount:
    account = get_account(db, owner.id, account_id)
    if not account.is_active:
        raise ValidationError("Inactive accounts cannot be primary.", field="is_active")
    _clear_primary(db, owner.id)
    account.is_primary = True
    db.commit()
    db.refresh(account)
    return account


def snapshot(account: BankAccount | None, owner: BusinessOwner) -> dict:
    if account is None:
        return {}
    return {
        "bank_name": account.bank_name,
        "branch_name": account.branch_name or "",
        "account_number": account.account_number,
        "ifsc_code": account.ifsc_code or "",
        "account_type": account.account_type or "Current",
        "account_holder_name": account.account_holder_name or owner.business_name,
        "upi_id": account.upi_id or "",
    }
