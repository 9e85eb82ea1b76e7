import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import AuthError, ConflictError
from ..models import BusinessOwner
from ..schemas import LoginRequest, RegisterRequest
from ..security import create_access_token, get_password_hash, verify_password
from .business_settings import get_or_create_settings

logger = logging.getLogger(__name__)


def register_owner(db: Session, payload: RegisterRequest) -> tuple[BusinessOwner, str]:
    phone = payload.phone.strip()
    business_name = payload.business_name.strip()
    if db.scalar(select(BusinessOwner.id).where(BusinessOwner.phone == phone)):
        raise ConflictError("An account with this phone already exists", field="phone")
    if db.scalar(
        select(BusinessOwner.id).where(BusinessOwner.business_name == business_name)
    ):
        raise ConflictError("Business name is already registered", field="business_name")

    owner = BusinessOwner(
        name=payload.name.strip(),
        phone=phone,
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        business_name=business_name,
        business_phone=payload.business_phone,
        business_email=payload.business_email,
        address=payload.address,
        gstin=payload.gstin.upper() if payload.gstin else None,
        pan_number=payload.pan_number.upper() if payload.pan_number else None,
    )
    db.add(owner)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Business is already registered")
    db.refresh(owner)
    get_or_create_settings(db, owner)
    logger.info("Registered business %s (owner %s)", owner.business_name, owner.id)
    return owner, create_access_token(owner.id)


def login_owner(db: Session, payload: LoginRequest) -> tuple[BusinessOwner, str]:
    owner = db.scalar(
        select(BusinessOwner).where(BusinessOwner.phone == payload.phone.strip())
    )
    if owner is None or not verify_password(payload.password, owner.password_hash):
        raise AuthError("Invalid phone or password")
    if owner.status == "suspended":
        raise AuthError("Account is suspended")
    return owner, create_access_token(owner.id)
