from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_owner
from ..models import BusinessOwner
from ..schemas import LoginRequest, OwnerRead, RegisterRequest, TokenResponse
from ..services import accounts as accounts_service

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> TokenResponse:
    owner, token = accounts_service.register_owner(db, payload)
    return TokenResponse(access_token=token, owner=OwnerRead.model_validate(owner))


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    owner, token = accounts_service.login_owner(db, payload)
    return TokenResponse(access_token=token, owner=OwnerRead.model_validate(owner))


@router.get("/profile", response_model=OwnerRead)
def profile(owner: BusinessOwner = Depends(get_current_owner)) -> OwnerRead:
    return owner
