from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: str | None = None
    password: str = Field(min_length=6)
    business_name: str = Field(min_length=1)
    business_phone: str | None = None
    business_email: str | None = None
    address: str | None = None
    gstin: str | None = None
    pan_number: str | None = None


class LoginRequest(BaseModel):
    phone: str
    password: str


class OwnerRead(BaseModel):
    id: int
    name: str
    phone: str
    email: str | None
    business_name: str
    business_phone: str | None
    business_email: str | None
    address: str | None
    gstin: str | None
    pan_number: str | None
    company_reg_number: str | None
    website: str | None
    logo_url: str | None
    plan: str
    status: str
    is_locked: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    owner: OwnerRead
