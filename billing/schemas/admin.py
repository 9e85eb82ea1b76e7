from datetime import datetime

from pydantic import BaseModel

from .auth import OwnerRead


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class AdminToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str


class BusinessSummary(OwnerRead):
    tokens_valid_after: datetime | None = None
    last_admin_action: dict | None = None
    invoice_count: int = 0
    customer_count: int = 0


class BusinessStatusChange(BaseModel):
    status: str
    reason: str | None = None


class AdminActionRequest(BaseModel):
    reason: str | None = None


class BusinessDeleteResult(BaseModel):
    business_id: int
    business_name: str
    deleted: dict[str, int]
