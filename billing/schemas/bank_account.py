from datetime import datetime

from pydantic import BaseModel, Field


class BankAccountCreate(BaseModel):
    bank_name: str = Field(min_length=1)
    branch_name: str | None = None
    account_number: str = Field(min_length=1)
    ifsc_code: str | None = None
    account_type: str = "Current"
    account_holder_name: str = Field(min_length=1)
    pan_card_number: str | None = None
    upi_id: str | None = None
    is_primary: bool = False


class BankAccountUpdate(BaseModel):
    bank_name: str | None = Field(default=None, min_length=1)
    branch_name: str | None = None
    account_number: str | None = Field(default=None, min_length=1)
    ifsc_code: str | None = None
    account_type: str | None = None
    account_holder_name: str | None = Field(default=None, min_length=1)
    pan_card_number: str | None = None
    upi_id: str | None = None
    is_active: bool | None = None


class BankAccountRead(BaseModel):
    id: int
    bank_name: str
    branch_name: str | None
    account_number: str
    ifsc_code: str | None
    account_type: str
    account_holder_name: str
    pan_card_number: str | None
    upi_id: str | None
    is_primary: bool
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BankValidationRequest(BaseModel):
    ifsc_code: str | None = None
    pan_card_number: str | None = None


class BankValidationResult(BaseModel):
    ifsc_valid: bool | None
    pan_valid: bool | None
