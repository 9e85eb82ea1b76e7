from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class PricingTierIn(BaseModel):
    min_quantity: Decimal = Field(ge=0)
    max_quantity: Decimal | None = Field(default=None, ge=0)
    unit_price: Decimal = Field(ge=0)
    description: str | None = None


class PricingTierRead(PricingTierIn):
    id: int

    model_config = {"from_attributes": True}


class ItemCreate(BaseModel):
    name: str = Field(min_length=1)
    item_code: str | None = None
    part_number: str | None = None
    description: str | None = None
    category: str | None = None
    unit: str = "piece"
    selling_price: Decimal = Field(default=Decimal("0"), ge=0)
    tax_rate: Decimal = Field(default=Decimal("18"), ge=0, le=100)
    hsn_code: str | None = None
    stock_quantity: Decimal = Field(default=Decimal("0"), ge=0)
    status: str = "active"
    pricing_tiers: list[PricingTierIn] | None = None


class ItemUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    item_code: str | None = None
    part_number: str | None = None
    description: str | None = None
    category: str | None = None
    unit: str | None = None
    selling_price: Decimal | None = Field(default=None, ge=0)
    tax_rate: Decimal | None = Field(default=None, ge=0, le=100)
    hsn_code: str | None = None
    stock_quantity: Decimal | None = Field(default=None, ge=0)
    status: str | None = None
    pricing_tiers: list[PricingTierIn] | None = None


class ItemRead(BaseModel):
    id: int
    name: str
    item_code: str | None
    part_number: str | None
    description: str | None
    category: str | None
    unit: str
    selling_price: Decimal
    tax_rate: Decimal
    hsn_code: str | None
    stock_quantity: Decimal
    status: str
    times_used: int
    last_used_at: datetime | None
    pricing_tiers: list[PricingTierRead]
    created_at: datetime

    model_config = {"from_attributes": True}


class ItemPricing(BaseModel):
    item_id: int
    quantity: Decimal
    unit_price: Decimal
    tier: str | None
    tax_rate: Decimal
    line_total: Decimal
    tax_amount: Decimal
    total_amount: Decimal
