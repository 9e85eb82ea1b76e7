from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class BankAccount(Base):
    __tablename__ = "bank_accounts"
    __table_args__ = (Index("ix_bank_accounts_owner_id", "owner_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("business_owners.id"), nullable=False
    )
    bank_name: Mapped[str] = mapped_column(String(255), nullable=False)
    branch_name: Mapped[str | None] = mapped_column(String(255))
    account_number: Mapped[str] = mapped_column(String(50), nullable=False)
    ifsc_code: Mapped[str | None] = mapped_column(String(11))
    account_type: Mapped[str] = mapped_column(String(20), nullable=False, default="Current")
    account_holder_name: Mapped[str] = mapped_column(String(255), nullable=False)
    pan_card_number: Mapped[str | None] = mapped_column(String(10))
    upi_id: Mapped[str | None] = mapped_column(String(100))
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )
