from typing import Any, Optional
from uuid import UUID
from datetime import datetime
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, Field, field_validator

from academy.models.enums import FeeStatus


def _clamp_amount(value: Any) -> Any:
    """Form input arrives as strings or blanks; missing and negative amounts count as 0."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        # Let pydantic report the bad value
        return value
    if not amount.is_finite():
        return value
    return amount if amount > 0 else Decimal("0")


class FeeUpsert(BaseModel):
    """Payment entry for one student and period, as recorded by an admin."""
    id: Optional[UUID] = None
    student_id: UUID
    year: int = Field(..., ge=1970, le=2100)
    month: int = Field(..., ge=1, le=12)
    monthly_fee: Decimal
    paid_amount: Decimal = Decimal("0")
    notes: Optional[str] = None

    @field_validator("monthly_fee", "paid_amount", mode="before")
    @classmethod
    def clamp_amounts(cls, v: Any) -> Any:
        return _clamp_amount(v)

    @field_validator("notes")
    @classmethod
    def blank_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class FeeRecord(BaseModel):
    id: Optional[UUID] = None
    student_id: UUID
    year: int
    month: int = Field(..., ge=1, le=12)
    monthly_fee: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    balance_due: Decimal = Decimal("0")
    status: FeeStatus = FeeStatus.UNPAID
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("monthly_fee", "paid_amount", "balance_due", mode="before")
    @classmethod
    def missing_amounts_as_zero(cls, v: Any) -> Any:
        return _clamp_amount(v)

    @property
    def period(self) -> tuple[int, int]:
        return (self.year, self.month)


class FeeLedgerRow(BaseModel):
    """The row an admin edits for one period, including debt carried from before."""
    student_id: UUID
    year: int
    month: int
    fee_id: Optional[UUID] = None
    monthly_fee: Decimal
    paid_amount: Decimal
    balance_due: Decimal
    status: FeeStatus
    carry_forward: Decimal = Decimal("0")
    total_due: Decimal
    notes: Optional[str] = None


class FeeSummary(BaseModel):
    """Dashboard rollups across a set of fee records."""
    collected: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")
    overdue: Decimal = Decimal("0")
    paid_count: int = 0
    partial_count: int = 0
    overdue_count: int = 0
