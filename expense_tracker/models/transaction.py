from pydantic import Field, field_validator
from typing import Optional
import datetime as dt
from uuid import UUID

from expense_tracker.db.core import PaymentType, TransactionCategory
from expense_tracker.models.base import RequestModel, ResponseModel

# ===== TRANSACTION PYDANTIC MODELS =====

# Keeps every SUM() over a user's amounts finite
MAX_AMOUNT = 1e12


def _clean_description(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Description cannot be empty")
    return v


def _clean_location(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    return v.strip() or None


class TransactionCreate(RequestModel):
    description: str = Field(..., max_length=500, description="What the money was spent on")
    payment_type: PaymentType = Field(..., description="cash, card or upi")
    category: TransactionCategory = Field(..., description="expense, saving or investment")
    amount: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False, description="Positive transaction amount")
    date: dt.date = Field(..., description="Calendar date of the transaction")
    location: Optional[str] = Field(None, max_length=255)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _clean_description(v)

    @field_validator('location')
    @classmethod
    def validate_location(cls, v: Optional[str]) -> Optional[str]:
        return _clean_location(v)


class TransactionUpdate(RequestModel):
    """Update transaction - all fields optional, only supplied fields change"""
    description: Optional[str] = Field(None, max_length=500)
    payment_type: Optional[PaymentType] = None
    category: Optional[TransactionCategory] = None
    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    date: Optional[dt.date] = None
    location: Optional[str] = Field(None, max_length=255)

    @field_validator('description', 'payment_type', 'category', 'amount', 'date')
    @classmethod
    def reject_null(cls, v):
        # Defaults are not validated, so this only fires for an explicit null
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _clean_description(v)

    @field_validator('location')
    @classmethod
    def validate_location(cls, v: Optional[str]) -> Optional[str]:
        return _clean_location(v)


class TransactionResponse(ResponseModel):
    """Transaction data returned to client"""
    id: UUID
    owner_id: UUID
    description: str
    payment_type: PaymentType
    category: TransactionCategory
    amount: float
    date: dt.date
    location: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


# ===== STATISTICS =====

class GroupStat(ResponseModel):
    """Totals for one category or payment type"""
    key: str
    total_amount: float
    count: int


class MonthlyStat(ResponseModel):
    year: int
    month: int
    total_amount: float
    count: int
