"""Pydantic schemas for transaction data validation."""

from datetime import date as date_type, datetime
from decimal import Decimal
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

TransactionType = Literal["income", "expense", "transfer"]
PaymentMethod = Literal[
    "cash", "bank_transfer", "credit_card", "debit_card", "mobile_money", "cheque", "other"
]


class TransactionBase(BaseModel):
    """Base transaction schema."""
    amount: Decimal
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)
    date: date_type
    payment_method: PaymentMethod = "other"

    @field_validator("amount")
    @classmethod
    def amount_not_zero(cls, value: Decimal) -> Decimal:
        if value == 0:
            raise ValueError("Transaction amount cannot be zero")
        return value


class TransactionCreate(TransactionBase):
    """Schema for transaction creation."""
    pass


class TransactionUpdate(BaseModel):
    """Schema for partial transaction update."""
    amount: Optional[Decimal] = None
    type: Optional[TransactionType] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)
    date: Optional[date_type] = None
    payment_method: Optional[PaymentMethod] = None

    @field_validator("amount")
    @classmethod
    def amount_not_zero(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        if value is not None and value == 0:
            raise ValueError("Transaction amount cannot be zero")
        return value


class Transaction(TransactionBase):
    """Schema for transaction response."""
    id: int
    amount: float
    user_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class TransactionImportError(BaseModel):
    """Schema for transaction import error."""
    row: int
    message: str


class TransactionImportResponse(BaseModel):
    """Schema for transaction import response."""
    success: bool
    message: str
    imported: int = 0
    errors: Optional[List[TransactionImportError]] = None
