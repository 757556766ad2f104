"""Fees schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import PaymentMode


# --- Payment ---
class FeeTransactionCreate(BaseModel):
    student_id: UUID
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_date: date
    payment_mode: PaymentMode = PaymentMode.CASH
    remarks: Optional[str] = None


class FeeTransactionResponse(BaseModel):
    id: UUID
    student_id: UUID
    transaction_id: str
    amount: Decimal
    payment_date: date
    payment_mode: str
    remarks: Optional[str] = None
    receipt_serial: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class FeeTransactionListItem(FeeTransactionResponse):
    """List row with the student's display fields joined in."""

    student_name: str
    admission_number: str
    receipt_serial_display: str


class FeeTransactionDeleteResponse(BaseModel):
    deleted: UUID


# --- Summary ---
class StudentFeeSummary(BaseModel):
    student_id: UUID
    yearly_fee_amount: Decimal
    total_paid: Decimal
    balance: Decimal
    transaction_count: int
