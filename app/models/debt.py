"""
Debt model - member credit opened by CREDIT sales.

Design principles:
- Exactly one debt per credit transaction
- Amounts change only by applying payments (never by direct edit)
- Supports partial payment
- Status: unpaid → paid
- All amounts in whole currency units
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.models.base import MongoModel, utcnow


class DebtStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class DebtInDB(MongoModel):
    """
    Outstanding credit: member owes original_amount for one transaction.

    Invariants:
    - amount_paid == sum of the debt's payments
    - remaining_amount == max(0, original_amount - amount_paid)
    - status == paid iff remaining_amount <= 0
    - version increments on every applied payment (optimistic lock)
    """
    # References
    member_id: str
    member_name: str = ""
    transaction_id: str
    transaction_number: str

    # Financial
    original_amount: int
    amount_paid: int = 0
    remaining_amount: int

    # Tracking
    status: DebtStatus = DebtStatus.UNPAID
    opened_at: datetime = Field(default_factory=utcnow)
    due_date: Optional[datetime] = None
    version: int = 0


class DebtUpdate(BaseModel):
    """The only directly editable debt field; amounts go through payments."""
    due_date: Optional[datetime] = None


class DebtResponse(BaseModel):
    id: str
    member_id: str
    member_name: str
    transaction_id: str
    transaction_number: str
    original_amount: int
    amount_paid: int
    remaining_amount: int
    status: DebtStatus
    opened_at: datetime
    due_date: Optional[datetime] = None
    updated_at: datetime


class DebtPaymentInDB(MongoModel):
    """One installment paid against a debt. Immutable."""
    debt_id: str
    member_id: str
    member_name: str = ""
    amount_paid: int
    paid_at: datetime = Field(default_factory=utcnow)
    note: str = ""


class DebtPaymentResponse(BaseModel):
    id: str
    debt_id: str
    member_id: str
    member_name: str
    amount_paid: int
    paid_at: datetime
    note: str
