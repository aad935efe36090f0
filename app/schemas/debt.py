from typing import Optional
from pydantic import BaseModel

from app.models.debt import DebtResponse, DebtPaymentResponse


class DebtPaymentCreate(BaseModel):
    """Request body to pay down a debt.

    member_id/member_name default to the debt's member when omitted.
    """
    amount: int
    note: Optional[str] = None
    member_id: Optional[str] = None
    member_name: Optional[str] = None


class PaymentResult(BaseModel):
    """Recorded payment plus the debt as it stands afterwards."""
    payment: DebtPaymentResponse
    debt: DebtResponse


class MemberDebtSummary(BaseModel):
    """Per-member totals across that member's debts."""
    member_id: str
    member_name: str
    debt_count: int
    total_original: int
    total_paid: int
    total_remaining: int
    status: str  # paid | partial | unpaid
