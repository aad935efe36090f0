from typing import Optional

from fastapi import APIRouter, Depends, status, Query

from app.core.errors import POSError, to_http_exception
from app.db.mongo import get_db
from app.models.debt import (
    DebtInDB,
    DebtPaymentInDB,
    DebtPaymentResponse,
    DebtResponse,
    DebtUpdate,
)
from app.schemas.debt import DebtPaymentCreate, MemberDebtSummary, PaymentResult
from app.services.settlement_service import SettlementService

router = APIRouter(prefix="/debts", tags=["debts"])
payments_router = APIRouter(prefix="/debt-payments", tags=["debts"])


def _to_debt_response(debt: DebtInDB) -> DebtResponse:
    return DebtResponse(
        id=str(debt.id),
        member_id=debt.member_id,
        member_name=debt.member_name,
        transaction_id=debt.transaction_id,
        transaction_number=debt.transaction_number,
        original_amount=debt.original_amount,
        amount_paid=debt.amount_paid,
        remaining_amount=debt.remaining_amount,
        status=debt.status,
        opened_at=debt.opened_at,
        due_date=debt.due_date,
        updated_at=debt.updated_at
    )


def _to_payment_response(payment: DebtPaymentInDB) -> DebtPaymentResponse:
    return DebtPaymentResponse(
        id=str(payment.id),
        debt_id=payment.debt_id,
        member_id=payment.member_id,
        member_name=payment.member_name,
        amount_paid=payment.amount_paid,
        paid_at=payment.paid_at,
        note=payment.note
    )


@router.get("", response_model=list[DebtResponse])
async def list_debts(
    member_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status", description="unpaid, paid or all"),
    db = Depends(get_db)
):
    """List debts, most recently opened first."""
    try:
        debts = await SettlementService(db).list_debts(member_id, status_filter)
    except POSError as exc:
        raise to_http_exception(exc)
    return [_to_debt_response(debt) for debt in debts]


@router.get("/summary", response_model=list[MemberDebtSummary])
async def summarize_debts(
    member_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    db = Depends(get_db)
):
    """Totals per member across the matching debts."""
    try:
        return await SettlementService(db).summarize(member_id, status_filter)
    except POSError as exc:
        raise to_http_exception(exc)


@router.get("/{debt_id}", response_model=DebtResponse)
async def get_debt(debt_id: str, db = Depends(get_db)):
    try:
        debt = await SettlementService(db).get_debt(debt_id)
    except POSError as exc:
        raise to_http_exception(exc)
    return _to_debt_response(debt)


@router.patch("/{debt_id}", response_model=DebtResponse)
async def update_debt(debt_id: str, update_data: DebtUpdate, db = Depends(get_db)):
    """
    Set the due date.

    Amounts and status are not editable here; they change only by
    recording payments.
    """
    try:
        debt = await SettlementService(db).update_debt(debt_id, update_data)
    except POSError as exc:
        raise to_http_exception(exc)
    return _to_debt_response(debt)


@router.post("/{debt_id}/payments", response_model=PaymentResult, status_code=status.HTTP_201_CREATED)
async def apply_payment(debt_id: str, payload: DebtPaymentCreate, db = Depends(get_db)):
    """
    Record a payment against a debt.

    - amount must be positive and no larger than the remaining balance
    - the debt becomes paid once nothing remains
    """
    try:
        payment, debt = await SettlementService(db).apply_payment(debt_id, payload)
    except POSError as exc:
        raise to_http_exception(exc)
    return PaymentResult(
        payment=_to_payment_response(payment),
        debt=_to_debt_response(debt)
    )


@payments_router.get("", response_model=list[DebtPaymentResponse])
async def list_payments(
    member_id: Optional[str] = Query(None),
    debt_id: Optional[str] = Query(None),
    db = Depends(get_db)
):
    """Payment history, latest first."""
    try:
        payments = await SettlementService(db).list_payments(member_id, debt_id)
    except POSError as exc:
        raise to_http_exception(exc)
    return [_to_payment_response(payment) for payment in payments]
