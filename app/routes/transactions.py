from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status, Query

from app.core.errors import POSError, TransactionNotFoundError, to_http_exception
from app.db.mongo import get_db
from app.models.transaction import PaymentMethod, TransactionInDB
from app.repositories.transaction_repo import TransactionRepository
from app.schemas.sale import SaleCreate, TransactionResponse, LineItemResponse
from app.services.report_service import day_bounds
from app.services.sale_service import SaleService

router = APIRouter(prefix="/transactions", tags=["transactions"])


def _to_transaction_response(transaction: TransactionInDB) -> TransactionResponse:
    return TransactionResponse(
        id=str(transaction.id),
        transaction_number=transaction.transaction_number,
        line_items=[
            LineItemResponse(**item.model_dump())
            for item in transaction.line_items
        ],
        total=transaction.total,
        payment_method=transaction.payment_method,
        member_id=transaction.member_id,
        member_name=transaction.member_name,
        amount_tendered=transaction.amount_tendered,
        change_given=transaction.change_given,
        occurred_at=transaction.occurred_at
    )


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(sale: SaleCreate, db = Depends(get_db)):
    """
    Record a sale.

    - Total is recomputed from line items
    - Stock is decremented, never below zero
    - CREDIT sales require member_id and open a debt for the total
    """
    try:
        transaction = await SaleService(db).create_sale(sale)
    except POSError as exc:
        raise to_http_exception(exc)
    return _to_transaction_response(transaction)


@router.get("", response_model=list[TransactionResponse])
async def list_transactions(
    member_id: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, description="First day, inclusive"),
    end_date: Optional[date] = Query(None, description="Last day, inclusive"),
    payment_method: Optional[PaymentMethod] = Query(None),
    db = Depends(get_db)
):
    """List sales, most recent first."""
    start, end = day_bounds(start_date, end_date)
    try:
        transactions = await TransactionRepository(db).list_transactions(
            member_id=member_id,
            start=start,
            end=end,
            payment_method=payment_method.value if payment_method else None
        )
    except POSError as exc:
        raise to_http_exception(exc)
    return [_to_transaction_response(t) for t in transactions]


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(transaction_id: str, db = Depends(get_db)):
    try:
        transaction = await TransactionRepository(db).get_transaction(transaction_id)
    except POSError as exc:
        raise to_http_exception(exc)
    if not transaction:
        raise to_http_exception(TransactionNotFoundError(transaction_id))
    return _to_transaction_response(transaction)
