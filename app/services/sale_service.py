"""
SaleService - records sales and opens credit.

Algorithm:
1. Validate line items and recompute the total server-side
2. Cash: resolve tendered amount and change; credit: require a member
   and a positive total
3. Optionally reject sales that exceed stock (STRICT_STOCK)
4. Write the transaction
5. Decrement stock per line, clamped at zero
6. Credit: open exactly one debt for the transaction

Writes after step 4 are not rolled back if a later step fails.
"""

import logging
import secrets
import string
from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.core.errors import (
    ConflictError,
    InsufficientStockError,
    InvalidInputError,
    MissingMemberError,
)
from app.models.base import utcnow
from app.models.debt import DebtInDB, DebtStatus
from app.models.transaction import LineItem, PaymentMethod, TransactionInDB
from app.repositories.debt_repo import DebtRepository
from app.repositories.member_repo import MemberRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.transaction_repo import DuplicateTransactionNumberError, TransactionRepository
from app.schemas.sale import SaleCreate
from app.utils.settlement import (
    calculate_change,
    calculate_total,
    line_subtotal,
    validate_line_items,
)

logger = logging.getLogger(__name__)

TRANSACTION_NUMBER_ATTEMPTS = 5
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_transaction_number(now: datetime, prefix: str = "TRX") -> str:
    """e.g. TRX250314K7QZ: prefix, YYMMDD, four random characters."""
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(4))
    return f"{prefix}{now:%y%m%d}{suffix}"


class SaleService:
    def __init__(self, db: AsyncIOMotorDatabase, strict_stock: Optional[bool] = None):
        self.transaction_repo = TransactionRepository(db)
        self.product_repo = ProductRepository(db)
        self.debt_repo = DebtRepository(db)
        self.member_repo = MemberRepository(db)
        self.strict_stock = settings.STRICT_STOCK if strict_stock is None else strict_stock

    async def create_sale(self, sale: SaleCreate) -> TransactionInDB:
        validate_line_items(sale.line_items)
        total = calculate_total(sale.line_items)

        amount_tendered = None
        change_given = None
        member_name = sale.member_name

        if sale.payment_method == PaymentMethod.CASH:
            amount_tendered, change_given = calculate_change(total, sale.amount_tendered)
        else:
            if not sale.member_id:
                raise MissingMemberError()
            if total <= 0:
                raise InvalidInputError("A credit sale must have a positive total")
            if not member_name:
                member = await self.member_repo.get_member(sale.member_id)
                member_name = member.name if member else ""

        if self.strict_stock:
            await self._check_stock(sale)

        now = utcnow()
        transaction = TransactionInDB(
            line_items=[
                LineItem(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    code=item.code,
                    quantity=item.quantity,
                    cost_price=item.cost_price,
                    sell_price=item.sell_price,
                    subtotal=line_subtotal(item.sell_price, item.quantity)
                )
                for item in sale.line_items
            ],
            total=total,
            payment_method=sale.payment_method,
            member_id=sale.member_id or None,
            member_name=member_name or None,
            amount_tendered=amount_tendered,
            change_given=change_given,
            occurred_at=now,
            created_at=now,
            updated_at=now
        )
        transaction = await self._insert_with_unique_number(transaction, now)
        logger.info(
            "Recorded %s sale %s total=%s",
            transaction.payment_method, transaction.transaction_number, total
        )

        for item in transaction.line_items:
            product = await self.product_repo.decrement_stock(item.product_id, item.quantity)
            if product is None:
                logger.warning(
                    "Sale %s references unknown product %s; stock not updated",
                    transaction.transaction_number, item.product_id
                )

        if transaction.payment_method == PaymentMethod.CREDIT:
            await self._open_debt(transaction)

        return transaction

    async def _check_stock(self, sale: SaleCreate) -> None:
        requested: dict[str, int] = {}
        for item in sale.line_items:
            requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

        products = await self.product_repo.get_products(requested.keys())
        for product_id, quantity in requested.items():
            product = products.get(product_id)
            if product is None:
                raise InsufficientStockError(f"Product {product_id} is not in the catalog")
            if product.stock_quantity < quantity:
                raise InsufficientStockError(
                    f"Only {product.stock_quantity} {product.unit} of '{product.name}' "
                    f"in stock, {quantity} requested"
                )

    async def _insert_with_unique_number(self, transaction: TransactionInDB, now: datetime) -> TransactionInDB:
        for _ in range(TRANSACTION_NUMBER_ATTEMPTS):
            transaction.transaction_number = generate_transaction_number(
                now, settings.TRANSACTION_NUMBER_PREFIX
            )
            try:
                return await self.transaction_repo.create_transaction(transaction)
            except DuplicateTransactionNumberError:
                logger.warning("Transaction number %s taken, regenerating", transaction.transaction_number)
        raise ConflictError("Could not allocate a unique transaction number")

    async def _open_debt(self, transaction: TransactionInDB) -> DebtInDB:
        debt = DebtInDB(
            member_id=transaction.member_id,
            member_name=transaction.member_name or "",
            transaction_id=str(transaction.id),
            transaction_number=transaction.transaction_number,
            original_amount=transaction.total,
            amount_paid=0,
            remaining_amount=transaction.total,
            status=DebtStatus.UNPAID,
            opened_at=transaction.occurred_at
        )
        debt = await self.debt_repo.create_debt(debt)
        logger.info(
            "Opened debt %s for member %s amount=%s",
            debt.id, debt.member_id, debt.original_amount
        )
        return debt
