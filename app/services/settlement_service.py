import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.core.errors import ConflictError, DebtNotFoundError, PersistenceError
from app.models.base import utcnow
from app.models.debt import DebtInDB, DebtPaymentInDB, DebtUpdate
from app.repositories.debt_payment_repo import DebtPaymentRepository
from app.repositories.debt_repo import DebtRepository
from app.schemas.debt import DebtPaymentCreate, MemberDebtSummary
from app.utils.settlement import (
    next_debt_state,
    summarize_debts_by_member,
    validate_payment_amount,
)

logger = logging.getLogger(__name__)


class SettlementService:
    """Applies payments to debts and answers debt queries."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        max_retries: Optional[int] = None,
        use_transactions: Optional[bool] = None
    ):
        self.db = db
        self.debt_repo = DebtRepository(db)
        self.payment_repo = DebtPaymentRepository(db)
        retries = settings.PAYMENT_MAX_RETRIES if max_retries is None else max_retries
        self.max_retries = max(1, retries)
        self.use_transactions = (
            settings.MONGODB_TRANSACTIONS if use_transactions is None else use_transactions
        )

    async def get_debt(self, debt_id: str, session=None) -> DebtInDB:
        debt = await self.debt_repo.get_debt(debt_id, session=session)
        if debt is None:
            raise DebtNotFoundError(debt_id)
        return debt

    async def apply_payment(
        self,
        debt_id: str,
        payment_in: DebtPaymentCreate
    ) -> tuple[DebtPaymentInDB, DebtInDB]:
        """
        Pay part or all of a debt.

        The balance is re-validated and written with a version check on
        every attempt, so two concurrent payments can never both pass the
        over-payment check against the same balance. A rejected or failed
        payment leaves the debt and its history untouched: with
        transactions enabled both writes commit together, otherwise a
        failed payment insert restores the previous balance.
        """
        if self.use_transactions:
            async with await self.db.client.start_session() as session:
                async with session.start_transaction():
                    return await self._apply_payment(debt_id, payment_in, session)
        return await self._apply_payment(debt_id, payment_in)

    async def _apply_payment(
        self,
        debt_id: str,
        payment_in: DebtPaymentCreate,
        session=None
    ) -> tuple[DebtPaymentInDB, DebtInDB]:
        debt = await self.get_debt(debt_id, session=session)

        for attempt in range(1, self.max_retries + 1):
            validate_payment_amount(payment_in.amount, debt.remaining_amount)
            amount_paid, remaining, status = next_debt_state(
                debt.original_amount, debt.amount_paid, payment_in.amount
            )

            updated = await self.debt_repo.compare_and_set_balance(
                debt, amount_paid, remaining, status, session=session
            )
            if updated is not None:
                break

            logger.info(
                "Debt %s changed while applying payment (attempt %s/%s), retrying",
                debt_id, attempt, self.max_retries
            )
            debt = await self.get_debt(debt_id, session=session)
        else:
            raise ConflictError(
                f"Debt {debt_id} is being updated concurrently, try again"
            )

        payment = DebtPaymentInDB(
            debt_id=str(updated.id),
            member_id=payment_in.member_id or updated.member_id,
            member_name=payment_in.member_name or updated.member_name,
            amount_paid=payment_in.amount,
            paid_at=utcnow(),
            note=payment_in.note or ""
        )
        try:
            payment = await self.payment_repo.create_payment(payment, session=session)
        except PersistenceError:
            if session is None:
                await self._restore_balance(updated, debt, payment_in.amount)
            raise

        logger.info(
            "Applied payment %s of %s to debt %s: remaining=%s status=%s",
            payment.id, payment.amount_paid, debt_id, updated.remaining_amount, updated.status
        )
        return payment, updated

    async def _restore_balance(self, updated: DebtInDB, previous: DebtInDB, amount: int) -> None:
        """Undo a balance write whose payment record could not be stored."""
        try:
            restored = await self.debt_repo.compare_and_set_balance(
                updated, previous.amount_paid, previous.remaining_amount, previous.status
            )
        except PersistenceError:
            restored = None
        if restored is None:
            logger.error(
                "Payment of %s was applied to debt %s but not recorded; "
                "balance could not be restored (amount_paid=%s)",
                amount, updated.id, updated.amount_paid
            )
        else:
            logger.warning(
                "Payment of %s to debt %s was not recorded; balance restored", amount, updated.id
            )

    async def update_debt(self, debt_id: str, update_data: DebtUpdate) -> DebtInDB:
        """Edit non-financial debt fields (currently only the due date)."""
        debt = await self.debt_repo.set_due_date(debt_id, update_data.due_date)
        if debt is None:
            raise DebtNotFoundError(debt_id)
        return debt

    async def list_debts(
        self,
        member_id: Optional[str] = None,
        status: Optional[str] = None
    ) -> list[DebtInDB]:
        return await self.debt_repo.list_debts(member_id, status)

    async def list_payments(
        self,
        member_id: Optional[str] = None,
        debt_id: Optional[str] = None
    ) -> list[DebtPaymentInDB]:
        return await self.payment_repo.list_payments(member_id, debt_id)

    async def summarize(
        self,
        member_id: Optional[str] = None,
        status: Optional[str] = None
    ) -> list[MemberDebtSummary]:
        debts = await self.debt_repo.list_debts(member_id, status)
        return summarize_debts_by_member(debts)
