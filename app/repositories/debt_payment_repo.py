from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import guard_persistence
from app.models.debt import DebtPaymentInDB


class DebtPaymentRepository:
    """Append-only history of debt installments."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["debt_payments"]

    @guard_persistence
    async def create_payment(self, payment: DebtPaymentInDB, session=None) -> DebtPaymentInDB:
        await self.collection.insert_one(payment.to_document(), session=session)
        return payment

    @guard_persistence
    async def list_payments(
        self,
        member_id: Optional[str] = None,
        debt_id: Optional[str] = None
    ) -> list[DebtPaymentInDB]:
        """List payments, latest first."""
        query: dict = {}
        if member_id:
            query["member_id"] = member_id
        if debt_id:
            query["debt_id"] = debt_id

        cursor = self.collection.find(query).sort("paid_at", -1)
        payments = await cursor.to_list(None)
        return [DebtPaymentInDB(**doc) for doc in payments]
