"""
DebtRepository - Manages member credit balances.

Balance fields (amount_paid, remaining_amount, status) are only written
through ``compare_and_set_balance``, which applies the new values only if
the stored version still matches the one the caller read.
"""

from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.errors import ConflictError, guard_persistence
from app.models.base import parse_object_id, to_naive_utc, utcnow
from app.models.debt import DebtInDB, DebtStatus


class DebtRepository:
    """Repository for debts (member credit obligations)."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["debts"]

    @guard_persistence
    async def create_debt(self, debt: DebtInDB) -> DebtInDB:
        """Insert a new debt. A transaction can open at most one debt."""
        try:
            await self.collection.insert_one(debt.to_document())
        except DuplicateKeyError as exc:
            raise ConflictError(
                f"Transaction {debt.transaction_id} already has a debt"
            ) from exc
        return debt

    @guard_persistence
    async def get_debt(self, debt_id: str, session=None) -> Optional[DebtInDB]:
        """Get a debt by id; None for unknown or malformed ids."""
        oid = parse_object_id(debt_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid}, session=session)
        if doc:
            return DebtInDB(**doc)
        return None

    @guard_persistence
    async def get_debt_by_transaction(self, transaction_id: str) -> Optional[DebtInDB]:
        doc = await self.collection.find_one({"transaction_id": transaction_id})
        if doc:
            return DebtInDB(**doc)
        return None

    @guard_persistence
    async def list_debts(
        self,
        member_id: Optional[str] = None,
        status: Optional[str] = None
    ) -> list[DebtInDB]:
        """List debts, most recently opened first."""
        query: dict = {}
        if member_id:
            query["member_id"] = member_id
        if status and status != "all":
            query["status"] = status

        cursor = self.collection.find(query).sort("opened_at", -1)
        debts = await cursor.to_list(None)
        return [DebtInDB(**doc) for doc in debts]

    @guard_persistence
    async def compare_and_set_balance(
        self,
        debt: DebtInDB,
        amount_paid: int,
        remaining_amount: int,
        status: DebtStatus,
        session=None
    ) -> Optional[DebtInDB]:
        """
        Write new balance fields if nobody else changed the debt since it was read.

        Returns the updated debt, or None when the version no longer matches.
        """
        result = await self.collection.find_one_and_update(
            {"_id": debt.id, "version": debt.version},
            {
                "$set": {
                    "amount_paid": amount_paid,
                    "remaining_amount": remaining_amount,
                    "status": status.value if isinstance(status, DebtStatus) else status,
                    "updated_at": utcnow()
                },
                "$inc": {"version": 1}
            },
            return_document=ReturnDocument.AFTER,
            session=session
        )
        if result:
            return DebtInDB(**result)
        return None

    @guard_persistence
    async def set_due_date(self, debt_id: str, due_date: Optional[datetime]) -> Optional[DebtInDB]:
        oid = parse_object_id(debt_id)
        if oid is None:
            return None
        result = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {"due_date": to_naive_utc(due_date), "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return DebtInDB(**result)
        return None

    @guard_persistence
    async def total_receivables(self) -> int:
        """Sum of what is still owed on unpaid debts."""
        docs = await self.collection.find(
            {"status": DebtStatus.UNPAID.value},
            {"remaining_amount": 1}
        ).to_list(None)
        return sum(doc.get("remaining_amount", 0) for doc in docs)
