from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.errors import ConflictError, guard_persistence
from app.models.base import parse_object_id
from app.models.transaction import TransactionInDB


class DuplicateTransactionNumberError(ConflictError):
    """The generated transaction number is already taken."""
    pass


class TransactionRepository:
    """Append-only sale log."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["transactions"]

    @guard_persistence
    async def create_transaction(self, transaction: TransactionInDB) -> TransactionInDB:
        """Insert a sale record."""
        try:
            await self.collection.insert_one(transaction.to_document())
        except DuplicateKeyError as exc:
            raise DuplicateTransactionNumberError(
                f"Transaction number {transaction.transaction_number} already exists"
            ) from exc
        return transaction

    @guard_persistence
    async def get_transaction(self, transaction_id: str) -> TransactionInDB | None:
        oid = parse_object_id(transaction_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return TransactionInDB(**doc)
        return None

    @guard_persistence
    async def list_transactions(
        self,
        member_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        payment_method: Optional[str] = None
    ) -> list[TransactionInDB]:
        """List sales, most recent first. start/end are inclusive bounds."""
        query: dict = {}
        if member_id:
            query["member_id"] = member_id
        if payment_method and payment_method != "all":
            query["payment_method"] = payment_method
        if start or end:
            occurred: dict = {}
            if start:
                occurred["$gte"] = start
            if end:
                occurred["$lte"] = end
            query["occurred_at"] = occurred

        cursor = self.collection.find(query).sort("occurred_at", -1)
        transactions = await cursor.to_list(None)
        return [TransactionInDB(**doc) for doc in transactions]
