import re
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.core.errors import guard_persistence
from app.models.base import parse_object_id, utcnow
from app.models.member import MemberCreate, MemberUpdate, MemberInDB


class MemberRepository:
    """Member database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["members"]

    @guard_persistence
    async def create_member(self, member_data: MemberCreate) -> MemberInDB:
        """Create a new member."""
        member = MemberInDB(**member_data.model_dump())
        await self.collection.insert_one(member.to_document())
        return member

    @guard_persistence
    async def get_member(self, member_id: str) -> MemberInDB | None:
        """Get a member by id."""
        oid = parse_object_id(member_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid, "is_deleted": False})
        if doc:
            return MemberInDB(**doc)
        return None

    @guard_persistence
    async def list_members(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None
    ) -> list[MemberInDB]:
        """List members, newest first."""
        query: dict = {"is_deleted": False}
        if status and status != "all":
            query["status"] = status
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [
                {"name": pattern},
                {"phone": pattern},
                {"email": pattern}
            ]

        cursor = self.collection.find(query).sort("created_at", -1)
        members = await cursor.to_list(None)
        return [MemberInDB(**doc) for doc in members]

    @guard_persistence
    async def update_member(self, member_id: str, update_data: MemberUpdate) -> MemberInDB | None:
        """Update a member."""
        oid = parse_object_id(member_id)
        if oid is None:
            return None

        updates = update_data.model_dump(exclude_unset=True, mode="json")
        if not updates:
            return await self.get_member(member_id)

        updates["updated_at"] = utcnow()
        result = await self.collection.find_one_and_update(
            {"_id": oid, "is_deleted": False},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return MemberInDB(**result)
        return None

    @guard_persistence
    async def soft_delete_member(self, member_id: str) -> bool:
        """Soft delete a member."""
        oid = parse_object_id(member_id)
        if oid is None:
            return False
        result = await self.collection.update_one(
            {"_id": oid, "is_deleted": False},
            {"$set": {
                "is_deleted": True,
                "updated_at": utcnow()
            }}
        )
        return result.modified_count > 0

    @guard_persistence
    async def count_active_members(self) -> int:
        return await self.collection.count_documents({"is_deleted": False, "status": "active"})
