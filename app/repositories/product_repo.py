import logging
import re
from typing import Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.core.errors import guard_persistence
from app.models.base import parse_object_id, utcnow
from app.models.product import ProductCreate, ProductUpdate, ProductInDB

logger = logging.getLogger(__name__)


class ProductRepository:
    """Product (catalog) database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["products"]

    @guard_persistence
    async def create_product(self, product_data: ProductCreate) -> ProductInDB:
        """Create a new product."""
        product = ProductInDB(**product_data.model_dump())
        await self.collection.insert_one(product.to_document())
        return product

    @guard_persistence
    async def get_product(self, product_id: str) -> ProductInDB | None:
        """Get a product by id."""
        oid = parse_object_id(product_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid, "is_deleted": False})
        if doc:
            return ProductInDB(**doc)
        return None

    @guard_persistence
    async def get_products(self, product_ids: Iterable[str]) -> dict[str, ProductInDB]:
        """Fetch several products at once, keyed by id string."""
        oids = [oid for oid in (parse_object_id(pid) for pid in product_ids) if oid is not None]
        if not oids:
            return {}
        docs = await self.collection.find({
            "_id": {"$in": oids},
            "is_deleted": False
        }).to_list(None)
        return {str(doc["_id"]): ProductInDB(**doc) for doc in docs}

    @guard_persistence
    async def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        low_stock_threshold: Optional[int] = None
    ) -> list[ProductInDB]:
        """List products, newest first."""
        query: dict = {"is_deleted": False}
        if category and category != "all":
            query["category"] = category
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"name": pattern}, {"code": pattern}]
        if low_stock_threshold is not None:
            query["stock_quantity"] = {"$lt": low_stock_threshold}

        cursor = self.collection.find(query).sort("created_at", -1)
        products = await cursor.to_list(None)
        return [ProductInDB(**doc) for doc in products]

    @guard_persistence
    async def update_product(self, product_id: str, update_data: ProductUpdate) -> ProductInDB | None:
        """Update a product."""
        oid = parse_object_id(product_id)
        if oid is None:
            return None

        updates = update_data.model_dump(exclude_unset=True)
        if not updates:
            return await self.get_product(product_id)

        updates["updated_at"] = utcnow()
        result = await self.collection.find_one_and_update(
            {"_id": oid, "is_deleted": False},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return ProductInDB(**result)
        return None

    @guard_persistence
    async def soft_delete_product(self, product_id: str) -> bool:
        """Soft delete a product."""
        oid = parse_object_id(product_id)
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
    async def decrement_stock(self, product_id: str, quantity: int) -> ProductInDB | None:
        """
        Take quantity units out of stock, clamping at zero.

        Each branch is a single conditional write, so concurrent sales
        can never drive stock negative. Returns None for unknown products.
        """
        oid = parse_object_id(product_id)
        if oid is None:
            return None

        for _ in range(2):
            now = utcnow()
            doc = await self.collection.find_one_and_update(
                {"_id": oid, "stock_quantity": {"$gte": quantity}},
                {"$inc": {"stock_quantity": -quantity}, "$set": {"updated_at": now}},
                return_document=ReturnDocument.AFTER
            )
            if doc is None:
                doc = await self.collection.find_one_and_update(
                    {"_id": oid, "stock_quantity": {"$lt": quantity}},
                    {"$set": {"stock_quantity": 0, "updated_at": now}},
                    return_document=ReturnDocument.AFTER
                )
                if doc is not None:
                    logger.warning(
                        "Stock for product %s clamped to zero (requested %s)", product_id, quantity
                    )
            if doc is not None:
                return ProductInDB(**doc)
            # Stock moved between the two writes, or the product does not exist
            if await self.collection.count_documents({"_id": oid}) == 0:
                return None
        return None

    @guard_persistence
    async def count_products(self, low_stock_threshold: Optional[int] = None) -> int:
        query: dict = {"is_deleted": False}
        if low_stock_threshold is not None:
            query["stock_quantity"] = {"$lt": low_stock_threshold}
        return await self.collection.count_documents(query)
