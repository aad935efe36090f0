import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.core.config import settings

logger = logging.getLogger(__name__)

class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URI)
    mongodb.db = mongodb.client[settings.MONGODB_DB]

    # Create indexes
    await create_indexes(mongodb.db)
    logger.info("Connected to MongoDB: %s", settings.MONGODB_DB)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes."""
    # Member indexes
    await db["members"].create_index([("is_deleted", 1), ("created_at", -1)])

    # Product indexes
    await db["products"].create_index("code")
    await db["products"].create_index([("is_deleted", 1), ("category", 1)])

    # Transaction indexes
    await db["transactions"].create_index("transaction_number", unique=True)
    await db["transactions"].create_index([("member_id", 1), ("occurred_at", -1)])

    # Debt indexes: one debt per credit transaction
    await db["debts"].create_index("transaction_id", unique=True)
    await db["debts"].create_index([("member_id", 1), ("status", 1)])

    # Debt payment indexes
    await db["debt_payments"].create_index([("debt_id", 1), ("paid_at", -1)])
    await db["debt_payments"].create_index("member_id")

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
