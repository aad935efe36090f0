import os
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from main import app
from app.db.mongo import get_db, create_indexes
from app.models.member import MemberCreate
from app.models.product import ProductCreate
from app.repositories.member_repo import MemberRepository
from app.repositories.product_repo import ProductRepository
from app.services.sale_service import SaleService
from app.services.settlement_service import SettlementService

# Set TEST_MONGODB_URI to run repository/service tests against a real server;
# otherwise an in-memory mongomock database is used.
TEST_MONGODB_URI = os.getenv("TEST_MONGODB_URI")
TEST_MONGODB_DB = "koperasi_test"


@pytest_asyncio.fixture
async def test_db() -> AsyncIOMotorDatabase:
    """Fixture for a clean test database with indexes."""
    if TEST_MONGODB_URI:
        client = AsyncIOMotorClient(TEST_MONGODB_URI)
        await client.drop_database(TEST_MONGODB_DB)
    else:
        client = AsyncMongoMockClient()
    db = client[TEST_MONGODB_DB]
    await create_indexes(db)

    yield db

    if TEST_MONGODB_URI:
        await client.drop_database(TEST_MONGODB_DB)
        client.close()


@pytest.fixture
def test_client():
    """FastAPI test client backed by an in-memory database.

    Used without the context manager so the lifespan (which connects to
    the configured MongoDB) does not run.
    """
    db = AsyncMongoMockClient()[TEST_MONGODB_DB]
    app.dependency_overrides[get_db] = lambda: db
    client = TestClient(app)

    yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_product_data():
    return {
        "code": "BRG003",
        "name": "Gula Pasir 1kg",
        "category": "Sembako",
        "cost_price": 12000,
        "sell_price": 15000,
        "stock_quantity": 40,
        "unit": "kg"
    }


@pytest_asyncio.fixture
async def product(test_db, sample_product_data):
    """A product in stock priced at 15000."""
    return await ProductRepository(test_db).create_product(ProductCreate(**sample_product_data))


@pytest_asyncio.fixture
async def rice(test_db):
    """A product priced at 75000."""
    return await ProductRepository(test_db).create_product(ProductCreate(
        code="BRG001",
        name="Beras Premium 5kg",
        category="Sembako",
        cost_price=65000,
        sell_price=75000,
        stock_quantity=50,
        unit="karung"
    ))


@pytest_asyncio.fixture
async def member(test_db):
    return await MemberRepository(test_db).create_member(MemberCreate(
        name="Ahmad Hidayat",
        address="Jl. Merdeka No. 10",
        phone="081234567890",
        email="ahmad@example.com"
    ))


@pytest.fixture
def sale_service(test_db):
    return SaleService(test_db, strict_stock=False)


@pytest.fixture
def settlement_service(test_db):
    return SettlementService(test_db, max_retries=3, use_transactions=False)
