"""Tests for member, product, transaction and debt repositories."""
import pytest
from datetime import datetime
from bson import ObjectId

from app.core.errors import ConflictError
from app.models.debt import DebtInDB
from app.models.member import MemberCreate, MemberUpdate
from app.models.product import ProductCreate, ProductUpdate
from app.models.transaction import TransactionInDB
from app.repositories.debt_repo import DebtRepository
from app.repositories.member_repo import MemberRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.transaction_repo import (
    DuplicateTransactionNumberError,
    TransactionRepository,
)


@pytest.mark.asyncio
class TestMemberRepository:
    """Test MemberRepository CRUD operations."""

    async def test_create_member(self, test_db):
        repo = MemberRepository(test_db)

        member = await repo.create_member(MemberCreate(name="Siti Nurhaliza", phone="081298765432"))

        assert member.id is not None
        assert member.status == "active"
        assert member.is_deleted is False
        assert member.email is None
        assert member.registered_at is not None

    async def test_get_member(self, test_db, member):
        found = await MemberRepository(test_db).get_member(str(member.id))

        assert found is not None
        assert found.name == "Ahmad Hidayat"
        assert found.email == "ahmad@example.com"

    async def test_get_member_invalid_id(self, test_db):
        repo = MemberRepository(test_db)

        assert await repo.get_member("invalid_id") is None
        assert await repo.get_member(str(ObjectId())) is None

    async def test_list_members_search_and_status(self, test_db, member):
        repo = MemberRepository(test_db)
        await repo.create_member(MemberCreate(name="Rudi Hermawan", phone="085755556666", status="inactive"))

        assert len(await repo.list_members()) == 2
        assert [m.name for m in await repo.list_members(search="ahmad")] == ["Ahmad Hidayat"]
        assert [m.name for m in await repo.list_members(search="5555")] == ["Rudi Hermawan"]
        assert [m.name for m in await repo.list_members(status="inactive")] == ["Rudi Hermawan"]
        assert len(await repo.list_members(status="all")) == 2

    async def test_search_treats_input_literally(self, test_db, member):
        repo = MemberRepository(test_db)

        assert await repo.list_members(search=".*") == []

    async def test_update_member(self, test_db, member):
        repo = MemberRepository(test_db)

        updated = await repo.update_member(str(member.id), MemberUpdate(phone="089900001111"))

        assert updated.phone == "089900001111"
        assert updated.name == member.name
        assert updated.updated_at >= member.updated_at

    async def test_soft_delete_hides_member(self, test_db, member):
        repo = MemberRepository(test_db)

        assert await repo.soft_delete_member(str(member.id)) is True
        assert await repo.get_member(str(member.id)) is None
        assert await repo.list_members() == []
        assert await repo.soft_delete_member(str(member.id)) is False
        # Still stored for history
        assert await test_db["members"].count_documents({}) == 1

    async def test_count_active_members(self, test_db, member):
        repo = MemberRepository(test_db)
        await repo.create_member(MemberCreate(name="Rudi Hermawan", status="inactive"))

        assert await repo.count_active_members() == 1


@pytest.mark.asyncio
class TestProductRepository:
    """Test ProductRepository catalog and stock operations."""

    async def test_create_and_get_product(self, test_db, sample_product_data):
        repo = ProductRepository(test_db)

        product = await repo.create_product(ProductCreate(**sample_product_data))
        found = await repo.get_product(str(product.id))

        assert found.code == "BRG003"
        assert found.sell_price == 15000
        assert found.stock_quantity == 40

    async def test_list_products_filters(self, test_db, product, rice):
        repo = ProductRepository(test_db)
        await repo.create_product(ProductCreate(
            code="BRG010", name="Sabun Lifebuoy", category="Kebutuhan Rumah", sell_price=4000, stock_quantity=5
        ))

        assert len(await repo.list_products()) == 3
        assert len(await repo.list_products(category="Sembako")) == 2
        assert [p.code for p in await repo.list_products(search="brg010")] == ["BRG010"]
        assert [p.code for p in await repo.list_products(search="beras")] == ["BRG001"]
        assert [p.code for p in await repo.list_products(low_stock_threshold=10)] == ["BRG010"]
        assert await repo.count_products() == 3
        assert await repo.count_products(low_stock_threshold=10) == 1

    async def test_get_products_by_ids(self, test_db, product, rice):
        repo = ProductRepository(test_db)

        found = await repo.get_products([str(product.id), str(rice.id), "bad", str(ObjectId())])

        assert set(found) == {str(product.id), str(rice.id)}

    async def test_update_product_stock(self, test_db, product):
        repo = ProductRepository(test_db)

        updated = await repo.update_product(str(product.id), ProductUpdate(stock_quantity=100))

        assert updated.stock_quantity == 100
        assert updated.sell_price == product.sell_price

    async def test_soft_delete_hides_product(self, test_db, product):
        repo = ProductRepository(test_db)

        assert await repo.soft_delete_product(str(product.id)) is True
        assert await repo.get_product(str(product.id)) is None
        assert await repo.list_products() == []

    async def test_decrement_stock(self, test_db, product):
        repo = ProductRepository(test_db)

        updated = await repo.decrement_stock(str(product.id), 15)

        assert updated.stock_quantity == 25

    async def test_decrement_stock_clamps_at_zero(self, test_db, product):
        repo = ProductRepository(test_db)

        updated = await repo.decrement_stock(str(product.id), 41)

        assert updated.stock_quantity == 0
        stored = await test_db["products"].find_one({"_id": product.id})
        assert stored["stock_quantity"] == 0

    async def test_decrement_stock_unknown_product(self, test_db):
        repo = ProductRepository(test_db)

        assert await repo.decrement_stock(str(ObjectId()), 1) is None
        assert await repo.decrement_stock("not-an-id", 1) is None


def _transaction(number: str, occurred_at: datetime, **kwargs) -> TransactionInDB:
    return TransactionInDB(
        transaction_number=number,
        total=kwargs.pop("total", 10000),
        payment_method=kwargs.pop("payment_method", "CASH"),
        occurred_at=occurred_at,
        **kwargs
    )


@pytest.mark.asyncio
class TestTransactionRepository:
    """Test the sale log."""

    async def test_duplicate_number_rejected(self, test_db):
        repo = TransactionRepository(test_db)
        await repo.create_transaction(_transaction("TRX250101AAAA", datetime(2025, 1, 1, 9)))

        with pytest.raises(DuplicateTransactionNumberError) as exc_info:
            await repo.create_transaction(_transaction("TRX250101AAAA", datetime(2025, 1, 1, 10)))

        assert exc_info.value.kind == "conflict"

    async def test_list_filters_and_order(self, test_db):
        repo = TransactionRepository(test_db)
        await repo.create_transaction(_transaction("TRX250101AAAA", datetime(2025, 1, 1, 9)))
        await repo.create_transaction(_transaction(
            "TRX250102BBBB", datetime(2025, 1, 2, 23, 59), payment_method="CREDIT", member_id="m1"
        ))
        await repo.create_transaction(_transaction("TRX250103CCCC", datetime(2025, 1, 3, 0, 0)))

        all_transactions = await repo.list_transactions()
        assert [t.transaction_number for t in all_transactions] == [
            "TRX250103CCCC", "TRX250102BBBB", "TRX250101AAAA"
        ]

        in_range = await repo.list_transactions(
            start=datetime(2025, 1, 1, 9), end=datetime(2025, 1, 2, 23, 59)
        )
        assert {t.transaction_number for t in in_range} == {"TRX250101AAAA", "TRX250102BBBB"}

        assert [t.member_id for t in await repo.list_transactions(member_id="m1")] == ["m1"]
        assert len(await repo.list_transactions(payment_method="CREDIT")) == 1
        assert len(await repo.list_transactions(payment_method="all")) == 3

    async def test_get_transaction(self, test_db):
        repo = TransactionRepository(test_db)
        created = await repo.create_transaction(_transaction("TRX250101AAAA", datetime(2025, 1, 1, 9)))

        found = await repo.get_transaction(str(created.id))

        assert found.transaction_number == "TRX250101AAAA"
        assert await repo.get_transaction("bad") is None


def _debt(transaction_id: str, original: int = 75000) -> DebtInDB:
    return DebtInDB(
        member_id="m1",
        member_name="Ahmad Hidayat",
        transaction_id=transaction_id,
        transaction_number="TRX250101AAAA",
        original_amount=original,
        remaining_amount=original
    )


@pytest.mark.asyncio
class TestDebtRepository:
    """Test debt storage and version-checked balance writes."""

    async def test_one_debt_per_transaction(self, test_db):
        repo = DebtRepository(test_db)
        await repo.create_debt(_debt("trx-1"))

        with pytest.raises(ConflictError):
            await repo.create_debt(_debt("trx-1"))

        assert len(await repo.list_debts()) == 1

    async def test_compare_and_set_increments_version(self, test_db):
        repo = DebtRepository(test_db)
        debt = await repo.create_debt(_debt("trx-1"))

        updated = await repo.compare_and_set_balance(debt, 30000, 45000, "unpaid")

        assert updated.version == debt.version + 1
        assert updated.amount_paid == 30000
        assert await repo.compare_and_set_balance(debt, 30000, 45000, "unpaid") is None

    async def test_total_receivables(self, test_db):
        repo = DebtRepository(test_db)
        first = await repo.create_debt(_debt("trx-1", 75000))
        await repo.create_debt(_debt("trx-2", 20000))
        await repo.compare_and_set_balance(first, 75000, 0, "paid")

        assert await repo.total_receivables() == 20000
