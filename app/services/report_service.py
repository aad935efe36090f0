from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.models.base import utcnow
from app.models.transaction import PaymentMethod, TransactionInDB
from app.repositories.debt_repo import DebtRepository
from app.repositories.member_repo import MemberRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.transaction_repo import TransactionRepository
from app.schemas.debt import MemberDebtSummary
from app.schemas.report import DashboardStats, DailySalesReport, MemberPurchaseReport
from app.utils.settlement import summarize_debts_by_member


def day_bounds(start: Optional[date], end: Optional[date]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Inclusive datetime bounds covering whole calendar days."""
    start_dt = datetime.combine(start, time.min) if start else None
    end_dt = datetime.combine(end, time.max) if end else None
    return start_dt, end_dt


def build_daily_sales(transactions: Iterable[TransactionInDB]) -> list[DailySalesReport]:
    """Totals per calendar day, oldest day first."""
    days: dict[date, dict] = {}
    for transaction in transactions:
        day = transaction.occurred_at.date()
        row = days.setdefault(day, {
            "transaction_count": 0,
            "total_sales": 0,
            "total_cash": 0,
            "total_credit": 0
        })
        row["transaction_count"] += 1
        row["total_sales"] += transaction.total
        if transaction.payment_method == PaymentMethod.CREDIT:
            row["total_credit"] += transaction.total
        else:
            row["total_cash"] += transaction.total

    return [DailySalesReport(day=day, **days[day]) for day in sorted(days)]


def build_member_purchases(transactions: Iterable[TransactionInDB]) -> list[MemberPurchaseReport]:
    """Totals per member for sales that name one, largest spender first."""
    members: dict[str, dict] = {}
    for transaction in transactions:
        if not transaction.member_id:
            continue
        row = members.setdefault(transaction.member_id, {
            "member_name": transaction.member_name or "",
            "transaction_count": 0,
            "total_purchases": 0,
            "total_credit": 0
        })
        row["transaction_count"] += 1
        row["total_purchases"] += transaction.total
        if transaction.payment_method == PaymentMethod.CREDIT:
            row["total_credit"] += transaction.total

    reports = [
        MemberPurchaseReport(member_id=member_id, **row)
        for member_id, row in members.items()
    ]
    reports.sort(key=lambda r: (-r.total_purchases, r.member_id))
    return reports


class ReportService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.transaction_repo = TransactionRepository(db)
        self.debt_repo = DebtRepository(db)
        self.member_repo = MemberRepository(db)
        self.product_repo = ProductRepository(db)

    async def dashboard(self, now: Optional[datetime] = None) -> DashboardStats:
        now = now or utcnow()
        start_of_day = datetime.combine(now.date(), time.min)
        today = await self.transaction_repo.list_transactions(
            start=start_of_day, end=start_of_day + timedelta(days=1) - timedelta(microseconds=1)
        )
        return DashboardStats(
            total_sales_today=sum(t.total for t in today),
            transactions_today=len(today),
            active_members=await self.member_repo.count_active_members(),
            total_products=await self.product_repo.count_products(),
            total_receivables=await self.debt_repo.total_receivables(),
            low_stock_products=await self.product_repo.count_products(
                low_stock_threshold=settings.LOW_STOCK_THRESHOLD
            )
        )

    async def daily_sales(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> list[DailySalesReport]:
        start_dt, end_dt = day_bounds(start, end)
        transactions = await self.transaction_repo.list_transactions(start=start_dt, end=end_dt)
        return build_daily_sales(transactions)

    async def member_purchases(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> list[MemberPurchaseReport]:
        start_dt, end_dt = day_bounds(start, end)
        transactions = await self.transaction_repo.list_transactions(start=start_dt, end=end_dt)
        return build_member_purchases(transactions)

    async def debt_report(self, member_id: Optional[str] = None) -> list[MemberDebtSummary]:
        debts = await self.debt_repo.list_debts(member_id=member_id)
        return summarize_debts_by_member(debts)
