from datetime import date
from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_sales_today: int
    transactions_today: int
    active_members: int
    total_products: int
    total_receivables: int
    low_stock_products: int


class DailySalesReport(BaseModel):
    day: date
    transaction_count: int
    total_sales: int
    total_cash: int
    total_credit: int


class MemberPurchaseReport(BaseModel):
    member_id: str
    member_name: str
    transaction_count: int
    total_purchases: int
    total_credit: int


class SeedResponse(BaseModel):
    success: bool
    message: str
