from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.errors import POSError, to_http_exception
from app.db.mongo import get_db
from app.schemas.debt import MemberDebtSummary
from app.schemas.report import (
    DashboardStats,
    DailySalesReport,
    MemberPurchaseReport,
    SeedResponse,
)
from app.services.report_service import ReportService
from app.services.seed_service import SeedService

router = APIRouter(tags=["reports"])


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(db = Depends(get_db)):
    """Today's sales, member/product counts and outstanding credit."""
    try:
        return await ReportService(db).dashboard()
    except POSError as exc:
        raise to_http_exception(exc)


@router.get("/reports/daily-sales", response_model=list[DailySalesReport])
async def daily_sales_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db = Depends(get_db)
):
    try:
        return await ReportService(db).daily_sales(start_date, end_date)
    except POSError as exc:
        raise to_http_exception(exc)


@router.get("/reports/member-purchases", response_model=list[MemberPurchaseReport])
async def member_purchase_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db = Depends(get_db)
):
    try:
        return await ReportService(db).member_purchases(start_date, end_date)
    except POSError as exc:
        raise to_http_exception(exc)


@router.get("/reports/debts", response_model=list[MemberDebtSummary])
async def debt_report(member_id: Optional[str] = Query(None), db = Depends(get_db)):
    try:
        return await ReportService(db).debt_report(member_id)
    except POSError as exc:
        raise to_http_exception(exc)


@router.post("/seed", response_model=SeedResponse)
async def seed_sample_data(db = Depends(get_db)):
    """Load sample members and products into an empty database."""
    try:
        success, message = await SeedService(db).seed()
    except POSError as exc:
        raise to_http_exception(exc)
    return SeedResponse(success=success, message=message)
