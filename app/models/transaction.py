"""
Transaction model - completed sales.

Design principles:
- Written once by the sale service, never updated or deleted
- total is recomputed server-side from line items
- Cash sales carry amount_tendered/change_given, credit sales carry neither
- All amounts in whole currency units
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.base import MongoModel, utcnow


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CREDIT = "CREDIT"


class LineItem(BaseModel):
    """One purchased product line. subtotal = sell_price * quantity."""
    product_id: str
    product_name: str = ""
    code: str = ""
    quantity: int
    cost_price: int = 0
    sell_price: int
    subtotal: int


class TransactionInDB(MongoModel):
    """Sale record."""
    transaction_number: str = ""
    line_items: List[LineItem] = []
    total: int
    payment_method: PaymentMethod
    member_id: Optional[str] = None
    member_name: Optional[str] = None
    amount_tendered: Optional[int] = None
    change_given: Optional[int] = None
    occurred_at: datetime = Field(default_factory=utcnow)
