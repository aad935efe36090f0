from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.models.transaction import PaymentMethod


class LineItemCreate(BaseModel):
    """A cart line as sent by the till. Any client subtotal is ignored."""
    product_id: str
    product_name: str = ""
    code: str = ""
    quantity: int
    cost_price: int = 0
    sell_price: int


class SaleCreate(BaseModel):
    """Request body to record a sale."""
    line_items: List[LineItemCreate] = Field(default_factory=list)
    payment_method: PaymentMethod
    member_id: Optional[str] = None
    member_name: Optional[str] = None
    amount_tendered: Optional[int] = None


class LineItemResponse(BaseModel):
    product_id: str
    product_name: str
    code: str
    quantity: int
    cost_price: int
    sell_price: int
    subtotal: int


class TransactionResponse(BaseModel):
    id: str
    transaction_number: str
    line_items: List[LineItemResponse]
    total: int
    payment_method: PaymentMethod
    member_id: Optional[str] = None
    member_name: Optional[str] = None
    amount_tendered: Optional[int] = None
    change_given: Optional[int] = None
    occurred_at: datetime
