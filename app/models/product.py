from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

from app.models.base import MongoModel

# Categories offered by the UI; any non-empty category is accepted
PRODUCT_CATEGORIES = ["Sembako", "Minuman", "Makanan", "Rokok", "Kebersihan", "Lainnya"]


class ProductBase(BaseModel):
    """Base product schema. Prices are whole currency units."""
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=150)
    category: str = Field("Lainnya", min_length=1, max_length=50)
    cost_price: int = Field(0, ge=0)
    sell_price: int = Field(..., ge=0)
    stock_quantity: int = Field(0, ge=0)
    unit: str = Field("pcs", min_length=1, max_length=30)


class ProductCreate(ProductBase):
    """Product creation schema."""
    pass


class ProductUpdate(BaseModel):
    """Product update schema."""
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    cost_price: Optional[int] = Field(None, ge=0)
    sell_price: Optional[int] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=30)


class ProductResponse(ProductBase):
    """Product response schema."""
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductInDB(MongoModel):
    """Product database schema."""
    code: str
    name: str
    category: str
    cost_price: int = 0
    sell_price: int
    stock_quantity: int = 0
    unit: str = "pcs"
    is_deleted: bool = False
