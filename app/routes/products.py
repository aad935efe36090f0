from typing import Optional

from fastapi import APIRouter, Depends, status, Query

from app.core.config import settings
from app.core.errors import POSError, ProductNotFoundError, to_http_exception
from app.db.mongo import get_db
from app.models.product import ProductCreate, ProductUpdate, ProductResponse, ProductInDB
from app.repositories.product_repo import ProductRepository

router = APIRouter(prefix="/products", tags=["products"])


def _to_product_response(product: ProductInDB) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        code=product.code,
        name=product.name,
        category=product.category,
        cost_price=product.cost_price,
        sell_price=product.sell_price,
        stock_quantity=product.stock_quantity,
        unit=product.unit,
        created_at=product.created_at,
        updated_at=product.updated_at
    )


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(product_data: ProductCreate, db = Depends(get_db)):
    """Add a product to the catalog."""
    try:
        product = await ProductRepository(db).create_product(product_data)
    except POSError as exc:
        raise to_http_exception(exc)
    return _to_product_response(product)


@router.get("", response_model=list[ProductResponse])
async def list_products(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Match name or code"),
    low_stock: bool = Query(False, description="Only products below the low-stock threshold"),
    db = Depends(get_db)
):
    """List products, newest first."""
    threshold = settings.LOW_STOCK_THRESHOLD if low_stock else None
    try:
        products = await ProductRepository(db).list_products(category, search, threshold)
    except POSError as exc:
        raise to_http_exception(exc)
    return [_to_product_response(product) for product in products]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db = Depends(get_db)):
    try:
        product = await ProductRepository(db).get_product(product_id)
    except POSError as exc:
        raise to_http_exception(exc)
    if not product:
        raise to_http_exception(ProductNotFoundError(product_id))
    return _to_product_response(product)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, product_data: ProductUpdate, db = Depends(get_db)):
    """Update a product, including manual stock corrections."""
    try:
        product = await ProductRepository(db).update_product(product_id, product_data)
    except POSError as exc:
        raise to_http_exception(exc)
    if not product:
        raise to_http_exception(ProductNotFoundError(product_id))
    return _to_product_response(product)


@router.delete("/{product_id}")
async def delete_product(product_id: str, db = Depends(get_db)):
    """Soft delete a product."""
    try:
        deleted = await ProductRepository(db).soft_delete_product(product_id)
    except POSError as exc:
        raise to_http_exception(exc)
    if not deleted:
        raise to_http_exception(ProductNotFoundError(product_id))
    return {"success": True}
