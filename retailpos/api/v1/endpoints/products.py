"""
Product API endpoints for the catalog.
"""
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from retailpos.api.deps import get_current_user, require_admin
from retailpos.api.errors import handle_errors
from retailpos.core.database import get_db
from retailpos.models.inventory import StockActionType
from retailpos.models.users import User
from retailpos.services.product_catalog import ProductCatalog
from retailpos.services.store_settings import StoreSettingsService

router = APIRouter()
product_catalog = ProductCatalog()
store_settings = StoreSettingsService()

NULLABLE_FIELDS = ("barcode", "description", "category_id", "image_url")


class ProductCreateRequest(BaseModel):
    """Request model for creating a product."""
    name: str = Field(..., min_length=1, description="Product name")
    sku: str = Field(..., min_length=1, max_length=50, description="Stock keeping unit")
    barcode: Optional[str] = Field(None, description="Barcode")
    description: Optional[str] = Field(None, description="Description")
    price: float = Field(..., gt=0, description="Selling price")
    cost: float = Field(..., gt=0, description="Cost price")
    stock_quantity: int = Field(0, ge=0, description="Opening stock")
    category_id: Optional[int] = Field(None, description="Category ID")
    image_url: Optional[str] = Field(None, description="Image URL")
    is_active: bool = Field(True, description="Available for sale")


class ProductUpdateRequest(BaseModel):
    """Request model for updating a product. Omitted fields are unchanged."""
    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    barcode: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    cost: Optional[float] = Field(None, gt=0)
    stock_quantity: Optional[int] = Field(None, ge=0, description="Stock quantity cannot be negative")
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    reason: Optional[str] = Field(None, description="Reason for a stock change")
    action_type: Optional[StockActionType] = Field(None, description="Stock action, inferred from reason if omitted")


@router.get("")
async def list_products(
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    low_stock: bool = False,
    active_only: bool = False,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get products.

    Supports search by name, SKU or barcode, category and low-stock filters
    and page/limit pagination.
    """
    with handle_errors("fetch products"):
        threshold = await store_settings.get_low_stock_threshold(db) if low_stock else None
        products, pagination = await product_catalog.list_products(
            db,
            search=search,
            category_id=category_id,
            low_stock_threshold=threshold,
            active_only=active_only,
            page=page,
            limit=limit,
        )
        return {"data": products, "pagination": pagination}


@router.post("", status_code=201)
async def create_product(
    product: ProductCreateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a product. Admin only."""
    with handle_errors("create product"):
        return await product_catalog.create_product(db, product.model_dump(), user_id=admin.id)


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with handle_errors("fetch product"):
        return await product_catalog.get_product(db, product_id)


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    update: ProductUpdateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Update a product. Admin only.

    A stock_quantity change is recorded in the stock log together with the
    optional reason.
    """
    with handle_errors("update product"):
        changes = {
            field: value
            for field, value in update.model_dump(exclude_unset=True, exclude={"reason", "action_type"}).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        return await product_catalog.update_product(
            db,
            product_id,
            changes,
            reason=update.reason,
            action_type=update.action_type,
            user_id=admin.id,
        )


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a product without sales history. Admin only."""
    with handle_errors("delete product"):
        await product_catalog.delete_product(db, product_id)
        return {"message": "Product deleted successfully"}
