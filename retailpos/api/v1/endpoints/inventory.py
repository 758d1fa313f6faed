"""
Inventory API endpoints: manual adjustments, stock history and exports.
"""
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from retailpos.api.deps import get_current_user
from retailpos.api.errors import handle_errors
from retailpos.core.database import get_db
from retailpos.core.export import csv_response
from retailpos.models.inventory import StockActionType
from retailpos.models.users import User
from retailpos.services.inventory_monitor import (
    InventoryMonitor,
    INVENTORY_EXPORT_HEADERS,
    STOCK_HISTORY_HEADERS,
)
from retailpos.services.store_settings import StoreSettingsService

router = APIRouter()
inventory_monitor = InventoryMonitor()
store_settings = StoreSettingsService()


class StockAdjustmentRequest(BaseModel):
    """Request model for a manual stock adjustment."""
    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., gt=0, description="Number of units to add or remove")
    type: str = Field(..., description="Direction of the adjustment: add or remove")
    reason: Optional[str] = Field(None, description="Reason for the adjustment")
    action_type: Optional[StockActionType] = Field(None, description="Stock action, inferred from reason if omitted")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v not in ("add", "remove"):
            raise ValueError("type must be 'add' or 'remove'")
        return v


@router.post("/adjust")
async def adjust_stock(
    adjustment: StockAdjustmentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Add or remove stock for a product.

    Removal never takes stock below zero; the log records the change that
    was actually applied.
    """
    with handle_errors("adjust stock"):
        return await inventory_monitor.adjust_stock(
            db,
            product_id=adjustment.product_id,
            quantity=adjustment.quantity,
            direction=adjustment.type,
            reason=adjustment.reason,
            action_type=adjustment.action_type,
            user_id=user.id,
        )


@router.get("/logs")
async def get_stock_logs(
    product_id: Optional[int] = None,
    action_type: Optional[StockActionType] = None,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get stock history, newest first."""
    with handle_errors("fetch stock logs"):
        logs, pagination = await inventory_monitor.list_logs(
            db, product_id=product_id, action_type=action_type, page=page, limit=limit
        )
        return {"data": logs, "pagination": pagination}


@router.get("/logs/export")
async def export_stock_logs(
    product_id: Optional[int] = None,
    action_type: Optional[StockActionType] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Download the stock history as CSV."""
    with handle_errors("export stock history"):
        rows = await inventory_monitor.stock_history_rows(db, product_id=product_id, action_type=action_type)
        return csv_response("stock-history", STOCK_HISTORY_HEADERS, rows)


@router.get("/low-stock")
async def get_low_stock(
    limit: Optional[int] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get active products at or below the store's low stock threshold."""
    with handle_errors("fetch low stock products"):
        threshold = await store_settings.get_low_stock_threshold(db)
        products = await inventory_monitor.low_stock_products(db, threshold, limit=limit)
        return {"threshold": threshold, "products": products, "count": len(products)}


@router.get("/export")
async def export_inventory(
    low_stock_only: bool = False,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Download the inventory audit as CSV."""
    with handle_errors("export inventory"):
        threshold = await store_settings.get_low_stock_threshold(db)
        rows = await inventory_monitor.inventory_export_rows(db, threshold, low_stock_only=low_stock_only)
        return csv_response("inventory", INVENTORY_EXPORT_HEADERS, rows)
