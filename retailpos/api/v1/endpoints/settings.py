"""
Store settings endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from retailpos.api.deps import get_current_user, require_admin
from retailpos.api.errors import handle_errors
from retailpos.core.database import get_db
from retailpos.models.users import User
from retailpos.services.store_settings import StoreSettingsService

router = APIRouter()
store_settings = StoreSettingsService()


class StoreSettingsRequest(BaseModel):
    """Request model for the store profile and rates."""
    store_name: str = Field(..., min_length=1, description="Store name")
    address: Optional[str] = Field(None, description="Store address")
    phone: Optional[str] = Field(None, description="Contact phone")
    email: Optional[str] = Field(None, description="Contact email")
    currency: str = Field(..., min_length=1, max_length=10, description="Currency code")
    tax_rate: float = Field(..., ge=0, description="Tax rate in percent")
    loyalty_rate: float = Field(..., ge=0, description="Points earned per currency unit spent")


class InventorySettingsRequest(BaseModel):
    low_stock_threshold: int = Field(..., ge=1, description="Low stock alert threshold")


@router.get("")
async def get_settings(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with handle_errors("fetch settings"):
        return await store_settings.get_settings(db)


@router.post("")
async def update_settings(
    update: StoreSettingsRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update the store profile, tax rate and loyalty rate. Admin only."""
    with handle_errors("update settings"):
        return await store_settings.update_settings(db, update.model_dump())


@router.get("/inventory")
async def get_inventory_settings(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with handle_errors("fetch inventory settings"):
        return {"low_stock_threshold": await store_settings.get_low_stock_threshold(db)}


@router.put("/inventory")
async def update_inventory_settings(
    update: InventorySettingsRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    with handle_errors("update inventory settings"):
        threshold = await store_settings.update_low_stock_threshold(db, update.low_stock_threshold)
        return {"low_stock_threshold": threshold}
