"""
Product category endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from retailpos.api.deps import get_current_user, require_admin
from retailpos.api.errors import handle_errors
from retailpos.core.database import get_db
from retailpos.models.users import User
from retailpos.services.product_catalog import ProductCatalog

router = APIRouter()
product_catalog = ProductCatalog()


class CategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Category name")
    description: Optional[str] = Field(None, description="Category description")


@router.get("")
async def list_categories(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all categories with their product counts."""
    with handle_errors("fetch categories"):
        return await product_catalog.list_categories(db)


@router.post("", status_code=201)
async def create_category(
    category: CategoryRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    with handle_errors("create category"):
        return await product_catalog.create_category(db, category.name, category.description)


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    category: CategoryRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    with handle_errors("update category"):
        return await product_catalog.update_category(db, category_id, category.model_dump())


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete an empty category."""
    with handle_errors("delete category"):
        await product_catalog.delete_category(db, category_id)
        return {"message": "Category deleted successfully"}
