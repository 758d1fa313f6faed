"""
Customer API endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from retailpos.api.deps import get_current_user
from retailpos.api.errors import handle_errors
from retailpos.core.database import get_db
from retailpos.models.users import User
from retailpos.services.customer_directory import CustomerDirectory

router = APIRouter()
customer_directory = CustomerDirectory()


class CustomerRequest(BaseModel):
    """Request model for creating or updating a customer."""
    full_name: str = Field(..., min_length=1, description="Customer name")
    email: Optional[str] = Field(None, description="Email address")
    phone: Optional[str] = Field(None, description="Phone number")


@router.get("")
async def list_customers(
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get customers, searchable by name, email or phone."""
    with handle_errors("fetch customers"):
        customers, pagination = await customer_directory.list_customers(
            db, search=search, page=page, limit=limit
        )
        return {"data": customers, "pagination": pagination}


@router.post("", status_code=201)
async def create_customer(
    customer: CustomerRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with handle_errors("create customer"):
        return await customer_directory.create_customer(db, customer.model_dump())


@router.get("/{customer_id}")
async def get_customer(
    customer_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a customer with their recent purchases."""
    with handle_errors("fetch customer"):
        return await customer_directory.get_customer(db, customer_id)


@router.put("/{customer_id}")
async def update_customer(
    customer_id: int,
    customer: CustomerRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with handle_errors("update customer"):
        return await customer_directory.update_customer(db, customer_id, customer.model_dump())


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with handle_errors("delete customer"):
        await customer_directory.delete_customer(db, customer_id)
        return {"message": "Customer deleted successfully"}
