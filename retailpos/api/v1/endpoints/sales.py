"""
Sales API endpoints for recording transactions and retrieving sales data.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from retailpos.api.deps import get_current_user
from retailpos.api.errors import handle_errors
from retailpos.core.database import get_db
from retailpos.core.export import csv_response
from retailpos.models.sales import PaymentMethod
from retailpos.models.users import User
from retailpos.services.sales_ledger import SalesLedger, SALES_EXPORT_HEADERS

router = APIRouter()
sales_ledger = SalesLedger()


class SaleItemRequest(BaseModel):
    """Request model for sale item."""
    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., gt=0, description="Quantity sold")
    unit_price: Optional[float] = Field(None, gt=0, description="Unit price, defaults to the product price")
    discount_amount: float = Field(0, ge=0, description="Line discount")


class SaleRequest(BaseModel):
    """Request model for recording a sale."""
    items: List[SaleItemRequest] = Field(..., min_length=1, description="Sale items")
    payment_method: PaymentMethod = Field(..., description="Payment method (CASH, CARD, DIGITAL)")
    customer_id: Optional[int] = Field(None, description="Customer ID")
    discount_percentage: float = Field(0, ge=0, le=100, description="Order discount percentage")
    points_redeemed: int = Field(0, ge=0, description="Loyalty points to redeem")
    amount_paid: Optional[float] = Field(None, ge=0, description="Cash tendered")
    notes: Optional[str] = Field(None, description="Additional notes")


@router.post("", status_code=201)
async def record_sale(
    sale_data: SaleRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Record a new sale transaction.

    This endpoint records the sale and its items, decrements stock with a
    stock log per line and settles loyalty points, all in one transaction.
    """
    with handle_errors("record sale"):
        return await sales_ledger.create_sale(db, user.id, sale_data.model_dump())


@router.get("")
async def list_sales(
    search: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    user_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    payment_method: Optional[PaymentMethod] = None,
    page: int = 1,
    limit: int = 100,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get sales history, newest first.

    Search matches a sale number or the customer's name. A date-only
    end_date includes the whole day.
    """
    with handle_errors("fetch sales"):
        sales, pagination = await sales_ledger.list_sales(
            db,
            search=search,
            start_date=start_date,
            end_date=end_date,
            user_id=user_id,
            customer_id=customer_id,
            payment_method=payment_method,
            page=page,
            limit=limit,
        )
        return {"data": sales, "pagination": pagination}


@router.get("/export")
async def export_sales(
    search: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    user_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    payment_method: Optional[PaymentMethod] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Download the filtered sales report as CSV."""
    with handle_errors("export sales"):
        rows = await sales_ledger.export_rows(
            db,
            search=search,
            start_date=start_date,
            end_date=end_date,
            user_id=user_id,
            customer_id=customer_id,
            payment_method=payment_method,
        )
        return csv_response("sales-report", SALES_EXPORT_HEADERS, rows)


@router.get("/{sale_id}")
async def get_sale(
    sale_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a sale with its items, customer and cashier."""
    with handle_errors("fetch sale"):
        return await sales_ledger.get_sale(db, sale_id)
