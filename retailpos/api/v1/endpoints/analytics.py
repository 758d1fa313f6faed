"""
Analytics endpoint backing the dashboard overview.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from retailpos.api.deps import get_current_user
from retailpos.api.errors import handle_errors
from retailpos.core.database import get_db
from retailpos.models.users import User
from retailpos.services.sales_analytics import SalesAnalytics

router = APIRouter()
sales_analytics = SalesAnalytics()


@router.get("")
async def get_analytics(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get dashboard overview data.

    Returns the 7-day sales trend, top products, payment method split,
    low stock products and today's totals.
    """
    with handle_errors("fetch analytics"):
        return await sales_analytics.overview(db)
