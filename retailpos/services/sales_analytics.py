"""
Sales analytics for the dashboard and the daily report task.
"""
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Dict, Any, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, func

from retailpos.models.inventory import Product
from retailpos.models.sales import Sale, SaleItem, SaleStatus
from retailpos.services.inventory_monitor import InventoryMonitor
from retailpos.services.store_settings import StoreSettingsService

logger = logging.getLogger(__name__)

TREND_DAYS = 7
TOP_PRODUCTS_LIMIT = 5
LOW_STOCK_LIMIT = 5


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are treated as UTC; aware ones are converted to it."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_day_bounds(start_day: date, end_day: date):
    return (
        datetime.combine(start_day, time.min, tzinfo=timezone.utc),
        datetime.combine(end_day, time.max, tzinfo=timezone.utc),
    )


class SalesAnalytics:
    """Service for aggregated sales figures."""

    def __init__(self):
        self.inventory_monitor = InventoryMonitor()
        self.store_settings = StoreSettingsService()

    async def overview(self, db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Everything the dashboard overview shows, in one payload."""
        now = as_utc(now or datetime.now(timezone.utc))
        threshold = await self.store_settings.get_low_stock_threshold(db)

        return {
            "sales_trend": await self.sales_trend(db, now),
            "top_products": await self.top_products(db),
            "payment_methods": await self.payment_methods(db),
            "low_stock_products": await self.inventory_monitor.low_stock_products(
                db, threshold, limit=LOW_STOCK_LIMIT
            ),
            "today": await self.summary(db, now.date(), now.date()),
            "last_updated": now.isoformat(),
        }

    async def sales_trend(self, db: Session, now: datetime, days: int = TREND_DAYS) -> List[Dict[str, Any]]:
        """Completed sales revenue per day, oldest first, zero-filled."""
        now = as_utc(now)
        start, _ = utc_day_bounds((now - timedelta(days=days - 1)).date(), now.date())

        sales = db.query(Sale.created_at, Sale.total_amount).filter(
            Sale.created_at >= start,
            Sale.status == SaleStatus.COMPLETED,
        ).all()

        totals: Dict[date, float] = {}
        for offset in range(days):
            totals[(now - timedelta(days=offset)).date()] = 0.0

        for created_at, amount in sales:
            day = as_utc(created_at).date()
            if day in totals:
                totals[day] += float(amount or 0)

        return [
            {"date": day.strftime("%b %d"), "amount": round(amount, 2)}
            for day, amount in sorted(totals.items())
        ]

    async def top_products(self, db: Session, limit: int = TOP_PRODUCTS_LIMIT) -> List[Dict[str, Any]]:
        """Best sellers by quantity across completed sales."""
        rows = db.query(
            Product.name,
            Product.price,
            func.sum(SaleItem.quantity).label("total_quantity"),
        ).join(SaleItem, SaleItem.product_id == Product.id).join(
            Sale, Sale.id == SaleItem.sale_id
        ).filter(
            Sale.status == SaleStatus.COMPLETED
        ).group_by(Product.id, Product.name, Product.price).order_by(
            func.sum(SaleItem.quantity).desc()
        ).limit(limit).all()

        return [
            {"name": name, "quantity": int(quantity or 0), "price": float(price or 0)}
            for name, price, quantity in rows
        ]

    async def payment_methods(self, db: Session) -> List[Dict[str, Any]]:
        rows = db.query(
            Sale.payment_method,
            func.count(Sale.id),
        ).filter(
            Sale.status == SaleStatus.COMPLETED
        ).group_by(Sale.payment_method).all()

        return [{"name": method.value, "value": int(count)} for method, count in rows]

    async def summary(self, db: Session, start_day: date, end_day: date) -> Dict[str, Any]:
        """Transaction count, revenue and average ticket for a date range."""
        start, end = utc_day_bounds(start_day, end_day)
        conditions = and_(
            Sale.created_at >= start,
            Sale.created_at <= end,
            Sale.status == SaleStatus.COMPLETED,
        )

        total_sales, total_revenue = db.query(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.total_amount), 0.0),
        ).filter(conditions).one()

        total_sales = int(total_sales or 0)
        total_revenue = round(float(total_revenue or 0), 2)

        return {
            "total_sales": total_sales,
            "total_revenue": total_revenue,
            "average_transaction": round(total_revenue / total_sales, 2) if total_sales > 0 else 0.0,
        }

    async def daily_report(self, db: Session, day: date) -> Dict[str, Any]:
        """Summary of one day's trading, used by the scheduled report task."""
        summary = await self.summary(db, day, day)
        start, end = utc_day_bounds(day, day)

        items_sold = db.query(func.coalesce(func.sum(SaleItem.quantity), 0)).select_from(SaleItem).join(
            Sale, Sale.id == SaleItem.sale_id
        ).filter(
            Sale.created_at >= start,
            Sale.created_at <= end,
            Sale.status == SaleStatus.COMPLETED,
        ).scalar()

        report = {
            "date": day.isoformat(),
            **summary,
            "items_sold": int(items_sold or 0),
        }
        logger.info(f"Daily report for {day.isoformat()}: {report['total_sales']} sales, {report['total_revenue']:.2f} revenue")
        return report
