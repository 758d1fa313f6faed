"""
Celery background tasks for RetailPOS.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone

from retailpos.worker.celery import celery
from retailpos.services.sales_analytics import SalesAnalytics
from retailpos.services.inventory_monitor import InventoryMonitor
from retailpos.services.store_settings import StoreSettingsService
from retailpos.core.database import get_db_context

logger = logging.getLogger(__name__)


@celery.task(bind=True)
def generate_daily_report(self, day: str = None):
    """Generate the sales summary for a day, yesterday by default."""
    try:
        logger.info("Starting daily report generation task")

        if day:
            report_day = datetime.strptime(day, "%Y-%m-%d").date()
        else:
            report_day = datetime.now(timezone.utc).date() - timedelta(days=1)

        with get_db_context() as db:
            report = asyncio.run(SalesAnalytics().daily_report(db, report_day))

        logger.info("Daily report generated successfully")
        return {
            "status": "success",
            "report": report,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    except Exception as e:
        logger.error(f"Failed to generate daily report: {e}")
        raise self.retry(countdown=1800, max_retries=2)  # Retry in 30 minutes


@celery.task(bind=True)
def scan_low_stock(self):
    """Log active products at or below the store's low stock threshold."""
    try:
        logger.info("Starting low stock scan task")

        with get_db_context() as db:
            threshold = asyncio.run(StoreSettingsService().get_low_stock_threshold(db))
            products = asyncio.run(InventoryMonitor().low_stock_products(db, threshold))

        for product in products:
            logger.warning(
                f"Low stock: {product['name']} ({product['sku']}) has {product['stock_quantity']} left"
            )

        logger.info(f"Low stock scan found {len(products)} products at or below {threshold}")
        return {
            "status": "success",
            "threshold": threshold,
            "low_stock_count": len(products),
            "products": products,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    except Exception as e:
        logger.error(f"Failed to scan low stock: {e}")
        raise self.retry(countdown=300, max_retries=3)  # Retry in 5 minutes
