"""
Tests for Celery background tasks, run in-process.
"""
import asyncio
from datetime import datetime, timezone

from retailpos.services.sales_ledger import SalesLedger
from retailpos.worker.tasks import generate_daily_report, scan_low_stock


def test_scan_low_stock(db, store_settings, products):
    result = scan_low_stock()

    assert result["status"] == "success"
    assert result["threshold"] == 5
    assert result["low_stock_count"] == 1
    assert result["products"][0]["sku"] == "BREAD001"


def test_generate_daily_report_for_given_day(db, admin, store_settings, products):
    asyncio.run(SalesLedger().create_sale(
        db, admin.id, {"payment_method": "CARD", "items": [{"product_id": products[0].id, "quantity": 2}]}
    ))
    today = datetime.now(timezone.utc).date().isoformat()

    result = generate_daily_report(today)

    assert result["status"] == "success"
    assert result["report"]["date"] == today
    assert result["report"]["total_sales"] == 1
    assert result["report"]["items_sold"] == 2


def test_generate_daily_report_defaults_to_yesterday(db):
    result = generate_daily_report()

    assert result["status"] == "success"
    assert result["report"]["total_sales"] == 0
    assert result["report"]["date"] < datetime.now(timezone.utc).date().isoformat()
