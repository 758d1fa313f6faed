"""
Tests for SalesAnalytics service.
"""
import pytest
import pytest_asyncio
from datetime import date, datetime, timedelta, timezone

from retailpos.models import Sale, SaleStatus
from retailpos.services.sales_analytics import SalesAnalytics, as_utc
from retailpos.services.sales_ledger import SalesLedger


@pytest.fixture
def analytics():
    return SalesAnalytics()


@pytest_asyncio.fixture
async def recorded_sales(db, admin, store_settings, products):
    milk, bread, _ = products
    ledger = SalesLedger()
    first = await ledger.create_sale(db, admin.id, {
        "payment_method": "CARD",
        "items": [{"product_id": milk.id, "quantity": 3}, {"product_id": bread.id, "quantity": 1}],
    })
    second = await ledger.create_sale(db, admin.id, {
        "payment_method": "CASH",
        "items": [{"product_id": milk.id, "quantity": 1}],
        "amount_paid": 10.0,
    })
    return first, second


@pytest.mark.asyncio
async def test_overview(db, analytics, recorded_sales):
    now = datetime.now(timezone.utc)
    first, second = recorded_sales

    result = await analytics.overview(db, now)

    trend = result["sales_trend"]
    assert len(trend) == 7
    assert trend[-1]["date"] == now.strftime("%b %d")
    assert trend[0]["date"] == (now - timedelta(days=6)).strftime("%b %d")
    assert trend[-1]["amount"] == round(first["total_amount"] + second["total_amount"], 2)
    assert all(day["amount"] == 0 for day in trend[:-1])

    assert result["top_products"][0] == {"name": "Milk", "quantity": 4, "price": 4.0}
    assert sorted((m["name"], m["value"]) for m in result["payment_methods"]) == [("CARD", 1), ("CASH", 1)]
    assert [p["sku"] for p in result["low_stock_products"]] == ["BREAD001"]
    assert result["today"]["total_sales"] == 2


@pytest.mark.asyncio
async def test_cancelled_sales_are_excluded(db, analytics, recorded_sales):
    first, _ = recorded_sales
    db.query(Sale).filter(Sale.id == first["id"]).update({Sale.status: SaleStatus.CANCELLED})
    db.commit()

    summary = await analytics.summary(db, datetime.now(timezone.utc).date(), datetime.now(timezone.utc).date())

    assert summary["total_sales"] == 1
    assert summary["total_revenue"] == 4.4
    assert summary["average_transaction"] == 4.4


@pytest.mark.asyncio
async def test_daily_report(db, analytics, recorded_sales):
    report = await analytics.daily_report(db, datetime.now(timezone.utc).date())

    assert report["total_sales"] == 2
    assert report["items_sold"] == 5

    empty = await analytics.daily_report(db, datetime.now(timezone.utc).date() - timedelta(days=3))
    assert empty["total_sales"] == 0
    assert empty["average_transaction"] == 0.0


def test_timestamps_are_bucketed_on_the_utc_day():
    late_evening_utc = datetime(2026, 3, 10, 1, 30, tzinfo=timezone(timedelta(hours=5)))

    assert as_utc(late_evening_utc).date() == date(2026, 3, 9)
    assert as_utc(datetime(2026, 3, 10, 1, 30)).date() == date(2026, 3, 10)


@pytest.mark.asyncio
async def test_overview_accepts_offset_now(db, analytics, recorded_sales):
    now = datetime.now(timezone.utc)
    offset_now = now.astimezone(timezone(timedelta(hours=-11)))

    result = await analytics.overview(db, offset_now)

    assert result["sales_trend"][-1]["date"] == now.strftime("%b %d")
    assert result["today"]["total_sales"] == 2
