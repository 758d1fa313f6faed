"""
Tests for CustomerDirectory service.
"""
import pytest

from retailpos.core.exceptions import NotFoundError
from retailpos.models import Customer, Sale
from retailpos.services.customer_directory import CustomerDirectory
from retailpos.services.sales_ledger import SalesLedger


@pytest.fixture
def directory():
    return CustomerDirectory()


@pytest.mark.asyncio
async def test_create_stores_blank_contact_as_null(db, directory):
    result = await directory.create_customer(db, {"full_name": "Alex Kim", "email": "", "phone": ""})

    assert result["email"] is None
    assert result["phone"] is None
    assert result["loyalty_points"] == 0


@pytest.mark.asyncio
async def test_search_by_phone(db, directory, customer):
    db.add(Customer(full_name="Other Person", phone="555-9999", loyalty_points=0))
    db.commit()

    data, meta = await directory.list_customers(db, search="0101")

    assert [c["full_name"] for c in data] == ["Jordan Lee"]
    assert meta["total"] == 1


@pytest.mark.asyncio
async def test_get_customer_includes_recent_sales(db, directory, admin, store_settings, products, customer):
    ledger = SalesLedger()
    for _ in range(6):
        await ledger.create_sale(db, admin.id, {
            "payment_method": "CARD",
            "customer_id": customer.id,
            "items": [{"product_id": products[0].id, "quantity": 1}],
        })

    result = await directory.get_customer(db, customer.id)

    assert len(result["sales"]) == 5
    assert result["sales"][0]["id"] > result["sales"][-1]["id"]


@pytest.mark.asyncio
async def test_delete_customer_keeps_sales_as_walk_in(db, directory, admin, store_settings, products, customer):
    sale = await SalesLedger().create_sale(db, admin.id, {
        "payment_method": "CARD",
        "customer_id": customer.id,
        "items": [{"product_id": products[0].id, "quantity": 1}],
    })

    await directory.delete_customer(db, customer.id)

    db.expire_all()
    assert db.query(Customer).count() == 0
    assert db.query(Sale).filter(Sale.id == sale["id"]).one().customer_id is None


@pytest.mark.asyncio
async def test_update_missing_customer(db, directory):
    with pytest.raises(NotFoundError, match="Customer not found"):
        await directory.update_customer(db, 42, {"full_name": "Nobody"})
