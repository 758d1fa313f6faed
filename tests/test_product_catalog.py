"""
Tests for ProductCatalog service.
"""
import pytest

from retailpos.core.exceptions import BusinessRuleError, NotFoundError
from retailpos.models import Product, StockActionType, StockLog
from retailpos.services.product_catalog import ProductCatalog
from retailpos.services.sales_ledger import SalesLedger


class TestProductCatalog:
    """Test cases for ProductCatalog service."""

    @pytest.fixture
    def catalog(self):
        return ProductCatalog()

    @pytest.fixture
    def new_product(self, category):
        return {
            "name": "Coffee Beans",
            "sku": "COFFEE001",
            "barcode": "0001234500042",
            "price": 12.99,
            "cost": 8.0,
            "stock_quantity": 15,
            "category_id": category.id,
            "is_active": True,
        }

    @pytest.mark.asyncio
    async def test_create_product_logs_opening_stock(self, db, catalog, admin, new_product):
        result = await catalog.create_product(db, new_product, user_id=admin.id)

        assert result["sku"] == "COFFEE001"
        assert result["stock_quantity"] == 15
        assert result["category"]["name"] == "Groceries"

        log = db.query(StockLog).one()
        assert log.action_type == StockActionType.RESTOCK
        assert log.reason == "Initial stock"
        assert log.quantity_change == 15

    @pytest.mark.asyncio
    async def test_create_product_duplicate_sku(self, db, catalog, products, new_product):
        new_product["sku"] = "MILK001"

        with pytest.raises(BusinessRuleError, match="SKU already exists"):
            await catalog.create_product(db, new_product)

    @pytest.mark.asyncio
    async def test_create_product_unknown_category(self, db, catalog, new_product):
        new_product["category_id"] = 999

        with pytest.raises(NotFoundError):
            await catalog.create_product(db, new_product)

    @pytest.mark.asyncio
    async def test_update_product_stock_change_is_logged(self, db, catalog, admin, products):
        milk = products[0]

        result = await catalog.update_product(
            db, milk.id, {"stock_quantity": 12, "price": 4.5}, reason="Damaged return", user_id=admin.id
        )

        assert result["stock_quantity"] == 12
        assert result["price"] == 4.5

        log = db.query(StockLog).one()
        assert log.action_type == StockActionType.RETURN
        assert log.previous_stock == 20
        assert log.quantity_change == -8

    @pytest.mark.asyncio
    async def test_list_products_filters(self, db, catalog, products):
        data, meta = await catalog.list_products(db, search="mil")
        assert [p["sku"] for p in data] == ["MILK001"]

        data, _ = await catalog.list_products(db, low_stock_threshold=5)
        assert {p["sku"] for p in data} == {"BREAD001", "TEA001"}
        assert all(p["is_low_stock"] for p in data)

        data, meta = await catalog.list_products(db, active_only=True, limit=1)
        assert len(data) == 1
        assert meta == {"page": 1, "limit": 1, "total": 2, "total_pages": 2}

    @pytest.mark.asyncio
    async def test_delete_product_with_sales_rejected(self, db, catalog, admin, store_settings, products):
        milk = products[0]
        await SalesLedger().create_sale(
            db, admin.id, {"payment_method": "CARD", "items": [{"product_id": milk.id, "quantity": 1}]}
        )

        with pytest.raises(BusinessRuleError, match="sales history"):
            await catalog.delete_product(db, milk.id)

    @pytest.mark.asyncio
    async def test_delete_product(self, db, catalog, products):
        bread = products[1]

        await catalog.delete_product(db, bread.id)

        assert db.query(Product).filter(Product.id == bread.id).first() is None

    @pytest.mark.asyncio
    async def test_categories(self, db, catalog, category, products):
        created = await catalog.create_category(db, "Beverages", "Drinks")
        assert created["product_count"] == 0

        categories = await catalog.list_categories(db)
        assert [(c["name"], c["product_count"]) for c in categories] == [("Beverages", 0), ("Groceries", 3)]

        with pytest.raises(BusinessRuleError, match="already exists"):
            await catalog.create_category(db, "Groceries")

        with pytest.raises(BusinessRuleError, match="still has products"):
            await catalog.delete_category(db, category.id)

        updated = await catalog.update_category(db, created["id"], {"name": "Drinks", "description": ""})
        assert updated["name"] == "Drinks"
        assert updated["description"] is None

        await catalog.delete_category(db, created["id"])
        assert len(await catalog.list_categories(db)) == 1
