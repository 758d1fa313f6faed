"""
Product catalog service: products and categories.
"""
import logging
from typing import List, Dict, Any, Optional, Tuple
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_

from retailpos.core.exceptions import BusinessRuleError, NotFoundError
from retailpos.core.pagination import paginate
from retailpos.models.inventory import Category, Product, StockActionType
from retailpos.models.sales import SaleItem
from retailpos.services.inventory_monitor import InventoryMonitor, infer_action_type

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    "name", "description", "sku", "barcode", "price", "cost",
    "category_id", "image_url", "is_active",
)


def product_to_dict(product: Product, low_stock_threshold: Optional[int] = None) -> Dict[str, Any]:
    data = {
        "id": product.id,
        "sku": product.sku,
        "barcode": product.barcode,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "cost": product.cost,
        "stock_quantity": product.stock_quantity,
        "category_id": product.category_id,
        "category": {"id": product.category.id, "name": product.category.name} if product.category else None,
        "image_url": product.image_url,
        "is_active": product.is_active,
        "created_at": product.created_at.isoformat() if product.created_at else None,
        "updated_at": product.updated_at.isoformat() if product.updated_at else None,
    }
    if low_stock_threshold is not None:
        data["is_low_stock"] = product.stock_quantity <= low_stock_threshold
    return data


def category_to_dict(category: Category, product_count: Optional[int] = None) -> Dict[str, Any]:
    data = {
        "id": category.id,
        "name": category.name,
        "description": category.description,
    }
    if product_count is not None:
        data["product_count"] = product_count
    return data


class ProductCatalog:
    """Service for managing products and categories."""

    def __init__(self):
        self.inventory_monitor = InventoryMonitor()

    # Products

    async def list_products(
        self,
        db: Session,
        search: Optional[str] = None,
        category_id: Optional[int] = None,
        low_stock_threshold: Optional[int] = None,
        active_only: bool = False,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """
        Get a page of products.

        When low_stock_threshold is given only products at or below it are
        returned.
        """
        query = db.query(Product).options(joinedload(Product.category))

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Product.name.ilike(pattern),
                Product.sku.ilike(pattern),
                Product.barcode.ilike(pattern),
            ))
        if category_id:
            query = query.filter(Product.category_id == category_id)
        if low_stock_threshold is not None:
            query = query.filter(Product.stock_quantity <= low_stock_threshold)
        if active_only:
            query = query.filter(Product.is_active == True)  # noqa: E712

        query = query.order_by(Product.name.asc(), Product.id.asc())
        products, meta = paginate(query, page, limit)
        return [product_to_dict(p, low_stock_threshold) for p in products], meta

    async def get_product(self, db: Session, product_id: int) -> Dict[str, Any]:
        return product_to_dict(self._get(db, product_id))

    async def create_product(self, db: Session, data: Dict[str, Any], user_id: Optional[int] = None) -> Dict[str, Any]:
        """Create a product; opening stock is logged as a restock."""
        self._check_sku_free(db, data["sku"])
        self._check_category(db, data.get("category_id"))

        product = Product(
            **{field: data[field] for field in PRODUCT_FIELDS if field in data},
            stock_quantity=0,
        )
        try:
            db.add(product)
            db.flush()

            opening_stock = data.get("stock_quantity") or 0
            if opening_stock:
                self.inventory_monitor.record_stock_change(
                    db,
                    product,
                    opening_stock,
                    StockActionType.RESTOCK,
                    reason="Initial stock",
                    user_id=user_id,
                )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(product)
        logger.info(f"Product created: {product.sku}")
        return product_to_dict(product)

    async def update_product(
        self,
        db: Session,
        product_id: int,
        changes: Dict[str, Any],
        reason: Optional[str] = None,
        action_type: Optional[StockActionType] = None,
        user_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Update product fields.

        A stock_quantity change is written to the stock log in the same
        transaction, with the action inferred from the reason unless given.
        """
        product = self._get(db, product_id)

        if changes.get("sku") and changes["sku"] != product.sku:
            self._check_sku_free(db, changes["sku"])
        if "category_id" in changes:
            self._check_category(db, changes["category_id"])

        try:
            for field in PRODUCT_FIELDS:
                if field in changes:
                    setattr(product, field, changes[field])

            new_stock = changes.get("stock_quantity")
            if new_stock is not None and new_stock != product.stock_quantity:
                self.inventory_monitor.record_stock_change(
                    db,
                    product,
                    new_stock,
                    action_type or infer_action_type(reason),
                    reason=reason or "Manual Adjustment",
                    user_id=user_id,
                )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(product)
        logger.info(f"Product updated: {product.sku}")
        return product_to_dict(product)

    async def delete_product(self, db: Session, product_id: int) -> None:
        product = self._get(db, product_id)

        has_sales = db.query(SaleItem.id).filter(SaleItem.product_id == product_id).first()
        if has_sales:
            raise BusinessRuleError("Cannot delete a product with sales history. Consider deactivating it instead.")

        db.delete(product)
        db.commit()
        logger.info(f"Product deleted: {product.sku}")

    def _get(self, db: Session, product_id: int) -> Product:
        product = db.query(Product).options(joinedload(Product.category)).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    def _check_sku_free(self, db: Session, sku: str) -> None:
        if db.query(Product.id).filter(Product.sku == sku).first():
            raise BusinessRuleError("Product with this SKU already exists")

    def _check_category(self, db: Session, category_id: Optional[int]) -> None:
        if category_id is not None and not db.query(Category.id).filter(Category.id == category_id).first():
            raise NotFoundError("Category", category_id)

    # Categories

    async def list_categories(self, db: Session) -> List[Dict[str, Any]]:
        """Get all categories with their product counts."""
        rows = db.query(
            Category,
            func.count(Product.id).label("product_count"),
        ).outerjoin(Product).group_by(Category.id).order_by(Category.name.asc()).all()

        return [category_to_dict(category, count) for category, count in rows]

    async def create_category(self, db: Session, name: str, description: Optional[str] = None) -> Dict[str, Any]:
        self._check_category_name_free(db, name)

        category = Category(name=name, description=description or None)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category_to_dict(category, 0)

    async def update_category(self, db: Session, category_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        category = self._get_category(db, category_id)

        if changes.get("name") and changes["name"] != category.name:
            self._check_category_name_free(db, changes["name"])
            category.name = changes["name"]
        if "description" in changes:
            category.description = changes["description"] or None

        db.commit()
        db.refresh(category)
        return category_to_dict(category)

    async def delete_category(self, db: Session, category_id: int) -> None:
        category = self._get_category(db, category_id)

        if db.query(Product.id).filter(Product.category_id == category_id).first():
            raise BusinessRuleError("Cannot delete a category that still has products")

        db.delete(category)
        db.commit()

    def _get_category(self, db: Session, category_id: int) -> Category:
        category = db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    def _check_category_name_free(self, db: Session, name: str) -> None:
        if db.query(Category.id).filter(Category.name == name).first():
            raise BusinessRuleError("Category with this name already exists")
