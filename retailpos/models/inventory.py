"""
Inventory models for the product catalog and the stock audit trail.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Text, Enum, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from retailpos.core.database import Base


class StockActionType(enum.Enum):
    """Cause of a stock quantity change."""
    SALE = "SALE"
    RESTOCK = "RESTOCK"
    RETURN = "RETURN"
    THEFT = "THEFT"
    ADJUSTMENT = "ADJUSTMENT"


class Category(Base):
    """Model for product categories."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"


class Product(Base):
    """Model for products."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(50), unique=True, index=True, nullable=False)
    barcode = Column(String(100), nullable=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    # Pricing
    price = Column(Float, nullable=False)
    cost = Column(Float, nullable=False)

    # Inventory
    stock_quantity = Column(Integer, default=0, nullable=False)

    image_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    category = relationship("Category", back_populates="products")
    stock_logs = relationship("StockLog", back_populates="product", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}', name='{self.name}')>"


class StockLog(Base):
    """Audit record of a stock quantity change."""
    __tablename__ = "stock_logs"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    action_type = Column(Enum(StockActionType), nullable=False)
    quantity_change = Column(Integer, nullable=False)  # Positive for additions, negative for reductions
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    product = relationship("Product", back_populates="stock_logs")
    user = relationship("User", back_populates="stock_logs")

    def __repr__(self):
        return f"<StockLog(id={self.id}, product_id={self.product_id}, action={self.action_type}, change={self.quantity_change})>"
