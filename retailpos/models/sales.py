"""
Sales models for tracking POS transactions.
"""
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, Text, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from retailpos.core.database import Base


class PaymentMethod(enum.Enum):
    """Payment method enumeration."""
    CASH = "CASH"
    CARD = "CARD"
    DIGITAL = "DIGITAL"


class SaleStatus(enum.Enum):
    """Sale status enumeration."""
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class Sale(Base):
    """Model for sales transactions."""
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)

    # Payment information
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    subtotal = Column(Float, nullable=False)
    discount_amount = Column(Float, nullable=False, default=0.0)
    tax_amount = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False)
    amount_paid = Column(Float, nullable=False)
    change_due = Column(Float, nullable=False, default=0.0)

    # Loyalty
    points_redeemed = Column(Integer, nullable=False, default=0)
    points_earned = Column(Integer, nullable=False, default=0)

    status = Column(Enum(SaleStatus), default=SaleStatus.COMPLETED, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="sales")
    customer = relationship("Customer", back_populates="sales")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Sale(id={self.id}, total={self.total_amount}, status={self.status})>"


class SaleItem(Base):
    """Model for individual line items in a sale."""
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    discount_amount = Column(Float, nullable=False, default=0.0)
    subtotal = Column(Float, nullable=False)

    # Relationships
    sale = relationship("Sale", back_populates="items")
    product = relationship("Product", backref="sale_items")

    def __repr__(self):
        return f"<SaleItem(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"
