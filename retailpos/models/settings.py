"""
Store-wide settings, kept as a single row.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func

from retailpos.core.database import Base


class StoreSettings(Base):
    """Model for store settings."""
    __tablename__ = "store_settings"

    id = Column(Integer, primary_key=True, index=True)
    store_name = Column(String(200), nullable=False)
    address = Column(String(500), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    currency = Column(String(10), nullable=False, default="USD")

    tax_rate = Column(Float, nullable=False, default=10.0)  # Percent
    loyalty_rate = Column(Float, nullable=False, default=1.0)  # Points earned per currency unit
    low_stock_threshold = Column(Integer, nullable=False, default=10)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<StoreSettings(id={self.id}, store='{self.store_name}', tax_rate={self.tax_rate})>"
