"""
Store settings service: the singleton settings row with a Redis read cache.
"""
import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from retailpos.core.config import settings as app_settings
from retailpos.core.exceptions import BusinessRuleError
from retailpos.core.redis_client import cache_manager
from retailpos.models.settings import StoreSettings

logger = logging.getLogger(__name__)

CACHE_KEY = "store_settings"

EDITABLE_FIELDS = ("store_name", "address", "phone", "email", "currency", "tax_rate", "loyalty_rate")
OPTIONAL_FIELDS = ("address", "phone", "email")


def settings_to_dict(row: StoreSettings) -> Dict[str, Any]:
    return {
        "id": row.id,
        "store_name": row.store_name,
        "address": row.address,
        "phone": row.phone,
        "email": row.email,
        "currency": row.currency,
        "tax_rate": row.tax_rate,
        "loyalty_rate": row.loyalty_rate,
        "low_stock_threshold": row.low_stock_threshold,
        "points_per_currency_unit": app_settings.points_per_currency_unit,
    }


class StoreSettingsService:
    """Service for reading and updating store-wide settings."""

    def __init__(self, cache_ttl: int = app_settings.settings_cache_ttl):
        self.cache_ttl = cache_ttl

    def _get_or_create(self, db: Session) -> StoreSettings:
        row = db.query(StoreSettings).order_by(StoreSettings.id).first()
        if row is None:
            logger.info("No store settings found, creating defaults")
            row = StoreSettings(
                store_name=app_settings.default_store_name,
                currency=app_settings.default_currency,
                tax_rate=app_settings.default_tax_rate,
                loyalty_rate=app_settings.default_loyalty_rate,
                low_stock_threshold=app_settings.default_low_stock_threshold,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
        return row

    async def get_settings(self, db: Session) -> Dict[str, Any]:
        """Get store settings, creating the defaults on first use."""
        cached = cache_manager.get(CACHE_KEY)
        if cached is not None:
            return cached

        data = settings_to_dict(self._get_or_create(db))
        cache_manager.set(CACHE_KEY, data, ttl=self.cache_ttl)
        return data

    async def update_settings(self, db: Session, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update the editable store fields.

        Empty strings for optional contact fields are stored as null.
        """
        row = self._get_or_create(db)
        for field in EDITABLE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if field in OPTIONAL_FIELDS:
                value = value or None
            elif value is None:
                continue
            setattr(row, field, value)

        db.commit()
        db.refresh(row)
        cache_manager.delete(CACHE_KEY)

        logger.info(f"Store settings updated: {row.store_name}")
        return settings_to_dict(row)

    async def get_low_stock_threshold(self, db: Session) -> int:
        data = await self.get_settings(db)
        return data["low_stock_threshold"]

    async def update_low_stock_threshold(self, db: Session, threshold: int) -> int:
        if threshold < 1:
            raise BusinessRuleError("Low stock threshold must be at least 1")

        row = self._get_or_create(db)
        row.low_stock_threshold = threshold
        db.commit()
        cache_manager.delete(CACHE_KEY)

        logger.info(f"Low stock threshold set to {threshold}")
        return threshold
