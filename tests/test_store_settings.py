"""
Tests for StoreSettingsService.
"""
import pytest

from retailpos.core.exceptions import BusinessRuleError
from retailpos.models import StoreSettings
from retailpos.services.store_settings import CACHE_KEY, StoreSettingsService


@pytest.fixture
def service():
    return StoreSettingsService()


@pytest.mark.asyncio
async def test_defaults_created_on_first_read(db, service):
    result = await service.get_settings(db)

    assert result["store_name"] == "My Store"
    assert result["tax_rate"] == 10.0
    assert result["low_stock_threshold"] == 10
    assert result["points_per_currency_unit"] == 20
    assert db.query(StoreSettings).count() == 1


@pytest.mark.asyncio
async def test_settings_are_cached(db, service, store_settings, fake_redis):
    await service.get_settings(db)
    assert CACHE_KEY in fake_redis.store

    # A direct write is not seen until the cache is invalidated
    store_settings.store_name = "Renamed"
    db.commit()
    assert (await service.get_settings(db))["store_name"] == "Test Store"


@pytest.mark.asyncio
async def test_update_invalidates_cache(db, service, store_settings, fake_redis):
    await service.get_settings(db)

    result = await service.update_settings(db, {
        "store_name": "Corner Market",
        "address": "",
        "tax_rate": 7.5,
        "loyalty_rate": 2.0,
    })

    assert result["store_name"] == "Corner Market"
    assert result["address"] is None
    assert CACHE_KEY not in fake_redis.store
    assert (await service.get_settings(db))["tax_rate"] == 7.5


@pytest.mark.asyncio
async def test_low_stock_threshold(db, service, store_settings):
    assert await service.get_low_stock_threshold(db) == 5
    assert await service.update_low_stock_threshold(db, 8) == 8
    assert await service.get_low_stock_threshold(db) == 8

    with pytest.raises(BusinessRuleError):
        await service.update_low_stock_threshold(db, 0)
