"""
Tests for StaffRegistry service.
"""
import pytest

from retailpos.core.exceptions import BusinessRuleError
from retailpos.core.security import verify_password
from retailpos.models import User, UserRole
from retailpos.services.sales_ledger import SalesLedger
from retailpos.services.staff_registry import StaffRegistry

PASSWORD = "secret123"


class TestStaffRegistry:
    """Test cases for StaffRegistry service."""

    @pytest.fixture
    def registry(self):
        return StaffRegistry()

    @pytest.mark.asyncio
    async def test_authenticate(self, db, registry, admin):
        assert (await registry.authenticate(db, "ADMIN@example.com ", PASSWORD)).id == admin.id
        assert await registry.authenticate(db, "admin@example.com", "wrong") is None
        assert await registry.authenticate(db, "nobody@example.com", PASSWORD) is None

    @pytest.mark.asyncio
    async def test_authenticate_inactive_user(self, db, registry, staff):
        staff.is_active = False
        db.commit()

        assert await registry.authenticate(db, staff.email, PASSWORD) is None

    @pytest.mark.asyncio
    async def test_create_user(self, db, registry, admin):
        result = await registry.create_user(db, {
            "email": "New@Example.com",
            "full_name": "New Cashier",
            "password": "hunter22",
        })

        assert result["email"] == "new@example.com"
        assert result["role"] == "STAFF"
        user = db.query(User).filter(User.email == "new@example.com").one()
        assert verify_password("hunter22", user.password_hash)

        with pytest.raises(BusinessRuleError, match="already exists"):
            await registry.create_user(db, {"email": "new@example.com", "full_name": "Dup", "password": "x"})

    @pytest.mark.asyncio
    async def test_staff_can_only_edit_own_profile(self, db, registry, admin, staff):
        result = await registry.update_user(db, staff, staff.id, {"full_name": "Samantha Staff"})
        assert result["full_name"] == "Samantha Staff"

        with pytest.raises(PermissionError):
            await registry.update_user(db, staff, admin.id, {"full_name": "Hacked"})
        with pytest.raises(PermissionError):
            await registry.update_user(db, staff, staff.id, {"role": UserRole.ADMIN})

    @pytest.mark.asyncio
    async def test_admin_updates_role_and_password(self, db, registry, admin, staff):
        result = await registry.update_user(db, admin, staff.id, {"role": "ADMIN", "password": "newpass1"})

        assert result["role"] == "ADMIN"
        db.refresh(staff)
        assert verify_password("newpass1", staff.password_hash)

    @pytest.mark.asyncio
    async def test_cannot_deactivate_self(self, db, registry, admin):
        with pytest.raises(BusinessRuleError, match="deactivate your own account"):
            await registry.update_user(db, admin, admin.id, {"is_active": False})

    @pytest.mark.asyncio
    async def test_delete_user_with_sales_rejected(self, db, registry, admin, staff, store_settings, products):
        await SalesLedger().create_sale(
            db, staff.id, {"payment_method": "CARD", "items": [{"product_id": products[0].id, "quantity": 1}]}
        )

        with pytest.raises(BusinessRuleError, match="associated sales history"):
            await registry.delete_user(db, admin, staff.id)
        assert db.query(User).filter(User.id == staff.id).first() is not None

    @pytest.mark.asyncio
    async def test_delete_self_rejected(self, db, registry, admin):
        with pytest.raises(BusinessRuleError, match="delete your own account"):
            await registry.delete_user(db, admin, admin.id)

    @pytest.mark.asyncio
    async def test_delete_user(self, db, registry, admin, staff):
        staff_id = staff.id

        await registry.delete_user(db, admin, staff_id)

        assert db.query(User).filter(User.id == staff_id).first() is None

    @pytest.mark.asyncio
    async def test_list_users_detail_levels(self, db, registry, admin, staff):
        basic = await registry.list_users(db)
        detailed = await registry.list_users(db, detailed=True)

        assert [u["full_name"] for u in basic] == ["Ada Admin", "Sam Staff"]
        assert "email" not in basic[0]
        assert detailed[0]["email"] == "admin@example.com"
