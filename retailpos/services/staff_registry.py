"""
Staff registry service: user accounts and credential checks.
"""
import logging
from typing import List, Dict, Any, Optional
from sqlalchemy.orm import Session

from retailpos.core.exceptions import BusinessRuleError, NotFoundError
from retailpos.core.security import hash_password, needs_rehash, verify_password
from retailpos.models.sales import Sale
from retailpos.models.users import User, UserRole

logger = logging.getLogger(__name__)

SELF_EDITABLE_FIELDS = ("full_name", "email", "image_url")
ADMIN_EDITABLE_FIELDS = SELF_EDITABLE_FIELDS + ("role", "is_active")


def user_to_dict(user: User, detailed: bool = True) -> Dict[str, Any]:
    data = {
        "id": user.id,
        "full_name": user.full_name,
        "role": user.role.value,
    }
    if detailed:
        data.update({
            "email": user.email,
            "image_url": user.image_url,
            "is_active": user.is_active,
            "created_at": user.created_at.isoformat() if user.created_at else None,
        })
    return data


class StaffRegistry:
    """Service for managing staff accounts."""

    async def authenticate(self, db: Session, email: str, password: str) -> Optional[User]:
        """Return the active user matching the credentials, or None."""
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None

        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)
            db.commit()

        return user

    async def list_users(self, db: Session, detailed: bool = False) -> List[Dict[str, Any]]:
        users = db.query(User).order_by(User.full_name.asc()).all()
        return [user_to_dict(u, detailed) for u in users]

    async def get_user(self, db: Session, user_id: int) -> Dict[str, Any]:
        return user_to_dict(self._get(db, user_id))

    async def create_user(self, db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        email = data["email"].strip().lower()
        self._check_email_free(db, email)

        if not data.get("password"):
            raise BusinessRuleError("Password is required")

        user = User(
            email=email,
            full_name=data["full_name"],
            password_hash=hash_password(data["password"]),
            role=UserRole(data.get("role") or UserRole.STAFF.value),
            image_url=data.get("image_url") or None,
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"User created: {user.email} ({user.role.value})")
        return user_to_dict(user)

    async def update_user(self, db: Session, actor: User, user_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update a user account.

        Admins may edit any account. Other users may only edit their own
        name, email, image and password.
        """
        if not actor.is_admin and actor.id != user_id:
            raise PermissionError("Only admins can update other users")

        user = self._get(db, user_id)
        allowed = ADMIN_EDITABLE_FIELDS if actor.is_admin else SELF_EDITABLE_FIELDS

        if not actor.is_admin and any(changes.get(f) is not None for f in ("role", "is_active")):
            raise PermissionError("Only admins can change roles or account status")

        if changes.get("email"):
            email = changes["email"].strip().lower()
            if email != user.email:
                self._check_email_free(db, email)
            changes["email"] = email

        if actor.id == user_id and changes.get("is_active") is False:
            raise BusinessRuleError("Cannot deactivate your own account")

        for field in allowed:
            value = changes.get(field)
            if value is None:
                continue
            if field == "role":
                value = UserRole(value)
            setattr(user, field, value)

        if changes.get("password"):
            user.password_hash = hash_password(changes["password"])

        db.commit()
        db.refresh(user)

        logger.info(f"User updated: {user.email}")
        return user_to_dict(user)

    async def delete_user(self, db: Session, actor: User, user_id: int) -> None:
        if actor.id == user_id:
            raise BusinessRuleError("Cannot delete your own account")

        user = self._get(db, user_id)

        has_sales = db.query(Sale.id).filter(Sale.user_id == user_id).first()
        if has_sales:
            raise BusinessRuleError(
                "Cannot delete user with associated sales history. Consider deactivating instead."
            )

        db.delete(user)
        db.commit()
        logger.info(f"User deleted: {user.email}")

    def _get(self, db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def _check_email_free(self, db: Session, email: str) -> None:
        if db.query(User.id).filter(User.email == email).first():
            raise BusinessRuleError("A user with this email already exists")
