"""
Staff account endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from retailpos.api.deps import get_current_user, require_admin
from retailpos.api.errors import handle_errors
from retailpos.core.database import get_db
from retailpos.models.users import User, UserRole
from retailpos.services.staff_registry import StaffRegistry

router = APIRouter()
staff_registry = StaffRegistry()


class UserCreateRequest(BaseModel):
    """Request model for creating a staff account."""
    email: str = Field(..., min_length=3, description="Login email")
    full_name: str = Field(..., min_length=1, description="Display name")
    password: str = Field(..., min_length=6, description="Initial password")
    role: UserRole = Field(UserRole.STAFF, description="ADMIN or STAFF")
    image_url: Optional[str] = Field(None, description="Avatar URL")


class UserUpdateRequest(BaseModel):
    """Request model for updating a staff account. Omitted fields are unchanged."""
    email: Optional[str] = Field(None, min_length=3)
    full_name: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    image_url: Optional[str] = None


@router.get("")
async def list_users(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all staff. Admins also see emails and account status."""
    with handle_errors("fetch users"):
        return await staff_registry.list_users(db, detailed=user.is_admin)


@router.post("", status_code=201)
async def create_user(
    new_user: UserCreateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    with handle_errors("create user"):
        return await staff_registry.create_user(db, new_user.model_dump())


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with handle_errors("fetch user"):
        return await staff_registry.get_user(db, user_id)


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    update: UserUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update a staff account.

    Staff may update their own profile and password; role and status
    changes are reserved for admins.
    """
    with handle_errors("update user"):
        return await staff_registry.update_user(db, user, user_id, update.model_dump(exclude_unset=True))


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    with handle_errors("delete user"):
        await staff_registry.delete_user(db, admin, user_id)
        return {"message": "User deleted successfully"}
