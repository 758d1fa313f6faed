"""
Authentication endpoints: session cookie login and logout.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from retailpos.api.deps import get_current_user, get_session_token
from retailpos.api.errors import handle_errors
from retailpos.core.config import settings
from retailpos.core.database import get_db
from retailpos.core.redis_client import session_manager
from retailpos.models.users import User
from retailpos.services.staff_registry import StaffRegistry, user_to_dict

logger = logging.getLogger(__name__)

router = APIRouter()
staff_registry = StaffRegistry()


class LoginRequest(BaseModel):
    """Request model for logging in."""
    email: str = Field(..., min_length=3, description="Account email")
    password: str = Field(..., min_length=1, description="Account password")


@router.post("/login")
async def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Log in with email and password.

    Sets an HttpOnly session cookie and also returns the token for API
    clients that prefer a Bearer header.
    """
    with handle_errors("log in"):
        user = await staff_registry.authenticate(db, credentials.email, credentials.password)
        if not user:
            logger.warning(f"Failed login attempt for {credentials.email}")
            raise HTTPException(status_code=401, detail="Invalid credentials")

        token = session_manager.create_session(user.id, {"role": user.role.value})
        response.set_cookie(
            key=settings.session_cookie_name,
            value=token,
            httponly=True,
            samesite="lax",
            secure=settings.session_cookie_secure,
            max_age=settings.session_ttl,
            path="/",
        )

        logger.info(f"User logged in: {user.email}")
        return {"token": token, "user": user_to_dict(user)}


@router.post("/logout")
async def logout(
    response: Response,
    token: str = Depends(get_session_token)
):
    """End the current session."""
    session_manager.delete_session(token)
    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return {"success": True}


@router.get("/me")
async def get_me(user: User = Depends(get_current_user)):
    """Get the logged-in user's profile."""
    return user_to_dict(user)
