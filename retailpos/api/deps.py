"""
Request dependencies: session lookup and role checks.
"""
import logging
from typing import Optional

from fastapi import Cookie, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from retailpos.core.config import settings
from retailpos.core.database import get_db
from retailpos.core.redis_client import session_manager
from retailpos.models.users import User

logger = logging.getLogger(__name__)


def get_session_token(
    authorization: Optional[str] = Header(None),
    cookie_token: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
) -> str:
    """Session token from the cookie, or a Bearer header for API clients."""
    if cookie_token:
        return cookie_token
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1]
    raise HTTPException(status_code=401, detail="Unauthorized")


def get_current_user(
    token: str = Depends(get_session_token),
    db: Session = Depends(get_db),
) -> User:
    session = session_manager.get_session(token)
    if not session:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = db.query(User).filter(User.id == session["user_id"]).first()
    if not user or not user.is_active:
        session_manager.delete_session(token)
        raise HTTPException(status_code=401, detail="Unauthorized")

    session_manager.extend_session(token)
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden")
    return user
