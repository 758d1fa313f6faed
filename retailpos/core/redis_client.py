"""
Redis client configuration for caching and session management.
"""
import redis
import json
import logging
import pickle
import secrets
from datetime import datetime
from typing import Optional, Any, Dict

from retailpos.core.config import settings

logger = logging.getLogger(__name__)

# Create Redis client
redis_client = redis.Redis.from_url(
    settings.redis_url,
    db=settings.redis_db,
    decode_responses=False,  # Keep as bytes for pickle compatibility
    socket_connect_timeout=5,
    socket_timeout=5,
    retry_on_timeout=True
)


def check_redis_connection() -> bool:
    """Check if Redis connection is working."""
    try:
        redis_client.ping()
        return True
    except Exception as e:
        logger.error(f"Redis connection check failed: {e}")
        return False


class CacheManager:
    """Manages caching operations with Redis."""

    def __init__(self, default_ttl: int = 3600):
        self.default_ttl = default_ttl
        self.client = redis_client

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set a value in cache with optional TTL."""
        try:
            serialized_value = pickle.dumps(value)
            ttl = ttl or self.default_ttl
            return bool(self.client.setex(key, ttl, serialized_value))
        except Exception as e:
            logger.error(f"Failed to set cache key {key}: {e}")
            return False

    def get(self, key: str) -> Optional[Any]:
        """Get a value from cache."""
        try:
            value = self.client.get(key)
            if value is not None:
                return pickle.loads(value)
            return None
        except Exception as e:
            logger.error(f"Failed to get cache key {key}: {e}")
            return None

    def delete(self, key: str) -> bool:
        """Delete a key from cache."""
        try:
            return bool(self.client.delete(key))
        except Exception as e:
            logger.error(f"Failed to delete cache key {key}: {e}")
            return False


# Global cache manager instance
cache_manager = CacheManager()


class SessionManager:
    """Manages login sessions with Redis."""

    def __init__(self, session_ttl: int = settings.session_ttl):
        self.session_ttl = session_ttl
        self.client = redis_client

    @staticmethod
    def _key(session_id: str) -> str:
        return f"session:{session_id}"

    def create_session(self, user_id: int, session_data: Dict[str, Any]) -> str:
        """Create a new session for a user and return its token."""
        session_id = secrets.token_urlsafe(32)

        payload = dict(session_data)
        payload["user_id"] = user_id
        payload["created_at"] = datetime.utcnow().isoformat()

        self.client.setex(self._key(session_id), self.session_ttl, json.dumps(payload))
        return session_id

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Get session data by session ID."""
        try:
            session_data = self.client.get(self._key(session_id))
            if session_data:
                return json.loads(session_data)
            return None
        except Exception as e:
            logger.error(f"Failed to get session: {e}")
            return None

    def delete_session(self, session_id: str) -> bool:
        """Delete a session."""
        try:
            return bool(self.client.delete(self._key(session_id)))
        except Exception as e:
            logger.error(f"Failed to delete session: {e}")
            return False

    def extend_session(self, session_id: str) -> bool:
        """Extend session TTL."""
        try:
            return bool(self.client.expire(self._key(session_id), self.session_ttl))
        except Exception as e:
            logger.error(f"Failed to extend session: {e}")
            return False


# Global session manager instance
session_manager = SessionManager()
