"""
Translation of service errors into HTTP responses at the handler boundary.
"""
import logging
from contextlib import contextmanager

from fastapi import HTTPException

from retailpos.core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


@contextmanager
def handle_errors(action: str):
    """
    Map service exceptions to HTTP errors.

    NotFoundError becomes 404, PermissionError 403, ValueError (including
    BusinessRuleError) 400. Anything else is logged and reported as a
    generic 500 naming the failed action.
    """
    try:
        yield
    except HTTPException:
        raise
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e) or "Forbidden")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to {action}")
