"""Map failures raised while serving a request to HTTP errors."""

from __future__ import annotations

import logging

from fastapi import HTTPException

from occupancy.errors import StoreError

from ..settings import get_settings

logger = logging.getLogger(__name__)


def http_error_for(e: Exception, action: str) -> HTTPException:
    """Translate an exception into the HTTPException the router should raise.

    - StoreError: the backend failed; 502 with the backend message
    - anything else: 500, with detail only in development
    """
    if isinstance(e, StoreError):
        logger.error(f"Store failure during {action}: {e}")
        return HTTPException(status_code=502, detail=f"Failed to load {e.entity_type} records: {e}")

    logger.error(f"Error during {action}: {e}", exc_info=True)
    if get_settings().is_development:
        return HTTPException(status_code=500, detail=f"{action.capitalize()} error: {str(e)}")
    return HTTPException(status_code=500, detail=f"Failed to complete {action}")
