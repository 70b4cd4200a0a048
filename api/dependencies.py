"""
Shared dependencies for the occupancy API.

This module provides:
- PocketBase client management (global instance authenticated on startup)
- The entity store dependency used by the routers
"""

from __future__ import annotations

import asyncio
import logging

from occupancy.store import EntityStore, PocketBaseEntityStore
from pocketbase import PocketBase

from .settings import get_settings

logger = logging.getLogger(__name__)

# ========================================
# PocketBase Client
# ========================================

pb = PocketBase(get_settings().pocketbase_url)


async def authenticate_pb() -> None:
    """Authenticate with PocketBase as admin."""
    settings = get_settings()
    try:
        await asyncio.to_thread(
            pb.collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


# ========================================
# Entity Store
# ========================================


async def get_entity_store() -> EntityStore:
    """FastAPI dependency returning the entity store over the shared client."""
    return PocketBaseEntityStore(pb, batch_size=get_settings().page_batch_size)


__all__ = [
    "pb",
    "authenticate_pb",
    "get_entity_store",
]
