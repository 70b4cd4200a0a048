"""Entity store - list and update access to the hosted backend.

The backend offers no multi-record transactions and no server-side joins.
Every list call fetches the whole collection and every update touches one
record, so callers join in memory and accept that paired writes can drift.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Protocol

from pocketbase import PocketBase

from .errors import StoreError
from .logging_config import TRACE
from .models import (
    Bed,
    Camp,
    ExternalPersonnel,
    Floor,
    MealPreference,
    OccupancySnapshot,
    Room,
    Technician,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


class EntityType(str, Enum):
    CAMP = "Camp"
    FLOOR = "Floor"
    ROOM = "Room"
    BED = "Bed"
    TECHNICIAN = "Technician"
    EXTERNAL_PERSONNEL = "ExternalPersonnel"
    MEAL_PREFERENCE = "MealPreference"

    @property
    def collection(self) -> str:
        """Backend collection holding records of this type."""
        return _COLLECTIONS[self]


_COLLECTIONS: dict[EntityType, str] = {
    EntityType.CAMP: "camps",
    EntityType.FLOOR: "floors",
    EntityType.ROOM: "rooms",
    EntityType.BED: "beds",
    EntityType.TECHNICIAN: "technicians",
    EntityType.EXTERNAL_PERSONNEL: "external_personnel",
    EntityType.MEAL_PREFERENCE: "meal_preferences",
}


class EntityStore(Protocol):
    """Generic per-entity CRUD surface - allows mocking in tests."""

    def list(self, entity_type: EntityType) -> list[Any]: ...
    def update(self, entity_type: EntityType, record_id: str, fields: dict[str, Any]) -> Any: ...


class PocketBaseEntityStore:
    """EntityStore backed by a PocketBase client."""

    def __init__(self, pb_client: PocketBase, batch_size: int = DEFAULT_BATCH_SIZE):
        self.pb = pb_client
        self.batch_size = batch_size

    def list(self, entity_type: EntityType) -> list[Any]:
        """Fetch every record of a type.

        Raises:
            StoreError: If the backend call fails.
        """
        try:
            records: list[Any] = self.pb.collection(entity_type.collection).get_full_list(batch=self.batch_size)
        except Exception as e:
            logger.error(f"Error listing {entity_type.value}: {e}")
            raise StoreError(str(e), entity_type.value) from e

        logger.debug(f"Fetched {len(records)} {entity_type.collection}")
        return records

    def update(self, entity_type: EntityType, record_id: str, fields: dict[str, Any]) -> Any:
        """Apply a partial update to one record.

        ``None`` is sent as an empty value, which is how PocketBase clears a
        relation or text field.

        Raises:
            StoreError: If the backend rejects the update.
        """
        payload = {key: ("" if value is None else value) for key, value in fields.items()}
        logger.log(TRACE, f"Updating {entity_type.collection}/{record_id} with {payload}")

        try:
            updated = self.pb.collection(entity_type.collection).update(record_id, payload)
        except Exception as e:
            logger.error(f"Error updating {entity_type.value} {record_id}: {e}")
            raise StoreError(str(e), entity_type.value, record_id) from e

        logger.debug(f"Updated {entity_type.value} {record_id}: {sorted(payload)}")
        return updated


def load_snapshot(
    store: EntityStore, include_locations: bool = True, include_meal_preferences: bool = False
) -> OccupancySnapshot:
    """Fetch beds and technicians (and optionally the location hierarchy).

    Fetch failures are not handled here; a StoreError reaches the caller,
    which should skip the run.

    Args:
        store: Entity store to read from
        include_locations: Also fetch rooms, floors, camps and external personnel
        include_meal_preferences: Also fetch meal preferences (only the meal report needs them)

    Returns:
        OccupancySnapshot built from the fetched records
    """
    beds = [Bed.from_record(r) for r in store.list(EntityType.BED)]
    technicians = [Technician.from_record(r) for r in store.list(EntityType.TECHNICIAN)]

    meal_preferences = (
        [MealPreference.from_record(r) for r in store.list(EntityType.MEAL_PREFERENCE)]
        if include_meal_preferences
        else []
    )

    if not include_locations:
        return OccupancySnapshot(beds=beds, technicians=technicians, meal_preferences=meal_preferences)

    return OccupancySnapshot(
        beds=beds,
        technicians=technicians,
        rooms=[Room.from_record(r) for r in store.list(EntityType.ROOM)],
        floors=[Floor.from_record(r) for r in store.list(EntityType.FLOOR)],
        camps=[Camp.from_record(r) for r in store.list(EntityType.CAMP)],
        external_personnel=[ExternalPersonnel.from_record(r) for r in store.list(EntityType.EXTERNAL_PERSONNEL)],
        meal_preferences=meal_preferences,
    )
