"""
Root test configuration and fixtures for the camp occupancy project.

Provides:
- A mock PocketBase client, patched in automatically so no test reaches a
  real backend
- FakeEntityStore, an in-memory EntityStore for checker and report tests
- A sample camp/floor/room hierarchy for location and report tests

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import Mock, patch

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from occupancy.errors import StoreError  # noqa: E402
from occupancy.models import Camp, ExternalPersonnel, Floor, Room  # noqa: E402
from occupancy.store import EntityType  # noqa: E402


def create_mock_pocketbase():
    """Create a mock PocketBase instance."""
    mock_pb = Mock()

    mock_collection = Mock()
    mock_collection.auth_with_password = Mock(return_value=True)
    mock_collection.get_full_list = Mock(return_value=[])
    mock_collection.get_one = Mock()
    mock_collection.update = Mock()

    # Make collection callable to return itself for chaining
    mock_pb.collection = Mock(return_value=mock_collection)

    mock_pb.auth_store = Mock()
    mock_pb.auth_store.base_token = "mock-token"

    return mock_pb


@pytest.fixture
def mock_pocketbase():
    """Create a mock PocketBase instance for tests that need it."""
    return create_mock_pocketbase()


@pytest.fixture(autouse=True)
def mock_all_external_services():
    """Automatically mock PocketBase so tests never open a real connection.

    Set SKIP_MOCKING=true for integration runs against a live backend.
    """
    if os.environ.get("SKIP_MOCKING") == "true":
        yield {}
        return

    mock_pb = create_mock_pocketbase()

    with patch("pocketbase.PocketBase") as mock_pb_class:
        mock_pb_class.return_value = mock_pb
        yield {"pocketbase": mock_pb}


class FakeEntityStore:
    """In-memory EntityStore holding raw backend-shaped records.

    Records are SimpleNamespace objects like the SDK returns. Updates are
    applied in place and logged in ``updates``. Register a record id in
    ``fail_on`` to make its update raise.
    """

    def __init__(self, records: dict[EntityType, list[dict[str, Any]]] | None = None):
        self.records: dict[EntityType, list[SimpleNamespace]] = {t: [] for t in EntityType}
        for entity_type, rows in (records or {}).items():
            self.records[entity_type] = [SimpleNamespace(**row) for row in rows]
        self.updates: list[tuple[EntityType, str, dict[str, Any]]] = []
        self.fail_on: dict[str, str] = {}
        self.fail_list: set[EntityType] = set()

    def list(self, entity_type: EntityType) -> list[Any]:
        if entity_type in self.fail_list:
            raise StoreError("connection refused", entity_type.value)
        return [SimpleNamespace(**vars(r)) for r in self.records[entity_type]]

    def update(self, entity_type: EntityType, record_id: str, fields: dict[str, Any]) -> Any:
        if record_id in self.fail_on:
            raise RuntimeError(self.fail_on[record_id])
        for record in self.records[entity_type]:
            if record.id == record_id:
                for key, value in fields.items():
                    setattr(record, key, value)
                self.updates.append((entity_type, record_id, dict(fields)))
                return record
        raise RuntimeError(f"{entity_type.value} {record_id} not found")

    def get(self, entity_type: EntityType, record_id: str) -> SimpleNamespace:
        return next(r for r in self.records[entity_type] if r.id == record_id)


@pytest.fixture
def fake_store_factory():
    """Build a FakeEntityStore from record dicts.

    Extra collections are passed by entity name, e.g. ``room=[...]``.
    """

    def build(
        beds: list[dict[str, Any]] | None = None,
        technicians: list[dict[str, Any]] | None = None,
        **others: list[dict[str, Any]],
    ) -> FakeEntityStore:
        records: dict[EntityType, list[dict[str, Any]]] = {
            EntityType.BED: beds or [],
            EntityType.TECHNICIAN: technicians or [],
        }
        for key, rows in others.items():
            records[EntityType[key.upper()]] = rows
        return FakeEntityStore(records)

    return build


@pytest.fixture
def sample_locations() -> dict[str, list[Any]]:
    """Two camps in two locations, three floors with one room each, two guests."""
    return {
        "camps": [
            Camp(id="c1", name="Sajja Camp", code="SAJ", location="Sharjah", capacity=10, status="active"),
            Camp(id="c2", name="Al Quoz Camp", code="AQZ", location="Dubai", capacity=4, status="active"),
        ],
        "floors": [
            Floor(id="f1", camp_id="c1", floor_number="1", name="Ground"),
            Floor(id="f2", camp_id="c1", floor_number="10", name="Top"),
            Floor(id="f3", camp_id="c2", floor_number="2", name="First"),
        ],
        "rooms": [
            Room(id="r1", floor_id="f1", room_number="101", capacity=2, occupant_type="technician_only"),
            Room(id="r2", floor_id="f2", room_number="1001", capacity=2),
            Room(id="r3", floor_id="f3", room_number="9", capacity=2, occupant_type="external_only"),
        ],
        "external_personnel": [
            ExternalPersonnel(id="x1", full_name="Guest One", status="active", bed_id="b5"),
            ExternalPersonnel(id="x2", full_name="Guest Two", status="inactive", bed_id="b6"),
        ],
    }
