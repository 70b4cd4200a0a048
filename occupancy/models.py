"""Entity records for camps, rooms, beds and the people who occupy them.

Records are built from backend rows with ``from_record``. The hosted backend
returns unset relation fields as empty strings; those are normalized to
``None`` so that "no reference" has exactly one representation.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field


class BedStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    RESERVED = "reserved"


class TechnicianStatus(str, Enum):
    ACTIVE = "active"
    PENDING_ARRIVAL = "pending_arrival"
    ON_LEAVE = "on_leave"
    PENDING_EXIT = "pending_exit"
    EXITED_COUNTRY = "exited_country"
    TRANSFERRED = "transferred"
    ABSCONDED = "absconded"
    SUSPENDED = "suspended"


def _ref(record: Any, name: str) -> str | None:
    """Read a relation field, treating empty values as no reference."""
    value = getattr(record, name, None)
    if value is None or value == "":
        return None
    return str(value)


def _text(record: Any, name: str, default: str = "") -> str:
    value = getattr(record, name, None)
    if value is None:
        return default
    return str(value)


def _int(record: Any, name: str) -> int:
    value = getattr(record, name, None)
    try:
        return int(value) if value not in (None, "") else 0
    except (TypeError, ValueError):
        return 0


class Record(BaseModel):
    """Base for all entity records. Records are snapshots and never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str


class Bed(Record):
    bed_number: str = ""
    room_id: str | None = None
    status: str = BedStatus.AVAILABLE.value
    technician_id: str | None = None
    reserved_for: str | None = None
    reserved_until: str | None = None

    @property
    def is_occupied(self) -> bool:
        return self.status == BedStatus.OCCUPIED.value

    @classmethod
    def from_record(cls, record: Any) -> Self:
        return cls(
            id=str(record.id),
            bed_number=_text(record, "bed_number"),
            room_id=_ref(record, "room_id"),
            status=_text(record, "status", BedStatus.AVAILABLE.value),
            technician_id=_ref(record, "technician_id"),
            reserved_for=_ref(record, "reserved_for"),
            reserved_until=_ref(record, "reserved_until"),
        )


class Technician(Record):
    employee_id: str = ""
    full_name: str = ""
    # Left blank when the backend has none; reports bucket it as "unknown"
    status: str = ""
    bed_id: str | None = None
    camp_id: str | None = None
    meal_preference_id: str | None = None

    @classmethod
    def from_record(cls, record: Any) -> Self:
        return cls(
            id=str(record.id),
            employee_id=_text(record, "employee_id"),
            full_name=_text(record, "full_name"),
            status=_text(record, "status"),
            bed_id=_ref(record, "bed_id"),
            camp_id=_ref(record, "camp_id"),
            meal_preference_id=_ref(record, "meal_preference_id"),
        )


class ExternalPersonnel(Record):
    full_name: str = ""
    status: str = "active"
    bed_id: str | None = None
    camp_id: str | None = None
    meal_preference_id: str | None = None

    @classmethod
    def from_record(cls, record: Any) -> Self:
        return cls(
            id=str(record.id),
            full_name=_text(record, "full_name"),
            status=_text(record, "status", "active"),
            bed_id=_ref(record, "bed_id"),
            camp_id=_ref(record, "camp_id"),
            meal_preference_id=_ref(record, "meal_preference_id"),
        )


class Room(Record):
    floor_id: str | None = None
    room_number: str = ""
    capacity: int = 0
    occupant_type: str = "mixed"
    gender_restriction: str = "mixed"

    @classmethod
    def from_record(cls, record: Any) -> Self:
        return cls(
            id=str(record.id),
            floor_id=_ref(record, "floor_id"),
            room_number=_text(record, "room_number"),
            capacity=_int(record, "capacity"),
            occupant_type=_text(record, "occupant_type") or "mixed",
            gender_restriction=_text(record, "gender_restriction") or "mixed",
        )


class Floor(Record):
    camp_id: str | None = None
    floor_number: str = ""
    name: str = ""

    @classmethod
    def from_record(cls, record: Any) -> Self:
        return cls(
            id=str(record.id),
            camp_id=_ref(record, "camp_id"),
            floor_number=_text(record, "floor_number"),
            name=_text(record, "name"),
        )


class Camp(Record):
    name: str = ""
    code: str = ""
    location: str = ""
    capacity: int = 0
    status: str = "active"

    @classmethod
    def from_record(cls, record: Any) -> Self:
        return cls(
            id=str(record.id),
            name=_text(record, "name"),
            code=_text(record, "code"),
            location=_text(record, "location"),
            capacity=_int(record, "capacity"),
            status=_text(record, "status", "active"),
        )


class MealPreference(Record):
    name: str = ""

    @classmethod
    def from_record(cls, record: Any) -> Self:
        return cls(id=str(record.id), name=_text(record, "name"))


class OccupancySnapshot(BaseModel):
    """Everything fetched from the store for one diagnostics or report run."""

    model_config = ConfigDict(frozen=True)

    beds: list[Bed]
    technicians: list[Technician]
    rooms: list[Room] = Field(default_factory=list)
    floors: list[Floor] = Field(default_factory=list)
    camps: list[Camp] = Field(default_factory=list)
    external_personnel: list[ExternalPersonnel] = Field(default_factory=list)
    meal_preferences: list[MealPreference] = Field(default_factory=list)
