"""Resolve where a bed physically is: camp, floor and room."""

from __future__ import annotations

from dataclasses import dataclass

from .models import Bed, Camp, Floor, Room

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class BedLocation:
    camp: str = UNKNOWN
    floor: str = UNKNOWN
    room: str = UNKNOWN

    @property
    def label(self) -> str:
        return f"{self.camp} → {self.floor} → {self.room}"


class LocationIndex:
    """Id lookups over the room → floor → camp hierarchy."""

    def __init__(self, rooms: list[Room], floors: list[Floor], camps: list[Camp]):
        self.rooms = {r.id: r for r in rooms}
        self.floors = {f.id: f for f in floors}
        self.camps = {c.id: c for c in camps}

    def locate(self, bed: Bed) -> BedLocation:
        """Return the bed's location; any missing link in the chain reads as Unknown."""
        room = self.rooms.get(bed.room_id) if bed.room_id else None
        floor = self.floors.get(room.floor_id) if room and room.floor_id else None
        camp = self.camps.get(floor.camp_id) if floor and floor.camp_id else None

        return BedLocation(
            camp=camp.name if camp and camp.name else UNKNOWN,
            floor=f"Floor {floor.floor_number}" if floor else UNKNOWN,
            room=f"Room {room.room_number}" if room else UNKNOWN,
        )

    def camp_for_bed(self, bed: Bed) -> Camp | None:
        room = self.rooms.get(bed.room_id) if bed.room_id else None
        floor = self.floors.get(room.floor_id) if room and room.floor_id else None
        return self.camps.get(floor.camp_id) if floor and floor.camp_id else None
