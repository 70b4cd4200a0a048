"""Tests for bed location lookups."""

from __future__ import annotations

from occupancy.locations import BedLocation, LocationIndex
from occupancy.models import Bed, Floor, Room


def _index(sample_locations) -> LocationIndex:
    return LocationIndex(sample_locations["rooms"], sample_locations["floors"], sample_locations["camps"])


class TestLocate:
    def test_full_chain(self, sample_locations):
        location = _index(sample_locations).locate(Bed(id="b1", room_id="r2"))

        assert location == BedLocation(camp="Sajja Camp", floor="Floor 10", room="Room 1001")
        assert location.label == "Sajja Camp → Floor 10 → Room 1001"

    def test_bed_without_room(self, sample_locations):
        location = _index(sample_locations).locate(Bed(id="b1"))

        assert location.label == "Unknown → Unknown → Unknown"

    def test_room_with_missing_floor(self, sample_locations):
        rooms = [*sample_locations["rooms"], Room(id="r9", floor_id="gone", room_number="7")]
        index = LocationIndex(rooms, sample_locations["floors"], sample_locations["camps"])

        location = index.locate(Bed(id="b1", room_id="r9"))

        assert location == BedLocation(room="Room 7")

    def test_floor_with_missing_camp(self, sample_locations):
        floors = [*sample_locations["floors"], Floor(id="f9", camp_id="gone", floor_number="3")]
        rooms = [Room(id="r9", floor_id="f9", room_number="7")]
        index = LocationIndex(rooms, floors, sample_locations["camps"])

        location = index.locate(Bed(id="b1", room_id="r9"))

        assert location.camp == "Unknown"
        assert location.floor == "Floor 3"


class TestCampForBed:
    def test_resolves_camp(self, sample_locations):
        camp = _index(sample_locations).camp_for_bed(Bed(id="b1", room_id="r3"))

        assert camp is not None
        assert camp.id == "c2"

    def test_unresolved_chain(self, sample_locations):
        index = _index(sample_locations)

        assert index.camp_for_bed(Bed(id="b1")) is None
        assert index.camp_for_bed(Bed(id="b1", room_id="missing")) is None
