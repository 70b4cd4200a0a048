"""Occupancy reports - camp, location, room, status and meal breakdowns with CSV export.

Reports read the same snapshot as the diagnostics but count occupancy from
the people side: a technician holds a bed when ``bed_id`` is set and their
status is one of active, on_leave or pending_exit; external personnel hold a
bed only while active. Room details instead count beds marked occupied.

The meal report counts people by the camp they are assigned to rather than
by bed: active and pending_exit technicians plus active external personnel.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Callable
from datetime import date

from pydantic import BaseModel, Field, computed_field

from .errors import ReportError
from .locations import LocationIndex
from .models import OccupancySnapshot, TechnicianStatus

OCCUPYING_TECHNICIAN_STATUSES = {
    TechnicianStatus.ACTIVE.value,
    TechnicianStatus.ON_LEAVE.value,
    TechnicianStatus.PENDING_EXIT.value,
}

MEAL_TECHNICIAN_STATUSES = {
    TechnicianStatus.ACTIVE.value,
    TechnicianStatus.PENDING_EXIT.value,
}

UNKNOWN_LOCATION = "Unknown Location"
NOT_ASSIGNED = "Not Assigned"
MISSING = "-"


def occupancy_rate(occupied: int, total: int) -> float:
    """Percentage of beds occupied, rounded to one decimal; 0.0 when there are no beds."""
    return round(occupied / total * 100, 1) if total > 0 else 0.0


def _natural_key(value: str) -> list[int | str]:
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", value) if part]


class OverallOccupancy(BaseModel):
    total_beds: int = 0
    occupied_beds: int = 0
    available_beds: int = 0
    occupancy_rate: float = 0.0
    pending_exit_beds: int = 0
    active_technicians: int = 0
    active_external: int = 0
    active_camps: int = 0


class OccupancyTotals(BaseModel):
    defined_capacity: int = 0
    total_beds: int = 0
    occupied_beds: int = 0
    technician_beds: int = 0
    external_beds: int = 0
    pending_exit_beds: int = 0
    free_beds: int = 0


class CampOccupancy(BaseModel):
    camp_id: str
    camp_name: str
    camp_code: str
    location: str
    defined_capacity: int = 0
    total_beds: int = 0
    occupied_beds: int = 0
    technician_beds: int = 0
    external_beds: int = 0
    pending_exit_beds: int = 0
    free_beds: int = 0
    occupancy_rate: float = 0.0
    status: str = ""


class LocationGroup(BaseModel):
    location: str
    camps: list[CampOccupancy] = Field(default_factory=list)
    totals: OccupancyTotals = Field(default_factory=OccupancyTotals)


class RoomOccupancy(BaseModel):
    camp_name: str
    camp_code: str
    camp_capacity: int = 0
    floor_number: str
    floor_name: str
    room_number: str
    room_capacity: int = 0
    occupant_type: str
    gender_restriction: str
    total_beds: int = 0
    occupied_beds: int = 0
    balance_beds: int = 0
    occupancy_rate: float = 0.0


class StatusBreakdown(BaseModel):
    status: str
    technician_count: int = 0
    bed_count: int = 0


class MealCount(BaseModel):
    technicians: int = 0
    external: int = 0

    @computed_field
    @property
    def total(self) -> int:
        return self.technicians + self.external


class CampMealPreferences(BaseModel):
    camp_id: str
    camp_name: str
    camp_code: str
    location: str
    technicians: int = 0
    external: int = 0
    meal_counts: dict[str, MealCount] = Field(default_factory=dict)

    @computed_field
    @property
    def total_personnel(self) -> int:
        return self.technicians + self.external


class MealTotals(BaseModel):
    technicians: int = 0
    external: int = 0
    meal_counts: dict[str, MealCount] = Field(default_factory=dict)

    @computed_field
    @property
    def total_personnel(self) -> int:
        return self.technicians + self.external


def sum_totals(camps: list[CampOccupancy]) -> OccupancyTotals:
    totals = OccupancyTotals()
    for camp in camps:
        totals.defined_capacity += camp.defined_capacity
        totals.total_beds += camp.total_beds
        totals.occupied_beds += camp.occupied_beds
        totals.technician_beds += camp.technician_beds
        totals.external_beds += camp.external_beds
        totals.pending_exit_beds += camp.pending_exit_beds
        totals.free_beds += camp.free_beds
    return totals


class OccupancyReporter:
    """Computes occupancy reports from one snapshot."""

    def __init__(self, snapshot: OccupancySnapshot):
        self.snapshot = snapshot
        self.locations = LocationIndex(snapshot.rooms, snapshot.floors, snapshot.camps)

        self._camp_by_bed: dict[str, str] = {}
        for bed in snapshot.beds:
            camp = self.locations.camp_for_bed(bed)
            if camp is not None:
                self._camp_by_bed[bed.id] = camp.id

    def _camp_of(self, bed_id: str | None) -> str | None:
        return self._camp_by_bed.get(bed_id) if bed_id else None

    def overall(self) -> OverallOccupancy:
        snap = self.snapshot
        technician_beds = sum(
            1 for t in snap.technicians if t.bed_id and t.status in OCCUPYING_TECHNICIAN_STATUSES
        )
        external_beds = sum(1 for e in snap.external_personnel if e.bed_id and e.status == "active")
        occupied = technician_beds + external_beds
        total = len(snap.beds)

        return OverallOccupancy(
            total_beds=total,
            occupied_beds=occupied,
            available_beds=total - occupied,
            occupancy_rate=occupancy_rate(occupied, total),
            pending_exit_beds=sum(
                1 for t in snap.technicians if t.bed_id and t.status == TechnicianStatus.PENDING_EXIT.value
            ),
            active_technicians=sum(1 for t in snap.technicians if t.status == TechnicianStatus.ACTIVE.value),
            active_external=sum(1 for e in snap.external_personnel if e.status == "active"),
            active_camps=sum(1 for c in snap.camps if c.status == "active"),
        )

    def camp_wise(self) -> list[CampOccupancy]:
        """Per-camp occupancy, sorted by camp name."""
        snap = self.snapshot
        rows = []

        for camp in snap.camps:
            total_beds = sum(1 for camp_id in self._camp_by_bed.values() if camp_id == camp.id)
            technician_beds = 0
            pending_exit_beds = 0
            for tech in snap.technicians:
                if self._camp_of(tech.bed_id) != camp.id:
                    continue
                if tech.status in OCCUPYING_TECHNICIAN_STATUSES:
                    technician_beds += 1
                if tech.status == TechnicianStatus.PENDING_EXIT.value:
                    pending_exit_beds += 1
            external_beds = sum(
                1 for e in snap.external_personnel if self._camp_of(e.bed_id) == camp.id and e.status == "active"
            )
            occupied = technician_beds + external_beds

            rows.append(
                CampOccupancy(
                    camp_id=camp.id,
                    camp_name=camp.name,
                    camp_code=camp.code,
                    location=camp.location,
                    defined_capacity=camp.capacity,
                    total_beds=total_beds,
                    occupied_beds=occupied,
                    technician_beds=technician_beds,
                    external_beds=external_beds,
                    pending_exit_beds=pending_exit_beds,
                    free_beds=total_beds - occupied,
                    occupancy_rate=occupancy_rate(occupied, total_beds),
                    status=camp.status,
                )
            )

        return sorted(rows, key=lambda r: r.camp_name.casefold())

    def grand_totals(self) -> OccupancyTotals:
        return sum_totals(self.camp_wise())

    def location_wise(self) -> list[LocationGroup]:
        """Camps grouped by location, in order of first appearance, with subtotals."""
        groups: dict[str, list[CampOccupancy]] = {}
        for row in self.camp_wise():
            groups.setdefault(row.location or UNKNOWN_LOCATION, []).append(row)

        return [
            LocationGroup(location=location, camps=camps, totals=sum_totals(camps))
            for location, camps in groups.items()
        ]

    def room_details(self) -> list[RoomOccupancy]:
        """Room-by-room occupancy, sorted by camp name, floor number, room number."""
        snap = self.snapshot
        rows = []

        for room in snap.rooms:
            floor = self.locations.floors.get(room.floor_id) if room.floor_id else None
            camp = self.locations.camps.get(floor.camp_id) if floor and floor.camp_id else None
            room_beds = [b for b in snap.beds if b.room_id == room.id]
            occupied = sum(1 for b in room_beds if b.is_occupied)

            rows.append(
                RoomOccupancy(
                    camp_name=camp.name if camp else MISSING,
                    camp_code=camp.code if camp else MISSING,
                    camp_capacity=camp.capacity if camp else 0,
                    floor_number=floor.floor_number if floor and floor.floor_number else MISSING,
                    floor_name=floor.name if floor and floor.name else MISSING,
                    room_number=room.room_number,
                    room_capacity=room.capacity,
                    occupant_type=room.occupant_type,
                    gender_restriction=room.gender_restriction,
                    total_beds=len(room_beds),
                    occupied_beds=occupied,
                    balance_beds=len(room_beds) - occupied,
                    occupancy_rate=occupancy_rate(occupied, len(room_beds)),
                )
            )

        return sorted(
            rows,
            key=lambda r: (r.camp_name.casefold(), _natural_key(r.floor_number), _natural_key(r.room_number)),
        )

    def status_wise(self) -> list[StatusBreakdown]:
        """Technician and bed counts per status, most populated status first."""
        breakdown = {status.value: StatusBreakdown(status=status.value) for status in TechnicianStatus}

        for tech in self.snapshot.technicians:
            status = tech.status or "unknown"
            entry = breakdown.setdefault(status, StatusBreakdown(status=status))
            entry.technician_count += 1
            if tech.bed_id:
                entry.bed_count += 1

        return sorted(breakdown.values(), key=lambda s: s.technician_count, reverse=True)

    def meal_preference_names(self) -> list[str]:
        """Preference names in backend order, then the catch-all for people without one."""
        return list(dict.fromkeys([*(m.name for m in self.snapshot.meal_preferences), NOT_ASSIGNED]))

    def meal_preferences(self) -> list[CampMealPreferences]:
        """Meal preference counts per camp, skipping camps with nobody assigned."""
        snap = self.snapshot
        names = {m.id: m.name for m in snap.meal_preferences}
        rows = []

        for camp in snap.camps:
            row = CampMealPreferences(
                camp_id=camp.id, camp_name=camp.name, camp_code=camp.code, location=camp.location
            )
            for tech in snap.technicians:
                if tech.camp_id == camp.id and tech.status in MEAL_TECHNICIAN_STATUSES:
                    name = names.get(tech.meal_preference_id or "", NOT_ASSIGNED)
                    row.meal_counts.setdefault(name, MealCount()).technicians += 1
                    row.technicians += 1
            for guest in snap.external_personnel:
                if guest.camp_id == camp.id and guest.status == "active":
                    name = names.get(guest.meal_preference_id or "", NOT_ASSIGNED)
                    row.meal_counts.setdefault(name, MealCount()).external += 1
                    row.external += 1
            if row.total_personnel > 0:
                rows.append(row)

        return sorted(rows, key=lambda r: r.camp_name.casefold())

    def meal_totals(self, camps: list[CampMealPreferences] | None = None) -> MealTotals:
        totals = MealTotals()
        for camp in camps if camps is not None else self.meal_preferences():
            totals.technicians += camp.technicians
            totals.external += camp.external
            for name, count in camp.meal_counts.items():
                entry = totals.meal_counts.setdefault(name, MealCount())
                entry.technicians += count.technicians
                entry.external += count.external
        return totals


# ========================================
# CSV export
# ========================================

CAMP_HEADERS = [
    "Camp Name",
    "Camp Code",
    "Location",
    "Defined Capacity",
    "Physical Beds",
    "Occupied",
    "Technician Beds",
    "External Personnel Beds",
    "Pending Exit Beds",
    "Free",
    "Occupancy %",
    "Status",
]

LOCATION_HEADERS = [
    "Location",
    "Camp Name",
    "Camp Code",
    "Defined Capacity",
    "Physical Beds",
    "Occupied",
    "Technician Beds",
    "External Personnel Beds",
    "Pending Exit Beds",
    "Free",
    "Status",
]

ROOM_HEADERS = [
    "Camp Name",
    "Camp Code",
    "Camp Capacity",
    "Floor Number",
    "Floor Name",
    "Room Number",
    "Room Capacity",
    "Occupant Type",
    "Gender Restriction",
    "Total Beds",
    "Occupied Beds",
    "Balance Beds",
    "Occupancy %",
]

STATUS_HEADERS = ["Technician Status", "Technician Count", "Beds Occupied"]

MEAL_HEADERS = ["Camp Name", "Camp Code", "Location", "Total Personnel", "Technicians", "External"]

Row = list[object]


def _rate_cell(rate: float, total_beds: int) -> str:
    # Rows without beds export a bare "0%"
    return f"{rate:.1f}%" if total_beds > 0 else "0%"


def _camp_rows(reporter: OccupancyReporter) -> tuple[list[str], list[Row]]:
    rows: list[Row] = [
        [
            c.camp_name,
            c.camp_code,
            c.location,
            c.defined_capacity,
            c.total_beds,
            c.occupied_beds,
            c.technician_beds,
            c.external_beds,
            c.pending_exit_beds,
            c.free_beds,
            _rate_cell(c.occupancy_rate, c.total_beds),
            c.status,
        ]
        for c in reporter.camp_wise()
    ]
    return CAMP_HEADERS, rows


def _location_rows(reporter: OccupancyReporter) -> tuple[list[str], list[Row]]:
    rows: list[Row] = []
    for group in reporter.location_wise():
        for index, c in enumerate(group.camps):
            rows.append(
                [
                    group.location if index == 0 else "",
                    c.camp_name,
                    c.camp_code,
                    c.defined_capacity,
                    c.total_beds,
                    c.occupied_beds,
                    c.technician_beds,
                    c.external_beds,
                    c.pending_exit_beds,
                    c.free_beds,
                    c.status,
                ]
            )
        t = group.totals
        rows.append(
            [
                f"{group.location} - TOTAL",
                "",
                "",
                t.defined_capacity,
                t.total_beds,
                t.occupied_beds,
                t.technician_beds,
                t.external_beds,
                t.pending_exit_beds,
                t.free_beds,
                "",
            ]
        )
        rows.append([""] * len(LOCATION_HEADERS))
    return LOCATION_HEADERS, rows


def _room_rows(reporter: OccupancyReporter) -> tuple[list[str], list[Row]]:
    rows: list[Row] = [
        [
            r.camp_name,
            r.camp_code,
            r.camp_capacity,
            r.floor_number,
            r.floor_name,
            r.room_number,
            r.room_capacity,
            r.occupant_type.replace("_", " "),
            r.gender_restriction,
            r.total_beds,
            r.occupied_beds,
            r.balance_beds,
            _rate_cell(r.occupancy_rate, r.total_beds),
        ]
        for r in reporter.room_details()
    ]
    return ROOM_HEADERS, rows


def _status_rows(reporter: OccupancyReporter) -> tuple[list[str], list[Row]]:
    breakdown = reporter.status_wise()
    rows: list[Row] = [
        [s.status.replace("_", " ").upper(), s.technician_count, s.bed_count] for s in breakdown
    ]
    rows.append(["", "", ""])
    rows.append(
        ["TOTAL", sum(s.technician_count for s in breakdown), sum(s.bed_count for s in breakdown)]
    )
    return STATUS_HEADERS, rows


def _meal_rows(reporter: OccupancyReporter) -> tuple[list[str], list[Row]]:
    names = reporter.meal_preference_names()
    camps = reporter.meal_preferences()
    totals = reporter.meal_totals(camps)

    def per_name(counts: dict[str, MealCount]) -> Row:
        return [counts[name].total if name in counts else 0 for name in names]

    headers = [*MEAL_HEADERS, *names]
    rows: list[Row] = [
        [c.camp_name, c.camp_code, c.location, c.total_personnel, c.technicians, c.external, *per_name(c.meal_counts)]
        for c in camps
    ]
    rows.append([""] * len(headers))
    rows.append(
        [
            "GRAND TOTAL",
            "",
            "",
            totals.total_personnel,
            totals.technicians,
            totals.external,
            *per_name(totals.meal_counts),
        ]
    )
    return headers, rows


REPORT_BUILDERS: dict[str, Callable[[OccupancyReporter], tuple[list[str], list[Row]]]] = {
    "camp": _camp_rows,
    "location": _location_rows,
    "room-details": _room_rows,
    "status-wise": _status_rows,
    "meal-preferences": _meal_rows,
}


def render_csv(report_type: str, reporter: OccupancyReporter) -> str:
    """Render a report as CSV with every cell quoted.

    Raises:
        ReportError: If report_type is not one of REPORT_BUILDERS
    """
    builder = REPORT_BUILDERS.get(report_type)
    if builder is None:
        raise ReportError(f"Unknown report type: {report_type}")

    headers, rows = builder(reporter)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def csv_filename(report_type: str, today: date | None = None) -> str:
    day = today or date.today()
    return f"{report_type}_report_{day.isoformat()}.csv"
