"""
Pydantic schemas for occupancy report endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel

from occupancy.reports import (
    CampMealPreferences,
    CampOccupancy,
    LocationGroup,
    MealTotals,
    OccupancyTotals,
    RoomOccupancy,
    StatusBreakdown,
)


class CampReportResponse(BaseModel):
    camps: list[CampOccupancy]
    totals: OccupancyTotals


class LocationReportResponse(BaseModel):
    locations: list[LocationGroup]
    totals: OccupancyTotals


class RoomReportResponse(BaseModel):
    rooms: list[RoomOccupancy]


class StatusReportResponse(BaseModel):
    statuses: list[StatusBreakdown]
    total_technicians: int
    total_beds_occupied: int


class MealPreferenceReportResponse(BaseModel):
    preferences: list[str]
    camps: list[CampMealPreferences]
    totals: MealTotals
