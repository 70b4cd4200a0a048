"""
Reports Router - Camp occupancy reports and CSV export.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from occupancy.models import OccupancySnapshot
from occupancy.reports import REPORT_BUILDERS, OccupancyReporter, OverallOccupancy, csv_filename, render_csv
from occupancy.store import EntityStore, load_snapshot

from ..dependencies import get_entity_store
from ..schemas import (
    CampReportResponse,
    LocationReportResponse,
    MealPreferenceReportResponse,
    RoomReportResponse,
    StatusReportResponse,
)
from ..settings import get_settings
from ..utils import http_error_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])


async def _reporter(store: EntityStore, action: str, include_meal_preferences: bool = False) -> OccupancyReporter:
    try:
        snapshot: OccupancySnapshot = await asyncio.to_thread(
            load_snapshot, store, include_meal_preferences=include_meal_preferences
        )
    except Exception as e:
        raise http_error_for(e, action) from e
    return OccupancyReporter(snapshot)


@router.get("/overview", response_model=OverallOccupancy)
async def get_overview(store: EntityStore = Depends(get_entity_store)) -> OverallOccupancy:
    """Headline occupancy numbers across all camps."""
    reporter = await _reporter(store, "occupancy overview")
    return reporter.overall()


@router.get("/camps", response_model=CampReportResponse)
async def get_camp_report(store: EntityStore = Depends(get_entity_store)) -> CampReportResponse:
    """Per-camp occupancy with grand totals."""
    reporter = await _reporter(store, "camp report")
    camps = reporter.camp_wise()
    return CampReportResponse(camps=camps, totals=reporter.grand_totals())


@router.get("/locations", response_model=LocationReportResponse)
async def get_location_report(store: EntityStore = Depends(get_entity_store)) -> LocationReportResponse:
    """Camps grouped by location with subtotals."""
    reporter = await _reporter(store, "location report")
    return LocationReportResponse(locations=reporter.location_wise(), totals=reporter.grand_totals())


@router.get("/rooms", response_model=RoomReportResponse)
async def get_room_report(store: EntityStore = Depends(get_entity_store)) -> RoomReportResponse:
    """Room-by-room occupancy."""
    reporter = await _reporter(store, "room report")
    return RoomReportResponse(rooms=reporter.room_details())


@router.get("/status", response_model=StatusReportResponse)
async def get_status_report(store: EntityStore = Depends(get_entity_store)) -> StatusReportResponse:
    """Technician and bed counts per technician status."""
    reporter = await _reporter(store, "status report")
    statuses = reporter.status_wise()
    return StatusReportResponse(
        statuses=statuses,
        total_technicians=sum(s.technician_count for s in statuses),
        total_beds_occupied=sum(s.bed_count for s in statuses),
    )


@router.get("/meal-preferences", response_model=MealPreferenceReportResponse)
async def get_meal_preference_report(
    store: EntityStore = Depends(get_entity_store),
) -> MealPreferenceReportResponse:
    """Meal preference counts per camp for catering."""
    reporter = await _reporter(store, "meal preference report", include_meal_preferences=True)
    camps = reporter.meal_preferences()
    return MealPreferenceReportResponse(
        preferences=reporter.meal_preference_names(),
        camps=camps,
        totals=reporter.meal_totals(camps),
    )


@router.get("/export/{report_type}")
async def export_report(report_type: str, store: EntityStore = Depends(get_entity_store)) -> Response:
    """Download a report as CSV (camp, location, room-details, status-wise, meal-preferences)."""
    if report_type not in REPORT_BUILDERS:
        raise HTTPException(status_code=404, detail=f"Unknown report type: {report_type}")

    reporter = await _reporter(
        store, f"{report_type} export", include_meal_preferences=report_type == "meal-preferences"
    )
    content = render_csv(report_type, reporter)

    filename = csv_filename(report_type, datetime.now(get_settings().zone).date())
    logger.info(f"Exported {report_type} report as {filename}")
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
