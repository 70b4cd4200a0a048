"""
Pydantic schemas for the occupancy API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .diagnostics import FixAllResponse, FixRequest
from .reports import (
    CampReportResponse,
    LocationReportResponse,
    MealPreferenceReportResponse,
    RoomReportResponse,
    StatusReportResponse,
)

__all__ = [
    # Diagnostics
    "FixAllResponse",
    "FixRequest",
    # Reports
    "CampReportResponse",
    "LocationReportResponse",
    "MealPreferenceReportResponse",
    "RoomReportResponse",
    "StatusReportResponse",
]
