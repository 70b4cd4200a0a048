"""
Occupancy - bed and technician occupancy logic for labor camps.

This package contains:
- models: Entity records (Camp, Floor, Room, Bed, Technician, ExternalPersonnel)
- store: Entity store access over the hosted backend
- diagnostics: Bed/technician consistency checker and repairs
- reports: Occupancy reports and CSV export
"""

from occupancy.diagnostics import (
    DiagnosticsReport,
    DiagnosticsSummary,
    FixAllOutcome,
    IssueCategory,
    IssueReason,
    OccupancyChecker,
    OccupancyIssue,
    RepairAction,
    RepairResult,
    apply_repairs,
    classify,
    plan_repairs,
)
from occupancy.models import Bed, BedStatus, OccupancySnapshot, Technician
from occupancy.store import EntityStore, EntityType, PocketBaseEntityStore, load_snapshot

__all__ = [
    "Bed",
    "BedStatus",
    "DiagnosticsReport",
    "DiagnosticsSummary",
    "EntityStore",
    "EntityType",
    "FixAllOutcome",
    "IssueCategory",
    "IssueReason",
    "OccupancyChecker",
    "OccupancyIssue",
    "OccupancySnapshot",
    "PocketBaseEntityStore",
    "RepairAction",
    "RepairResult",
    "Technician",
    "apply_repairs",
    "classify",
    "load_snapshot",
    "plan_repairs",
]
