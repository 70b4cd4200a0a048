"""
Bed occupancy diagnostics - detect and repair bed/technician drift.

A bed and its occupant reference each other (``Bed.technician_id`` and
``Technician.bed_id``) and the two sides are written independently, so they
can disagree. The occupancy invariant is:

    bed.status == "occupied"  <=>  exactly one technician T has
    T.bed_id == bed.id and bed.technician_id == T.id

Violations fall into three categories:

- orphaned bed: occupied, but no technician reference at all
- mismatched bed: occupied, references a technician that is missing or
  points somewhere else
- mismatched technician: references a bed that is missing, points to
  someone else, or is not marked occupied

Classification is a pure function of a snapshot. Repairs are planned from
the classification and applied one record at a time; every repair lands on
one of the two consistent states (free and unlinked, or occupied and
mutually linked), so re-running after a repair finds nothing new for the
repaired record.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .locations import LocationIndex
from .models import Bed, BedStatus, OccupancySnapshot, Technician
from .store import EntityStore, EntityType, load_snapshot

logger = logging.getLogger(__name__)


class IssueCategory(str, Enum):
    ORPHANED_BED = "orphaned_bed"
    MISMATCHED_BED = "mismatched_bed"
    MISMATCHED_TECHNICIAN = "mismatched_technician"


class IssueReason(str, Enum):
    NO_TECHNICIAN_REFERENCE = "no_technician_reference"
    TECHNICIAN_MISSING = "technician_missing"
    TECHNICIAN_POINTS_ELSEWHERE = "technician_points_elsewhere"
    BED_MISSING = "bed_missing"
    BED_POINTS_ELSEWHERE = "bed_points_elsewhere"
    BED_NOT_OCCUPIED = "bed_not_occupied"


class OccupancyIssue(BaseModel):
    """One record that breaks the occupancy invariant."""

    model_config = ConfigDict(frozen=True)

    category: IssueCategory
    reason: IssueReason
    record_id: str
    label: str
    related_id: str | None = None
    message: str
    location: str | None = None


class DiagnosticsSummary(BaseModel):
    total_beds: int = 0
    occupied_beds: int = 0
    technicians_with_beds: int = 0
    orphaned_beds: int = 0
    mismatched_beds: int = 0
    mismatched_technicians: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_issues(self) -> int:
        return self.orphaned_beds + self.mismatched_beds + self.mismatched_technicians

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_clean(self) -> bool:
        return self.total_issues == 0


class DiagnosticsReport(BaseModel):
    """Classification of a single snapshot."""

    summary: DiagnosticsSummary
    orphaned_beds: list[OccupancyIssue] = Field(default_factory=list)
    mismatched_beds: list[OccupancyIssue] = Field(default_factory=list)
    mismatched_technicians: list[OccupancyIssue] = Field(default_factory=list)
    checked_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def issues(self) -> list[OccupancyIssue]:
        """All issues in repair order."""
        return [*self.orphaned_beds, *self.mismatched_beds, *self.mismatched_technicians]


def _bed_label(bed: Bed) -> str:
    return f"Bed {bed.bed_number or bed.id}"


def _technician_label(tech: Technician) -> str:
    return f"Technician {tech.employee_id or tech.id}"


def classify(
    beds: list[Bed],
    technicians: list[Technician],
    locations: LocationIndex | None = None,
) -> DiagnosticsReport:
    """Classify every violation of the occupancy invariant.

    One pass over beds (orphaned or mismatched, never both for the same bed),
    then one pass over technicians. Lists keep input order.

    Args:
        beds: Every bed record
        technicians: Every technician record
        locations: Optional index used to attach a location to bed issues

    Returns:
        DiagnosticsReport with per-category issues and summary counts
    """
    beds_by_id = {b.id: b for b in beds}
    technicians_by_id = {t.id: t for t in technicians}

    def location_of(bed: Bed) -> str | None:
        return locations.locate(bed).label if locations else None

    orphaned: list[OccupancyIssue] = []
    mismatched_beds: list[OccupancyIssue] = []

    for bed in beds:
        if not bed.is_occupied:
            continue

        if bed.technician_id is None:
            orphaned.append(
                OccupancyIssue(
                    category=IssueCategory.ORPHANED_BED,
                    reason=IssueReason.NO_TECHNICIAN_REFERENCE,
                    record_id=bed.id,
                    label=_bed_label(bed),
                    message=f"Status: {bed.status}, but no technician_id",
                    location=location_of(bed),
                )
            )
            continue

        tech = technicians_by_id.get(bed.technician_id)
        if tech is None:
            mismatched_beds.append(
                OccupancyIssue(
                    category=IssueCategory.MISMATCHED_BED,
                    reason=IssueReason.TECHNICIAN_MISSING,
                    record_id=bed.id,
                    label=_bed_label(bed),
                    related_id=bed.technician_id,
                    message="Points to: Non-existent technician",
                    location=location_of(bed),
                )
            )
        elif tech.bed_id != bed.id:
            mismatched_beds.append(
                OccupancyIssue(
                    category=IssueCategory.MISMATCHED_BED,
                    reason=IssueReason.TECHNICIAN_POINTS_ELSEWHERE,
                    record_id=bed.id,
                    label=_bed_label(bed),
                    related_id=tech.id,
                    message=(
                        f"Points to: {tech.full_name} ({tech.employee_id}) - but technician points to different bed"
                    ),
                    location=location_of(bed),
                )
            )

    mismatched_technicians: list[OccupancyIssue] = []

    for tech in technicians:
        if tech.bed_id is None:
            continue

        bed = beds_by_id.get(tech.bed_id)
        if bed is None:
            reason = IssueReason.BED_MISSING
        elif bed.technician_id != tech.id:
            reason = IssueReason.BED_POINTS_ELSEWHERE
        elif not bed.is_occupied:
            reason = IssueReason.BED_NOT_OCCUPIED
        else:
            continue

        if bed is None:
            message = "Points to non-existent bed"
        else:
            message = (
                f"Points to {_bed_label(bed)} (status: {bed.status}, technician_id: {bed.technician_id or 'null'})"
            )

        mismatched_technicians.append(
            OccupancyIssue(
                category=IssueCategory.MISMATCHED_TECHNICIAN,
                reason=reason,
                record_id=tech.id,
                label=_technician_label(tech),
                related_id=tech.bed_id,
                message=message,
                location=location_of(bed) if bed is not None else None,
            )
        )

    summary = DiagnosticsSummary(
        total_beds=len(beds),
        occupied_beds=sum(1 for b in beds if b.is_occupied),
        technicians_with_beds=sum(1 for t in technicians if t.bed_id is not None),
        orphaned_beds=len(orphaned),
        mismatched_beds=len(mismatched_beds),
        mismatched_technicians=len(mismatched_technicians),
    )

    return DiagnosticsReport(
        summary=summary,
        orphaned_beds=orphaned,
        mismatched_beds=mismatched_beds,
        mismatched_technicians=mismatched_technicians,
    )


def classify_snapshot(snapshot: OccupancySnapshot) -> DiagnosticsReport:
    """Classify a snapshot, attaching bed locations when rooms were fetched."""
    locations = None
    if snapshot.rooms:
        locations = LocationIndex(snapshot.rooms, snapshot.floors, snapshot.camps)
    return classify(snapshot.beds, snapshot.technicians, locations)


# ========================================
# Repair planning
# ========================================

CLEAR_BED_FIELDS: dict[str, Any] = {
    "status": BedStatus.AVAILABLE.value,
    "technician_id": None,
    "reserved_for": None,
    "reserved_until": None,
}


class RepairAction(BaseModel):
    """A single write intent that resolves one issue."""

    model_config = ConfigDict(frozen=True)

    entity_type: EntityType
    record_id: str
    fields: dict[str, Any]
    issue: OccupancyIssue


def _action_for(issue: OccupancyIssue) -> RepairAction:
    if issue.category in (IssueCategory.ORPHANED_BED, IssueCategory.MISMATCHED_BED):
        return RepairAction(
            entity_type=EntityType.BED, record_id=issue.record_id, fields=dict(CLEAR_BED_FIELDS), issue=issue
        )

    # Mismatched technician: related_id is the bed the technician claims
    bed_id = issue.related_id or ""
    if issue.reason == IssueReason.BED_MISSING:
        return RepairAction(
            entity_type=EntityType.TECHNICIAN, record_id=issue.record_id, fields={"bed_id": None}, issue=issue
        )
    if issue.reason == IssueReason.BED_POINTS_ELSEWHERE:
        # Overwrites whatever technician the bed held; that technician is
        # picked up by the next run, not this one
        return RepairAction(
            entity_type=EntityType.BED,
            record_id=bed_id,
            fields={
                "status": BedStatus.OCCUPIED.value,
                "technician_id": issue.record_id,
                "reserved_for": None,
                "reserved_until": None,
            },
            issue=issue,
        )
    return RepairAction(
        entity_type=EntityType.BED, record_id=bed_id, fields={"status": BedStatus.OCCUPIED.value}, issue=issue
    )


def plan_repairs(report: DiagnosticsReport) -> list[RepairAction]:
    """Turn a classification into write intents.

    Order is fixed: orphaned beds, then mismatched beds, then mismatched
    technicians. Nothing is ever deleted and a technician's status is never
    written. A clean report plans nothing.
    """
    return [_action_for(issue) for issue in report.issues]


# ========================================
# Repair execution
# ========================================


class RepairFailure(BaseModel):
    issue_label: str
    record_id: str
    error: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def detail(self) -> str:
        return f"{self.issue_label}: {self.error}"


class RepairResult(BaseModel):
    """Outcome of applying a repair plan."""

    attempted: int = 0
    fixed: int = 0
    failures: list[RepairFailure] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def errors(self) -> int:
        return len(self.failures)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def error_details(self) -> list[str]:
        return [f.detail for f in self.failures]


def apply_repairs(store: EntityStore, actions: list[RepairAction]) -> RepairResult:
    """Apply repair actions one at a time.

    A failed update is recorded and the loop moves on; there is no retry.
    Re-running the checker is safe because every repair is idempotent.
    """
    result = RepairResult(attempted=len(actions))

    for action in actions:
        try:
            store.update(action.entity_type, action.record_id, action.fields)
            result.fixed += 1
            logger.debug(f"Repaired {action.issue.label} ({action.issue.reason.value})")
        except Exception as e:
            logger.warning(f"Failed to repair {action.issue.label}: {e}")
            result.failures.append(
                RepairFailure(issue_label=action.issue.label, record_id=action.record_id, error=str(e))
            )

    logger.info(f"Repair run finished: {result.fixed} of {result.attempted} fixed, {result.errors} failed")
    return result


class FixAllOutcome(BaseModel):
    dry_run: bool = False
    report_before: DiagnosticsReport
    planned: list[RepairAction] = Field(default_factory=list)
    result: RepairResult | None = None
    report_after: DiagnosticsReport | None = None


class OccupancyChecker:
    """Load a snapshot from the store, classify it, and optionally repair it."""

    def __init__(self, store: EntityStore, include_locations: bool = True):
        self.store = store
        self.include_locations = include_locations

    def check(self) -> DiagnosticsReport:
        """Classify the current store state. Store read errors propagate."""
        snapshot = load_snapshot(self.store, include_locations=self.include_locations)
        report = classify_snapshot(snapshot)
        logger.info(
            f"Occupancy check: {report.summary.total_beds} beds, "
            f"{report.summary.orphaned_beds} orphaned, {report.summary.mismatched_beds} mismatched beds, "
            f"{report.summary.mismatched_technicians} mismatched technicians"
        )
        return report

    def fix_all(self, dry_run: bool = False) -> FixAllOutcome:
        """Repair every issue in the current snapshot, then re-check.

        Args:
            dry_run: Plan the repairs without writing anything

        Returns:
            FixAllOutcome with the plan, the write results and a fresh report
        """
        report = self.check()
        actions = plan_repairs(report)

        if dry_run:
            logger.info(f"Dry run - would apply {len(actions)} repairs")
            return FixAllOutcome(dry_run=True, report_before=report, planned=actions)

        if not actions:
            return FixAllOutcome(report_before=report, result=RepairResult(), report_after=report)

        result = apply_repairs(self.store, actions)
        return FixAllOutcome(report_before=report, planned=actions, result=result, report_after=self.check())
