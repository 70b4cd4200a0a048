"""
Diagnostics Router - Bed occupancy consistency endpoints.

GET reports orphaned beds, mismatched beds and mismatched technicians.
POST /fix repairs all of them one record at a time and returns the state
re-read from the store afterwards.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends

from occupancy.diagnostics import DiagnosticsReport, FixAllOutcome, OccupancyChecker
from occupancy.store import EntityStore

from ..dependencies import get_entity_store
from ..schemas import FixAllResponse, FixRequest
from ..utils import http_error_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bed-diagnostics", tags=["diagnostics"])


def summarize(outcome: FixAllOutcome) -> str:
    """User-facing one-line summary of a fix-all run."""
    if outcome.dry_run:
        return f"Dry run: {len(outcome.planned)} repair(s) planned, nothing written"
    if not outcome.planned:
        return "No data integrity issues found"

    result = outcome.result
    fixed = result.fixed if result else 0
    message = f"Successfully fixed {fixed} issue(s)!"
    if result and result.errors:
        message += f" {result.errors} repair(s) failed."
    return message


@router.get("", response_model=DiagnosticsReport)
async def get_bed_diagnostics(store: EntityStore = Depends(get_entity_store)) -> DiagnosticsReport:
    """Classify every bed/technician occupancy mismatch."""
    checker = OccupancyChecker(store)
    try:
        return await asyncio.to_thread(checker.check)
    except Exception as e:
        raise http_error_for(e, "bed diagnostics") from e


@router.post("/fix", response_model=FixAllResponse)
async def fix_bed_diagnostics(
    request: FixRequest | None = None,
    store: EntityStore = Depends(get_entity_store),
) -> FixAllResponse:
    """Repair every detected issue and re-check."""
    dry_run = request.dry_run if request else False
    logger.info(f"Fix all occupancy issues requested (dry_run={dry_run})")

    checker = OccupancyChecker(store)
    try:
        outcome = await asyncio.to_thread(checker.fix_all, dry_run)
    except Exception as e:
        raise http_error_for(e, "bed repair") from e

    return FixAllResponse(
        dry_run=outcome.dry_run,
        message=summarize(outcome),
        planned=outcome.planned,
        result=outcome.result,
        report_before=outcome.report_before,
        report_after=outcome.report_after,
    )
