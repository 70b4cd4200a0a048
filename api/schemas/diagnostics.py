"""
Pydantic schemas for bed diagnostics endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel

from occupancy.diagnostics import DiagnosticsReport, RepairAction, RepairResult


class FixRequest(BaseModel):
    """Request to repair every detected occupancy issue."""

    dry_run: bool = False


class FixAllResponse(BaseModel):
    """Result of a fix-all run, including the state re-read after repairs."""

    dry_run: bool
    message: str
    planned: list[RepairAction]
    result: RepairResult | None = None
    report_before: DiagnosticsReport
    report_after: DiagnosticsReport | None = None
