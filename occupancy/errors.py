"""Occupancy error classes.

Referential inconsistencies between beds and technicians are not errors;
they are reported as diagnostics data. These exceptions cover store and
reporting failures only.
"""

from __future__ import annotations


class OccupancyError(Exception):
    """Base exception for the occupancy package."""

    pass


class StoreError(OccupancyError):
    """Raised when a list or update call against the entity store fails."""

    def __init__(self, message: str, entity_type: str, record_id: str | None = None):
        self.message = message
        self.entity_type = entity_type
        self.record_id = record_id
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ReportError(OccupancyError):
    """Raised when an unsupported report or export type is requested."""

    pass
