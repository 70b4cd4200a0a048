"""API utility modules."""

from .errors import http_error_for

__all__ = ["http_error_for"]
