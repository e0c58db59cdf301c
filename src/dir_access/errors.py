"""Exceptions raised by dir_access."""

from __future__ import annotations


class OperationCancelledError(Exception):
    """Raised when a caller-supplied cancel event fires during an async operation."""
