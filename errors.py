"""
errors.py
─────────
Exceptions shared by the snapshot model, the permission engine and the reader.

Only structural misuse raises. A missing permission or a refused interaction is
an ordinary return value, never an exception.
"""

from __future__ import annotations


class InvalidArgumentError(ValueError):
    """Raised for cross-guild comparisons, missing inputs and malformed snapshots."""


class DiscordAPIError(Exception):
    """A Discord REST call returned a non-2xx response."""

    def __init__(self, message: str, status_code: int | None = None, endpoint: str = ""):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.endpoint = endpoint
