"""Stand sale status.

The remote directory owns the status vocabulary. Two values are
canonical and interpreted by this client; every other value is an
opaque pass-through state that is displayed and stored, never acted on.
"""

from __future__ import annotations

from enum import StrEnum


class StandStatus(StrEnum):
    """Canonical stand statuses."""

    AVAILABLE = "available"
    SOLD = "sold"


DEFAULT_STATUS = str(StandStatus.AVAILABLE)


def normalize_status(value: str | None) -> str:
    """Trim and lowercase *value*; blank falls back to ``available``.

    Unknown statuses are returned normalized but otherwise untouched.

    Examples:
        >>> normalize_status(" SOLD ")
        'sold'
        >>> normalize_status("")
        'available'
        >>> normalize_status("Reserved")
        'reserved'
    """
    cleaned = (value or "").strip().lower()
    return cleaned or DEFAULT_STATUS


def is_available(status: str | None) -> bool:
    """True when *status* is the canonical ``available`` value (case-insensitive)."""
    return (status or "").strip().lower() == StandStatus.AVAILABLE
