"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime


def now_stamp() -> str:
    """Current UTC time as a compact stamp (YYYYmmddTHHMMSSZ, for stash names)."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
