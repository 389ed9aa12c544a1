"""Refresh engine lifecycle.

The refresh is a linear state machine. ``aborted`` and ``failed`` are
terminal and reachable from every non-terminal state.
"""

from __future__ import annotations

from enum import StrEnum


class RefreshState(StrEnum):
    """States a single refresh run moves through."""

    IDLE = "idle"
    SERVICE_STOPPED = "service_stopped"
    STASHED = "stashed"
    FETCHED = "fetched"
    BRANCH_RESOLVED = "branch_resolved"
    RESET = "reset"
    SYNCED = "synced"
    DONE = "done"
    ABORTED = "aborted"
    FAILED = "failed"


TERMINAL_STATES = frozenset({RefreshState.DONE, RefreshState.ABORTED, RefreshState.FAILED})

# Stashing is optional, so service_stopped may skip straight to fetched.
REFRESH_TRANSITIONS: dict[RefreshState, list[RefreshState]] = {
    RefreshState.IDLE: [RefreshState.SERVICE_STOPPED],
    RefreshState.SERVICE_STOPPED: [RefreshState.STASHED, RefreshState.FETCHED],
    RefreshState.STASHED: [RefreshState.FETCHED],
    RefreshState.FETCHED: [RefreshState.BRANCH_RESOLVED],
    RefreshState.BRANCH_RESOLVED: [RefreshState.RESET],
    RefreshState.RESET: [RefreshState.SYNCED],
    RefreshState.SYNCED: [RefreshState.DONE],
    RefreshState.DONE: [],
    RefreshState.ABORTED: [],
    RefreshState.FAILED: [],
}


def is_valid_transition(current: RefreshState, target: RefreshState) -> bool:
    """Check if moving from *current* to *target* is allowed."""
    if current in TERMINAL_STATES:
        return False
    if target in (RefreshState.ABORTED, RefreshState.FAILED):
        return True
    return target in REFRESH_TRANSITIONS.get(current, [])
