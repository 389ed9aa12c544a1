"""Capability interfaces for the external tools appctl drives.

The guard chain and refresh engine only depend on these protocols, so
they run against in-memory fakes in tests and against git, systemctl and
uv in production (see :mod:`appctl.infrastructure`).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class RepoState:
    """Snapshot of the working tree, read fresh on every request.

    Attributes:
        root: Absolute repository root, or None outside a work tree.
        branch: Current branch name (``HEAD`` when detached).
        dirty: True if tracked files differ from HEAD (tree or index).
        origin_url: URL of the ``origin`` remote, or None if missing.
    """

    root: Path | None
    branch: str | None = None
    dirty: bool = False
    origin_url: str | None = None


class VersionControl(Protocol):
    def read_state(self) -> RepoState: ...

    def has_tracked_changes(self) -> bool: ...

    def stash(self, message: str) -> None: ...

    def fetch(self, branch: str) -> None: ...

    def fetch_all(self) -> None: ...

    def current_branch(self) -> str | None: ...

    def has_local_branch(self, branch: str) -> bool: ...

    def has_remote_branch(self, branch: str) -> bool: ...

    def checkout(self, branch: str) -> None: ...

    def create_tracking_branch(self, branch: str) -> None: ...

    def reset_hard(self, ref: str) -> None: ...


class ServiceController(Protocol):
    def stop(self, name: str) -> None: ...

    def start(self, name: str) -> None: ...

    def restart(self, name: str) -> None: ...

    def is_active(self, name: str) -> bool: ...


class DependencySyncer(Protocol):
    def locate(self) -> Path: ...

    def sync(self, cwd: Path) -> None: ...
