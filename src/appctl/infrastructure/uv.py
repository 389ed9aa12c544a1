"""uv adapter implementing the ``DependencySyncer`` capability.

systemd units often run with a minimal ``PATH``, so the executable is
searched on ``PATH`` first and then at the default per-user install path.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from appctl.domain.errors import CommandFailed, DependencySyncFailed, SyncerNotFound
from appctl.infrastructure.process import run_command

logger = logging.getLogger(__name__)


def fallback_uv_path() -> Path:
    """``~/.local/bin/uv`` — where the uv installer puts the binary."""
    return Path.home() / ".local" / "bin" / "uv"


class UvSyncer:
    """Locate ``uv`` and run it against a project directory."""

    def __init__(self, executable: Path | None = None) -> None:
        self._executable = executable

    def locate(self) -> Path:
        """Return the uv executable, searching PATH then the fallback location.

        Raises:
            SyncerNotFound: uv is neither on PATH nor at the fallback path.
        """
        if self._executable is not None:
            return self._executable
        found = shutil.which("uv")
        if found:
            self._executable = Path(found)
        else:
            fallback = fallback_uv_path()
            if not (fallback.is_file() and os.access(fallback, os.X_OK)):
                raise SyncerNotFound(["PATH", str(fallback)])
            self._executable = fallback
        logger.debug("Using uv at %s", self._executable)
        return self._executable

    def argv(self, *args: str) -> list[str]:
        """Full command line for ``uv <args>``."""
        return [str(self.locate()), *args]

    def sync(self, cwd: Path) -> None:
        """Run ``uv sync`` in *cwd*.

        Raises:
            DependencySyncFailed: uv exited non-zero or could not start.
        """
        try:
            run_command(self.argv("sync"), cwd=cwd)
        except CommandFailed as exc:
            raise DependencySyncFailed(exc.stderr or exc.message) from exc

    def pinned_python(self, cwd: Path) -> str | None:
        """The interpreter version the project pins, or None if unpinned."""
        result = run_command(self.argv("python", "pin", "--resolved"), cwd=cwd, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None
