"""Thin subprocess wrapper shared by every tool adapter."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from appctl.domain.errors import CommandFailed

logger = logging.getLogger(__name__)


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    check: bool = True,
    capture: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run *args* and return the completed process.

    A command that cannot be started (missing binary, bad cwd) always raises
    :class:`CommandFailed`. A non-zero exit raises only when *check* is set.
    """
    argv = list(args)
    logger.debug("Running: %s", " ".join(argv))
    try:
        result = subprocess.run(
            argv,
            cwd=cwd,
            capture_output=capture,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise CommandFailed(argv, str(exc)) from exc
    if check and result.returncode != 0:
        raise CommandFailed(argv, result.stderr or "", result.returncode)
    return result
