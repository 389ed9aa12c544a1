"""systemd adapter implementing the ``ServiceController`` capability."""

from __future__ import annotations

import logging
import os

from appctl.infrastructure.process import run_command

logger = logging.getLogger(__name__)


def _running_as_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


class SystemdController:
    """Start, stop and query units through ``systemctl``.

    State-changing calls go through ``sudo`` unless already running as root.
    """

    def __init__(self, *, use_sudo: bool | None = None) -> None:
        self._use_sudo = (not _running_as_root()) if use_sudo is None else use_sudo

    def _privileged(self, *args: str) -> None:
        argv = ["systemctl", *args]
        if self._use_sudo:
            argv = ["sudo", *argv]
        run_command(argv, capture=False)

    def stop(self, name: str) -> None:
        self._privileged("stop", name)

    def start(self, name: str) -> None:
        self._privileged("start", name)

    def restart(self, name: str) -> None:
        """Stop then start, so a unit that ignores ``restart`` still cycles."""
        self.stop(name)
        self.start(name)

    def is_active(self, name: str) -> bool:
        result = run_command(["systemctl", "is-active", "--quiet", name], check=False)
        return result.returncode == 0
