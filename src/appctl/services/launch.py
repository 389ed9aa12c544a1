"""LaunchService — run the application under a process supervisor.

Pipeline: MANIFEST → LOCATE UV → PYTHON PIN (ARM only) → SYNC → RUN

The launcher is the long-lived process systemd supervises. SIGINT and
SIGTERM are an intentional stop: the child is terminated and the launcher
exits 0 so the supervisor does not restart it. Any other non-zero exit
from the application is propagated so the supervisor does restart it.
"""

from __future__ import annotations

import logging
import platform
import re
import signal
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from appctl.domain.errors import EXIT_OK, AppctlError, CommandFailed, FieldMissing
from appctl.services.base import BaseService
from appctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from appctl.config.settings import AppSettings
    from appctl.infrastructure.uv import UvSyncer

logger = logging.getLogger(__name__)

# Exit code when ``uv sync`` fails and the app is never started.
EXIT_SYNC_FAILED = 2

ARM_MACHINES = frozenset({"armv7l", "aarch64"})
_MIN_ARM_PYTHON = re.compile(r"^(3\.1[3-9]|3\.[2-9][0-9]|[4-9])")

_TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class LaunchService(BaseService):
    """Sync dependencies and run the manifest's ``launch_path`` with ``uv run``."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        syncer: UvSyncer | None = None,
        machine: Callable[[], str] | None = None,
        popen: Callable[..., Any] | None = None,
    ) -> None:
        super().__init__(settings)
        if syncer is None:
            from appctl.infrastructure.uv import UvSyncer

            syncer = UvSyncer()
        self._syncer = syncer
        self._machine = machine or platform.machine
        self._popen = popen or subprocess.Popen

    def _check_python_pin(self, home: Path) -> None:
        pinned = self._syncer.pinned_python(home)
        if pinned is None or not _MIN_ARM_PYTHON.match(pinned):
            raise AppctlError(
                "Project must pin Python 3.13+ on Raspberry Pi. Run: uv python pin 3.13",
                pinned=pinned,
            )

    def _run_app(self, argv: list[str], home: Path) -> tuple[int, bool]:
        """Run the app to completion. Returns ``(returncode, stopped_by_signal)``."""
        try:
            proc = self._popen(argv, cwd=home)
        except OSError as exc:
            raise CommandFailed(argv, str(exc)) from exc

        stopping = False

        def on_terminate(signum: int, _frame: Any) -> None:
            nonlocal stopping
            stopping = True
            logger.info(
                "Caught %s; exiting cleanly so the supervisor does not restart",
                signal.Signals(signum).name,
            )
            proc.terminate()

        previous = {sig: signal.signal(sig, on_terminate) for sig in _TERMINATION_SIGNALS}
        try:
            returncode = proc.wait()
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)
        return returncode, stopping

    def launch(self) -> ServiceResult:
        op = "launch"
        home = self._settings.project_dir.resolve()
        try:
            manifest = self.manifest
            if not manifest.launch_path:
                raise FieldMissing("launch_path", str(self._settings.manifest_file))
            self._syncer.locate()
            if self._machine() in ARM_MACHINES:
                self._check_python_pin(home)
        except AppctlError as exc:
            return self._failure(op, exc)

        script = home / manifest.launch_path
        data: dict[str, Any] = {"project": manifest.name, "script": str(script)}

        try:
            self._syncer.sync(home)
        except AppctlError as exc:
            logger.error("uv sync failed; not starting app")
            return ServiceResult(
                ok=False,
                op=op,
                data=data,
                error=ServiceError(
                    code=exc.code,
                    message=exc.message,
                    detail=dict(exc.detail),
                    exit_code=EXIT_SYNC_FAILED,
                ),
            )

        logger.info("Starting app with uv run %s", script)
        try:
            returncode, stopped = self._run_app(self._syncer.argv("run", str(script)), home)
        except AppctlError as exc:
            return self._failure(op, exc, data=data)

        data["returncode"] = returncode
        data["stopped_by_signal"] = stopped
        if stopped or returncode == EXIT_OK:
            logger.info("App exited normally")
            return ServiceResult(ok=True, op=op, data=data)

        logger.error("App exited with error (%s); signaling failure so it is restarted", returncode)
        return ServiceResult(
            ok=False,
            op=op,
            data=data,
            error=ServiceError(
                code="APP_FAILED",
                message=f"App exited with error ({returncode})",
                exit_code=returncode if returncode > 0 else 1,
            ),
        )
