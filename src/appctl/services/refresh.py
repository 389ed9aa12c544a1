"""RefreshService — bring a deployed working tree up to ``origin/<branch>``.

Pipeline: GUARDS → PREFLIGHT → CONFIRM → STOP → STASH → FETCH → BRANCH →
RESET → SYNC → DONE

Guards and preflight never mutate anything. Once the operator confirms,
the :class:`RefreshEngine` walks the refresh lifecycle from
:mod:`appctl.domain.states`; any failure lands in ``failed`` and leaves the
tree in whatever state the last completed step produced. There is no
rollback, and a stash created on the way is never popped.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from appctl.domain.errors import (
    AppctlError,
    BranchNotFound,
    CommandFailed,
    FetchFailed,
    ServiceStillActive,
)
from appctl.domain.guards import (
    GuardBlock,
    GuardContext,
    GuardOverridden,
    GuardResult,
    evaluate_guards,
    first_block,
)
from appctl.domain.states import RefreshState, is_valid_transition
from appctl.infrastructure.git import REMOTE
from appctl.services._helpers import now_stamp
from appctl.services.base import BaseService
from appctl.services.result import ServiceResult

if TYPE_CHECKING:
    from appctl.config.settings import AppSettings, RefreshSettings
    from appctl.domain.ports import DependencySyncer, ServiceController, VersionControl

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshPlan:
    """What the operator is asked to confirm."""

    project: str
    version: str
    branch: str
    service: str | None
    repo_root: Path


ConfirmFn = Callable[[RefreshPlan], bool]


def describe_guard(result: GuardResult) -> dict[str, Any]:
    """JSON-friendly view of one guard outcome."""
    if isinstance(result, GuardBlock):
        return {
            "guard": result.guard,
            "outcome": "block",
            "reason": result.reason,
            "exit_code": result.exit_code,
        }
    if isinstance(result, GuardOverridden):
        return {"guard": result.guard, "outcome": "overridden", "reason": result.reason}
    return {"guard": result.guard, "outcome": "pass"}


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class RefreshEngine:
    """The mutating half of a refresh, as an explicit state machine."""

    def __init__(
        self,
        settings: RefreshSettings,
        *,
        service: str | None,
        vcs: VersionControl,
        services: ServiceController,
        syncer: DependencySyncer,
        sleep: Callable[[float], None] = time.sleep,
        stamp: Callable[[], str] = now_stamp,
    ) -> None:
        self._settings = settings
        self._service = service
        self._vcs = vcs
        self._services = services
        self._syncer = syncer
        self._sleep = sleep
        self._stamp = stamp

        self.state = RefreshState.IDLE
        self.history: list[RefreshState] = [RefreshState.IDLE]
        self.warnings: list[str] = []
        self.stash_message: str | None = None
        self.branch_created = False

    def _advance(self, target: RefreshState) -> None:
        if not is_valid_transition(self.state, target):
            raise ValueError(f"Invalid refresh transition {self.state} -> {target}")
        logger.info("Refresh state %s -> %s", self.state, target)
        self.state = target
        self.history.append(target)

    def run(self, project_dir: Path) -> None:
        """Drive the engine to ``done``; re-raise any failure after marking ``failed``.

        Git steps act on the whole repository; ``uv sync`` runs in *project_dir*,
        the directory the manifest was read from.
        """
        try:
            self._stop_service()
            self._advance(RefreshState.SERVICE_STOPPED)

            if self._settings.stash_before_refresh:
                self._stash()
                self._advance(RefreshState.STASHED)

            self._fetch()
            self._advance(RefreshState.FETCHED)

            self._resolve_branch()
            self._advance(RefreshState.BRANCH_RESOLVED)

            target = f"{REMOTE}/{self._settings.branch}"
            logger.info("Resetting '%s' to %s", self._settings.branch, target)
            self._vcs.reset_hard(target)
            self._advance(RefreshState.RESET)

            logger.info("Running 'uv sync'")
            self._syncer.sync(project_dir)
            self._advance(RefreshState.SYNCED)

            self._advance(RefreshState.DONE)
        except AppctlError:
            self._advance(RefreshState.FAILED)
            raise

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _stop_service(self) -> None:
        if not self._service:
            return
        logger.info("Stopping service '%s' before refresh", self._service)
        self._services.stop(self._service)
        self._sleep(self._settings.stop_grace_seconds)
        if self._services.is_active(self._service):
            raise ServiceStillActive(self._service)

    def _stash(self) -> None:
        if not self._vcs.has_tracked_changes():
            return
        message = f"pre-refresh {self._stamp()}"
        logger.info("Stashing tracked changes")
        try:
            self._vcs.stash(message)
        except CommandFailed as exc:
            logger.warning("git stash failed: %s", exc.message)
            self.warnings.append(f"git stash failed: {exc.message}")
            return
        self.stash_message = message

    def _fetch(self) -> None:
        branch = self._settings.branch
        logger.info("Fetching '%s' from %s", branch, REMOTE)
        try:
            self._vcs.fetch(branch)
            return
        except CommandFailed as exc:
            logger.warning("Targeted fetch failed (%s); fetching all of %s", exc.message, REMOTE)
        try:
            self._vcs.fetch_all()
        except CommandFailed as exc:
            raise FetchFailed(branch, exc.stderr) from exc

    def _resolve_branch(self) -> None:
        branch = self._settings.branch
        current = self._vcs.current_branch()
        if current == branch:
            return
        if self._vcs.has_local_branch(branch):
            logger.info("Checking out branch '%s' (was on '%s')", branch, current)
            self._vcs.checkout(branch)
        elif self._vcs.has_remote_branch(branch):
            logger.info("Creating branch '%s' tracking %s/%s", branch, REMOTE, branch)
            self._vcs.create_tracking_branch(branch)
            self.branch_created = True
        else:
            raise BranchNotFound(branch)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class RefreshService(BaseService):
    """Gatekeeping around :class:`RefreshEngine`."""

    def __init__(
        self,
        settings: AppSettings,
        refresh: RefreshSettings,
        *,
        vcs: VersionControl | None = None,
        services: ServiceController | None = None,
        syncer: DependencySyncer | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(settings)
        self._refresh = refresh
        if vcs is None:
            from appctl.infrastructure.git import GitRepository

            vcs = GitRepository(settings.project_dir)
        if services is None:
            from appctl.infrastructure.systemd import SystemdController

            services = SystemdController()
        if syncer is None:
            from appctl.infrastructure.uv import UvSyncer

            syncer = UvSyncer()
        self._vcs = vcs
        self._services = services
        self._syncer = syncer
        self._sleep = sleep

    def run(self, confirm: ConfirmFn | None = None) -> ServiceResult:
        """Evaluate guards, confirm, then refresh.

        Args:
            confirm: Called with the :class:`RefreshPlan` unless the settings
                are non-interactive. Returning False aborts cleanly.
        """
        op = "refresh"
        settings = self._refresh

        try:
            manifest = self.manifest
        except AppctlError as exc:
            return self._failure(op, exc)

        # GUARDS — repo state is read now, never earlier.
        state = self._vcs.read_state()
        results = evaluate_guards(GuardContext(state=state, settings=settings))
        guards = [describe_guard(r) for r in results]
        block = first_block(results)
        if block is not None:
            return self._failure(op, block.error, data={"guards": guards})
        warnings = [
            f"{r.guard} guard overridden: {r.reason}"
            for r in results
            if isinstance(r, GuardOverridden)
        ]
        assert state.root is not None

        # PREFLIGHT
        try:
            self._syncer.locate()
        except AppctlError as exc:
            return self._failure(op, exc, data={"guards": guards}, warnings=warnings)

        service = settings.service or manifest.service_name
        plan = RefreshPlan(
            project=manifest.name,
            version=manifest.version,
            branch=settings.branch,
            service=service,
            repo_root=state.root,
        )
        data: dict[str, Any] = {
            "project": plan.project,
            "version": plan.version,
            "branch": plan.branch,
            "service": plan.service,
            "repo_root": str(plan.repo_root),
            "guards": guards,
        }

        # CONFIRM
        if confirm is not None and not settings.non_interactive and not confirm(plan):
            logger.info("Refresh aborted by operator")
            data["aborted"] = True
            data["states"] = [RefreshState.IDLE.value, RefreshState.ABORTED.value]
            return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

        # REFRESH
        logger.info(
            "Project %s (v%s): starting refresh from branch '%s'",
            plan.project,
            plan.version,
            plan.branch,
        )
        engine = RefreshEngine(
            settings,
            service=service,
            vcs=self._vcs,
            services=self._services,
            syncer=self._syncer,
            sleep=self._sleep,
        )
        try:
            engine.run(self._settings.project_dir)
        except AppctlError as exc:
            data["states"] = [s.value for s in engine.history]
            return self._failure(op, exc, data=data, warnings=warnings + engine.warnings)
        warnings.extend(engine.warnings)

        logger.info("Refresh done")
        data.update(
            {
                "states": [s.value for s in engine.history],
                "stash": engine.stash_message,
                "branch_created": engine.branch_created,
            }
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
