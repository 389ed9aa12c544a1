"""ReleaseService — test, document, version-bump, commit, tag and push.

Pipeline: PREFLIGHT → CONFIRM → TEST → DOCS → BUMP → COMMIT → TAG → PUSH → PUBLISH DOCS

``tests/`` and ``docs/`` are optional: when present, pytest and mkdocs
become required tools and their steps run. Any failing step stops the
release where it is; completed steps are reported in ``data["steps"]``.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from appctl.config.manifest import replace_version
from appctl.domain.errors import AppctlError, CommandFailed, ReleaseError
from appctl.infrastructure.process import run_command
from appctl.services.base import BaseService
from appctl.services.result import ServiceResult

if TYPE_CHECKING:
    from appctl.config.settings import AppSettings
    from appctl.infrastructure.git import GitRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleasePlan:
    project: str
    current_version: str
    new_version: str
    comment: str
    branch: str
    run_tests: bool
    build_docs: bool

    @property
    def tag(self) -> str:
        return f"v{self.new_version}"


ConfirmFn = Callable[[ReleasePlan], bool]


class ReleaseService(BaseService):
    """Cut a release of the project in ``settings.project_dir``."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        vcs: GitRepository | None = None,
        runner: Callable[..., Any] | None = None,
        which: Callable[[str], str | None] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(settings)
        if vcs is None:
            from appctl.infrastructure.git import GitRepository

            vcs = GitRepository(settings.project_dir)
        self._vcs = vcs
        self._runner = runner or run_command
        self._which = which or shutil.which
        self._environ = os.environ if environ is None else environ

    @property
    def _root(self) -> Path:
        return self._settings.project_dir

    def _preflight(self, version: str, comment: str, branch: str) -> ReleasePlan:
        manifest = self.manifest
        if not version.strip():
            raise ReleaseError("Release version must not be empty.")
        if not comment.strip():
            raise ReleaseError("Release comment must not be empty.")
        if not self._environ.get("VIRTUAL_ENV"):
            raise ReleaseError("No virtual environment activated.")

        run_tests = (self._root / "tests").is_dir()
        if run_tests and self._which("pytest") is None:
            raise ReleaseError(
                "pytest could not be found. Please install it in your virtual environment.",
                tool="pytest",
            )
        build_docs = (self._root / "docs").is_dir()
        if build_docs and self._which("mkdocs") is None:
            raise ReleaseError(
                "mkdocs could not be found. Please install it in your virtual environment.",
                tool="mkdocs",
            )
        return ReleasePlan(
            project=manifest.name,
            current_version=manifest.version,
            new_version=version,
            comment=comment,
            branch=branch,
            run_tests=run_tests,
            build_docs=build_docs,
        )

    def _tool(self, step: str, *argv: str) -> None:
        logger.info("Running %s", " ".join(argv))
        try:
            self._runner(list(argv), cwd=self._root, capture=False)
        except CommandFailed as exc:
            raise ReleaseError(f"{step} failed: {exc.message}", step=step) from exc

    def _git(self, step: str, action: Callable[..., None], *args: str) -> None:
        try:
            action(*args)
        except CommandFailed as exc:
            raise ReleaseError(f"{step} failed: {exc.message}", step=step) from exc

    def release(
        self,
        version: str,
        comment: str,
        *,
        branch: str = "main",
        confirm: ConfirmFn | None = None,
    ) -> ServiceResult:
        op = "release"
        try:
            plan = self._preflight(version, comment, branch)
        except AppctlError as exc:
            return self._failure(op, exc)

        data: dict[str, Any] = {
            "project": plan.project,
            "previous_version": plan.current_version,
            "version": plan.new_version,
            "tag": plan.tag,
            "comment": plan.comment,
        }
        if confirm is not None and not confirm(plan):
            data["aborted"] = True
            return ServiceResult(ok=True, op=op, data=data)

        steps: list[str] = []
        data["steps"] = steps
        try:
            if plan.run_tests:
                self._tool("tests", "pytest")
                steps.append("tests")
            if plan.build_docs:
                self._tool("docs build", "mkdocs", "build", "--clean")
                steps.append("docs_build")

            logger.info("Updating version in manifest to %s", plan.new_version)
            replace_version(self._settings.manifest_file, plan.new_version)
            steps.append("version_bump")

            self._git("git add", self._vcs.add_all)
            self._git("git commit", self._vcs.commit, plan.comment)
            steps.append("commit")
            self._git("git tag", self._vcs.tag, plan.tag)
            steps.append("tag")
            self._git(f"git push {plan.branch}", self._vcs.push, plan.branch)
            self._git(f"git push {plan.tag}", self._vcs.push, plan.tag)
            steps.append("push")

            if plan.build_docs:
                self._tool("docs deploy", "mkdocs", "gh-deploy", "--clean")
                steps.append("docs_deploy")
        except AppctlError as exc:
            return self._failure(op, exc, data=data)

        logger.info("Release %s committed and pushed", plan.tag)
        return ServiceResult(ok=True, op=op, data=data)
