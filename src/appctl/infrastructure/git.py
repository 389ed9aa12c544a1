"""Git adapter implementing the ``VersionControl`` capability.

Every call shells out to ``git`` in the repository directory and reads
state fresh: nothing about the working tree is cached between calls.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from appctl.domain.errors import CommandFailed
from appctl.domain.ports import RepoState
from appctl.infrastructure.process import run_command

logger = logging.getLogger(__name__)

REMOTE = "origin"


class GitRepository:
    """Git operations needed by refresh and release, rooted at *cwd*."""

    def __init__(self, cwd: Path) -> None:
        self._cwd = cwd

    # ------------------------------------------------------------------
    # Subprocess helpers
    # ------------------------------------------------------------------

    def _run_git(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Run a git command in the repository. Raises on failure."""
        return run_command(["git", *args], cwd=self._cwd)

    def _git_succeeds(self, *args: str) -> bool:
        """True if the git command exits 0. A missing git binary counts as failure."""
        try:
            return run_command(["git", *args], cwd=self._cwd, check=False).returncode == 0
        except CommandFailed as exc:
            logger.debug("git %s could not run: %s", args[0], exc)
            return False

    def _git_output(self, *args: str) -> str | None:
        try:
            result = run_command(["git", *args], cwd=self._cwd, check=False)
        except CommandFailed as exc:
            logger.debug("git %s could not run: %s", args[0], exc)
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def root(self) -> Path | None:
        """Absolute repository root, or None outside a work tree."""
        if self._git_output("rev-parse", "--is-inside-work-tree") != "true":
            return None
        top = self._git_output("rev-parse", "--show-toplevel")
        return Path(top) if top else None

    def read_state(self) -> RepoState:
        root = self.root()
        if root is None:
            return RepoState(root=None)
        return RepoState(
            root=root,
            branch=self.current_branch(),
            dirty=self.has_tracked_changes(),
            origin_url=self.origin_url(),
        )

    def origin_url(self) -> str | None:
        return self._git_output("config", "--get", f"remote.{REMOTE}.url")

    def current_branch(self) -> str | None:
        return self._git_output("rev-parse", "--abbrev-ref", "HEAD")

    def has_tracked_changes(self) -> bool:
        """True if tracked files differ from HEAD in the tree or the index."""
        unstaged_clean = self._git_succeeds("diff", "--quiet")
        staged_clean = self._git_succeeds("diff", "--cached", "--quiet")
        return not (unstaged_clean and staged_clean)

    def has_local_branch(self, branch: str) -> bool:
        return self._git_succeeds("show-ref", "--verify", "--quiet", f"refs/heads/{branch}")

    def has_remote_branch(self, branch: str) -> bool:
        return self._git_succeeds(
            "show-ref", "--verify", "--quiet", f"refs/remotes/{REMOTE}/{branch}"
        )

    # ------------------------------------------------------------------
    # Refresh mutations
    # ------------------------------------------------------------------

    def stash(self, message: str) -> None:
        """Stash tracked changes only; untracked and ignored files stay put."""
        self._run_git("stash", "push", "-m", message)

    def fetch(self, branch: str) -> None:
        self._run_git("fetch", REMOTE, branch, "--tags")

    def fetch_all(self) -> None:
        self._run_git("fetch", REMOTE)

    def checkout(self, branch: str) -> None:
        self._run_git("checkout", branch)

    def create_tracking_branch(self, branch: str) -> None:
        self._run_git("checkout", "-b", branch, "--track", f"{REMOTE}/{branch}")

    def reset_hard(self, ref: str) -> None:
        self._run_git("reset", "--hard", ref)

    # ------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------

    def add_all(self) -> None:
        self._run_git("add", ".")

    def commit(self, message: str) -> None:
        self._run_git("commit", "-m", message)

    def tag(self, name: str) -> None:
        self._run_git("tag", name)

    def push(self, ref: str) -> None:
        self._run_git("push", REMOTE, ref)
