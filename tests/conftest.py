"""Shared pytest fixtures and test helpers for appctl tests."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from click.testing import CliRunner

from appctl.config.settings import AppSettings
from appctl.domain.errors import CommandFailed
from appctl.domain.ports import RepoState

MANIFEST = """\
[project]
name = "app"
version = "1.0.0"

[tool.appctl]
service_name = "app.service"
launch_path = "src/app/main.py"
"""

REFRESH_ENV_VARS = (
    "BRANCH",
    "ALLOW_DEV_REFRESH",
    "BLOCK_MARKERS",
    "REQUIRE_MARKERS",
    "BLOCK_PATH_PATTERNS",
    "REQUIRE_REMOTE_HOST",
    "STASH_BEFORE_REFRESH",
    "STOP_GRACE_SECONDS",
)


@pytest.fixture(autouse=True)
def _clean_refresh_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Refresh settings read unprefixed env vars; keep the host shell out of tests."""
    for name in REFRESH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in (
        "APPCTL_VERBOSE",
        "APPCTL_QUIET",
        "APPCTL_JSON_OUTPUT",
        "APPCTL_LOG_JSON",
        "APPCTL_PROJECT_DIR",
        "APPCTL_MANIFEST_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Temporary application directory with a manifest.

    Lives under ``deploy/`` so the default ``Development`` path pattern
    never matches the pytest temp path.
    """
    root = tmp_path / "deploy" / "app"
    root.mkdir(parents=True)
    (root / "pyproject.toml").write_text(MANIFEST, encoding="utf-8")
    return root


@pytest.fixture
def app_settings(project_dir: Path) -> AppSettings:
    return AppSettings.from_cli(project_dir=project_dir)


# ---------------------------------------------------------------------------
# Fakes for the capability protocols
# ---------------------------------------------------------------------------


@dataclass
class FakeVcs:
    """In-memory VersionControl. Records every mutating call in ``calls``."""

    root: Path | None
    branch: str = "main"
    dirty: bool = False
    origin_url: str | None = "https://github.com/org/app.git"
    local_branches: set[str] = field(default_factory=lambda: {"main"})
    remote_branches: set[str] = field(default_factory=lambda: {"main"})
    fail: set[str] = field(default_factory=set)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail:
            raise CommandFailed(["git", op], f"{op} exploded", 1)

    def read_state(self) -> RepoState:
        if self.root is None:
            return RepoState(root=None)
        return RepoState(
            root=self.root, branch=self.branch, dirty=self.dirty, origin_url=self.origin_url
        )

    def has_tracked_changes(self) -> bool:
        return self.dirty

    def stash(self, message: str) -> None:
        self.calls.append(("stash", message))
        self._maybe_fail("stash")
        self.dirty = False

    def fetch(self, branch: str) -> None:
        self.calls.append(("fetch", branch))
        self._maybe_fail("fetch")

    def fetch_all(self) -> None:
        self.calls.append(("fetch_all",))
        self._maybe_fail("fetch_all")

    def current_branch(self) -> str | None:
        return self.branch

    def has_local_branch(self, branch: str) -> bool:
        return branch in self.local_branches

    def has_remote_branch(self, branch: str) -> bool:
        return branch in self.remote_branches

    def checkout(self, branch: str) -> None:
        self.calls.append(("checkout", branch))
        self.branch = branch

    def create_tracking_branch(self, branch: str) -> None:
        self.calls.append(("create_tracking_branch", branch))
        self.local_branches.add(branch)
        self.branch = branch

    def reset_hard(self, ref: str) -> None:
        self.calls.append(("reset_hard", ref))
        self._maybe_fail("reset_hard")
        self.dirty = False


@dataclass
class FakeServices:
    """In-memory ServiceController."""

    active: set[str] = field(default_factory=set)
    stuck: set[str] = field(default_factory=set)
    calls: list[tuple[str, str]] = field(default_factory=list)

    def stop(self, name: str) -> None:
        self.calls.append(("stop", name))
        if name not in self.stuck:
            self.active.discard(name)

    def start(self, name: str) -> None:
        self.calls.append(("start", name))
        self.active.add(name)

    def restart(self, name: str) -> None:
        self.stop(name)
        self.start(name)

    def is_active(self, name: str) -> bool:
        return name in self.active


@dataclass
class FakeSyncer:
    """In-memory DependencySyncer."""

    missing: bool = False
    error: Exception | None = None
    synced: list[Path] = field(default_factory=list)

    def locate(self) -> Path:
        if self.missing:
            from appctl.domain.errors import SyncerNotFound

            raise SyncerNotFound(["PATH", "/home/nobody/.local/bin/uv"])
        return Path("/usr/bin/uv")

    def sync(self, cwd: Path) -> None:
        if self.error is not None:
            raise self.error
        self.synced.append(cwd)


# ---------------------------------------------------------------------------
# Real git repositories
# ---------------------------------------------------------------------------


def git(cwd: Path, *args: str) -> str:
    """Run git in *cwd*, asserting success; return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _configure_identity(repo: Path) -> None:
    git(repo, "config", "user.email", "test@test.com")
    git(repo, "config", "user.name", "Test")


@pytest.fixture
def origin_repo(tmp_path: Path) -> Path:
    """Bare ``origin`` with one commit on ``main`` and a ``feature`` branch."""
    bare = tmp_path / "origin.git"
    git(tmp_path, "init", "--bare", "--initial-branch=main", str(bare))

    seed = tmp_path / "seed"
    git(tmp_path, "clone", str(bare), str(seed))
    _configure_identity(seed)
    git(seed, "symbolic-ref", "HEAD", "refs/heads/main")
    (seed / "pyproject.toml").write_text(MANIFEST, encoding="utf-8")
    (seed / "app.py").write_text("print('v1')\n", encoding="utf-8")
    git(seed, "add", ".")
    git(seed, "commit", "-m", "init")
    git(seed, "push", "origin", "main")
    git(seed, "checkout", "-b", "feature")
    (seed / "feature.txt").write_text("feature\n", encoding="utf-8")
    git(seed, "add", ".")
    git(seed, "commit", "-m", "feature")
    git(seed, "push", "origin", "feature")
    git(seed, "checkout", "main")
    return bare


@pytest.fixture
def clone(tmp_path: Path, origin_repo: Path) -> Path:
    """Deployed clone of ``origin_repo`` on ``main``."""
    path = tmp_path / "deploy" / "clone"
    path.parent.mkdir(parents=True, exist_ok=True)
    git(tmp_path, "clone", "--branch", "main", str(origin_repo), str(path))
    _configure_identity(path)
    return path


def push_new_commit(tmp_path: Path, message: str, filename: str = "app.py") -> str:
    """Commit a change to ``origin/main`` through the seed clone; return its sha."""
    seed = tmp_path / "seed"
    (seed / filename).write_text(f"print({message!r})\n", encoding="utf-8")
    git(seed, "add", ".")
    git(seed, "commit", "-m", message)
    git(seed, "push", "origin", "main")
    return git(seed, "rev-parse", "HEAD")
