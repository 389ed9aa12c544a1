"""Guard chain evaluated before a refresh may touch the working tree.

Each guard is a plain function ``(GuardContext) -> GuardResult``. The chain
is a fixed, ordered tuple of those functions and stops at the first block.

Overridable guards (markers, path patterns, required markers) turn a block
into :class:`GuardOverridden` when ``allow_dev_refresh`` is set. The
working-tree and remote guards are never overridable: they mean the tool is
pointed at the wrong target entirely.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from appctl.domain.errors import (
    AppctlError,
    BlockedByMarker,
    BlockedByPath,
    MissingRequiredMarker,
    NoOriginRemote,
    NotAGitRepo,
    RemoteHostMismatch,
)

if TYPE_CHECKING:
    from appctl.config.settings import RefreshSettings
    from appctl.domain.ports import RepoState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GuardPass:
    guard: str


@dataclass(frozen=True)
class GuardBlock:
    guard: str
    error: AppctlError

    @property
    def reason(self) -> str:
        return self.error.message

    @property
    def exit_code(self) -> int:
        return self.error.exit_code


@dataclass(frozen=True)
class GuardOverridden:
    guard: str
    reason: str


GuardResult = GuardPass | GuardBlock | GuardOverridden


@dataclass(frozen=True)
class GuardContext:
    """Input shared by every guard: fresh repo state plus resolved settings."""

    state: RepoState
    settings: RefreshSettings


Guard = Callable[[GuardContext], GuardResult]


def _block_or_override(guard: str, error: AppctlError, allow: bool) -> GuardResult:
    if not allow:
        return GuardBlock(guard, error)
    logger.warning("ALLOW_DEV_REFRESH set; overriding %s guard: %s", guard, error.message)
    return GuardOverridden(guard, error.message)


def _at_root(root: Path, marker: str) -> Path:
    """Marker path under *root*; absolute markers are taken relative to it."""
    return root / marker.lstrip("/")


# ---------------------------------------------------------------------------
# Guards, in chain order
# ---------------------------------------------------------------------------


def check_working_tree(ctx: GuardContext) -> GuardResult:
    """The current directory must sit inside a git work tree with a known root."""
    if ctx.state.root is None:
        return GuardBlock("working_tree", NotAGitRepo())
    return GuardPass("working_tree")


def check_block_markers(ctx: GuardContext) -> GuardResult:
    """Block when any dev marker exists at the repository root."""
    root = ctx.state.root
    assert root is not None
    found = [m for m in ctx.settings.block_markers if _at_root(root, m).exists()]
    if not found:
        return GuardPass("block_markers")
    if ctx.settings.allow_dev_refresh:
        for marker in found:
            logger.warning("ALLOW_DEV_REFRESH set; ignoring dev marker '%s'", marker)
        return GuardOverridden("block_markers", f"dev markers present: {', '.join(found)}")
    return GuardBlock("block_markers", BlockedByMarker(found[0], str(root)))


def check_path_patterns(ctx: GuardContext) -> GuardResult:
    """Block when the repository root path contains a blocked substring."""
    root = ctx.state.root
    assert root is not None
    root_str = str(root)
    matched = [p for p in ctx.settings.block_path_patterns if p in root_str]
    if not matched:
        return GuardPass("block_path_patterns")
    if ctx.settings.allow_dev_refresh:
        for pattern in matched:
            logger.warning("ALLOW_DEV_REFRESH set; ignoring blocked path pattern '%s'", pattern)
        return GuardOverridden("block_path_patterns", f"path matches: {', '.join(matched)}")
    return GuardBlock("block_path_patterns", BlockedByPath(matched[0], root_str))


def check_required_markers(ctx: GuardContext) -> GuardResult:
    """Require at least one deployment marker when the list is non-empty."""
    required = ctx.settings.require_markers
    if not required:
        return GuardPass("require_markers")
    root = ctx.state.root
    assert root is not None
    if any(_at_root(root, m).exists() for m in required):
        return GuardPass("require_markers")
    return _block_or_override(
        "require_markers",
        MissingRequiredMarker(required, str(root)),
        ctx.settings.allow_dev_refresh,
    )


def check_remote(ctx: GuardContext) -> GuardResult:
    """``origin`` must exist and, if requested, point at the required host."""
    url = ctx.state.origin_url
    if not url:
        return GuardBlock("remote", NoOriginRemote())
    host = ctx.settings.require_remote_host
    if host and host not in url:
        return GuardBlock("remote", RemoteHostMismatch(url, host))
    return GuardPass("remote")


GUARD_CHAIN: tuple[Guard, ...] = (
    check_working_tree,
    check_block_markers,
    check_path_patterns,
    check_required_markers,
    check_remote,
)


def evaluate_guards(ctx: GuardContext, chain: Sequence[Guard] = GUARD_CHAIN) -> list[GuardResult]:
    """Run *chain* in order, stopping after the first :class:`GuardBlock`."""
    results: list[GuardResult] = []
    for guard in chain:
        result = guard(ctx)
        results.append(result)
        if isinstance(result, GuardBlock):
            logger.debug("Guard %s blocked: %s", result.guard, result.reason)
            break
    return results


def first_block(results: Sequence[GuardResult]) -> GuardBlock | None:
    """Return the blocking result, if any."""
    for result in results:
        if isinstance(result, GuardBlock):
            return result
    return None
