"""Domain errors and the exit codes calling automation branches on.

Every failure raised below the service layer is an :class:`AppctlError`.
Services catch it at their boundary and convert it into a failed
``ServiceResult``; the CLI context turns that into the process exit code.
"""

from __future__ import annotations

from typing import Any

# --- Exit codes ---

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_NOT_A_REPO = 3
EXIT_NO_ORIGIN = 4
EXIT_REMOTE_MISMATCH = 5
EXIT_BRANCH_NOT_FOUND = 6
EXIT_BLOCKED_BY_MARKER = 99
EXIT_BLOCKED_BY_PATH = 100
EXIT_MISSING_REQUIRED_MARKER = 101


class AppctlError(Exception):
    """Base class for all appctl failures.

    Attributes:
        code: Stable machine-readable error code.
        exit_code: Process exit code for this failure.
        detail: Extra structured context for JSON output.
    """

    code = "ERROR"
    exit_code = EXIT_ERROR

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


# --- Configuration errors ---


class ConfigMissing(AppctlError):
    code = "CONFIG_MISSING"

    def __init__(self, path: str) -> None:
        super().__init__(f"{path} not found.", path=path)


class FieldMissing(AppctlError):
    code = "FIELD_MISSING"

    def __init__(self, field: str, path: str) -> None:
        super().__init__(f"{field} not defined in {path}.", field=field, path=path)


# --- Environment validity (never overridable) ---


class NotAGitRepo(AppctlError):
    code = "NOT_A_GIT_REPO"
    exit_code = EXIT_NOT_A_REPO

    def __init__(self) -> None:
        super().__init__("Not inside a git working tree.")


class NoOriginRemote(AppctlError):
    code = "NO_ORIGIN_REMOTE"
    exit_code = EXIT_NO_ORIGIN

    def __init__(self) -> None:
        super().__init__("No 'origin' remote configured.")


class RemoteHostMismatch(AppctlError):
    code = "REMOTE_HOST_MISMATCH"
    exit_code = EXIT_REMOTE_MISMATCH

    def __init__(self, url: str, host: str) -> None:
        super().__init__(
            f"origin remote ('{url}') does not match required host '{host}'.",
            url=url,
            host=host,
        )


# --- Guard blocks (overridable with --allow-dev-refresh) ---


class BlockedByMarker(AppctlError):
    code = "BLOCKED_BY_MARKER"
    exit_code = EXIT_BLOCKED_BY_MARKER

    def __init__(self, marker: str, root: str) -> None:
        super().__init__(
            f"Refusing to run: dev marker '{marker}' found at repo root ({root}). "
            "Set ALLOW_DEV_REFRESH=1 to override (not recommended).",
            marker=marker,
            root=root,
        )


class BlockedByPath(AppctlError):
    code = "BLOCKED_BY_PATH"
    exit_code = EXIT_BLOCKED_BY_PATH

    def __init__(self, pattern: str, root: str) -> None:
        super().__init__(
            f"Refusing to run: repo path '{root}' matches blocked pattern '{pattern}'.",
            pattern=pattern,
            root=root,
        )


class MissingRequiredMarker(AppctlError):
    code = "MISSING_REQUIRED_MARKER"
    exit_code = EXIT_MISSING_REQUIRED_MARKER

    def __init__(self, markers: tuple[str, ...], root: str) -> None:
        listed = ":".join(markers)
        super().__init__(
            f"Refusing to run: none of the required markers ({listed}) found at "
            f"repo root ({root}). Create one of them in deployment clones, or set "
            "ALLOW_DEV_REFRESH=1 to override.",
            markers=list(markers),
            root=root,
        )


# --- Refresh engine failures ---


class BranchNotFound(AppctlError):
    code = "BRANCH_NOT_FOUND"
    exit_code = EXIT_BRANCH_NOT_FOUND

    def __init__(self, branch: str) -> None:
        super().__init__(
            f"Branch '{branch}' exists neither locally nor on origin.", branch=branch
        )


class ServiceStillActive(AppctlError):
    code = "SERVICE_STILL_ACTIVE"

    def __init__(self, service: str) -> None:
        super().__init__(
            f"Service '{service}' is still running after stop command.", service=service
        )


class FetchFailed(AppctlError):
    code = "FETCH_FAILED"

    def __init__(self, branch: str, stderr: str = "") -> None:
        super().__init__(f"Fetching '{branch}' from origin failed. {stderr}".strip(), branch=branch)


class SyncerNotFound(AppctlError):
    code = "SYNCER_NOT_FOUND"

    def __init__(self, searched: list[str]) -> None:
        super().__init__(
            f"'uv' not found in PATH or at {searched[-1]}", searched=searched
        )


class DependencySyncFailed(AppctlError):
    code = "DEPENDENCY_SYNC_FAILED"

    def __init__(self, stderr: str) -> None:
        super().__init__(f"'uv sync' failed: {stderr}".rstrip(), stderr=stderr)


class CommandFailed(AppctlError):
    """An external command exited non-zero or could not be started."""

    code = "COMMAND_FAILED"

    def __init__(self, args: list[str], stderr: str = "", returncode: int | None = None) -> None:
        cmd = " ".join(args)
        msg = f"'{cmd}' failed"
        if returncode is not None:
            msg += f" ({returncode})"
        if stderr:
            msg += f": {stderr.strip()}"
        super().__init__(msg, command=args, returncode=returncode)
        self.stderr = stderr
        self.returncode = returncode


class ReleaseError(AppctlError):
    code = "RELEASE_FAILED"
