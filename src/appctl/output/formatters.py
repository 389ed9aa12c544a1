"""Rich/JSON output helpers.

The CLI renders ServiceResult for humans (Rich text) or machines
(--json). ``--quiet`` reduces human output to a single status line.
Renderers are dispatched by ``result.op``; unknown ops fall through to a
generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.text import Text

from appctl.output.console import create_console, get_output, style_for_guard

if TYPE_CHECKING:
    from rich.console import Console

    from appctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return _quiet_line(result)

    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=settings.verbose)
    else:
        _render_error(result, console, verbose=settings.verbose)
    return get_output(console).rstrip("\n")


def _quiet_line(result: ServiceResult) -> str:
    if result.ok:
        return f"OK: {result.op}"
    msg = result.error.message if result.error else "Unknown error"
    return f"ERROR: {result.op} - {msg}"


# ── Renderers ─────────────────────────────────────────────────────────


def _format_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return _json.dumps(value, separators=(",", ":"))
    return str(value)


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "app.ok"), (f"  {result.op}", "app.op")))


def _key_values(console: Console, data: dict[str, Any], *, skip: tuple[str, ...] = ()) -> None:
    for key, value in data.items():
        if key in skip or value is None:
            continue
        console.print(Text.assemble((f"  {key}: ", "app.key"), _format_value(value)))


def _guard_lines(console: Console, guards: list[dict[str, Any]]) -> None:
    for guard in guards:
        outcome = guard.get("outcome", "")
        line = Text("  ")
        line.append(f"{outcome:<10}", style=style_for_guard(outcome))
        line.append(guard.get("guard", ""))
        reason = guard.get("reason")
        if reason:
            line.append(f"  {reason}", style="app.key")
        console.print(line)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    _status_line(console, result)
    _key_values(console, result.data)


def _render_version(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    data = result.data
    console.print(f"Project {data['name']} current version: {data['version']}")


def _render_refresh(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    data = result.data
    if data.get("aborted"):
        console.print("Aborted.")
        return
    _status_line(console, result)
    _key_values(console, data, skip=("guards", "states"))
    states = data.get("states") or []
    if states:
        console.print(Text.assemble(("  states: ", "app.key"), (" → ".join(states), "app.state")))
    if verbose:
        _guard_lines(console, data.get("guards") or [])


def _render_release(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    data = result.data
    if data.get("aborted"):
        console.print("Aborted.")
        return
    console.print(
        f"Release {data['tag']} committed and pushed with comment: {data['comment']}"
    )
    if verbose:
        _key_values(console, data, skip=("comment", "tag"))


def _render_error(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    error = result.error
    msg = error.message if error else "Unknown error"
    console.print(Text.assemble(("ERROR", "app.error"), f"  {result.op}: {msg}"))
    if verbose and error is not None and error.detail:
        _key_values(console, error.detail)
    if verbose:
        states = result.data.get("states") or []
        if states:
            console.print(Text.assemble(("  states: ", "app.key"), " → ".join(states)))
        _guard_lines(console, result.data.get("guards") or [])


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "version": _render_version,
    "refresh": _render_refresh,
    "release": _render_release,
}
