"""Root CLI group for appctl with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from appctl import __version__
from appctl.commands import register_commands
from appctl.commands._base import AppGroup
from appctl.commands._context import AppContext
from appctl.config.settings import AppSettings


@click.group(cls=AppGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="appctl")
@click.option(
    "-C",
    "--project-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Application directory (default: current directory).",
)
@click.option(
    "-m",
    "--manifest",
    "manifest_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Manifest file (default: <project-dir>/pyproject.toml).",
)
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.pass_context
def cli(
    ctx: click.Context,
    project_dir: Path | None,
    manifest_path: Path | None,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
) -> None:
    """appctl — operate a deployed application."""
    settings = AppSettings.from_cli(
        project_dir=project_dir.resolve() if project_dir else None,
        manifest_path=manifest_path,
        json_output=json_output or None,
        quiet=quiet or None,
        verbose=verbose or None,
        log_json=log_json or None,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
