"""Command: refresh a deployed working tree from its origin remote."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from pydantic import ValidationError

from appctl.commands._base import AppCommand

if TYPE_CHECKING:
    from appctl.commands._context import AppContext
    from appctl.services.refresh import RefreshPlan

CONFIRM_PROMPT = "Enter Y to continue, any other key to abort"


def confirm_refresh(plan: RefreshPlan) -> bool:
    """Show what is about to happen and ask for a single Y/y."""
    click.echo(
        f"Project {plan.project} (v{plan.version}): "
        f"Starting refresh from branch '{plan.branch}'",
        err=True,
    )
    if plan.service:
        click.echo(f"The {plan.service} service will be stopped during this process.", err=True)
    answer = click.prompt(CONFIRM_PROMPT, default="", show_default=False, err=True)
    return answer.strip() in ("Y", "y")


@click.command(
    cls=AppCommand,
    examples="""\
  appctl refresh
  appctl refresh --branch release --yes
  appctl refresh --require-markers .deployment --require-remote-host github.com
  BLOCK_PATH_PATTERNS=Development:sandbox appctl refresh
  appctl refresh --stash-before-refresh 0 --service myapp.service""",
)
@click.option("--branch", default=None, help="Branch to reset to (env BRANCH; default main).")
@click.option(
    "--allow-dev-refresh",
    is_flag=True,
    help="Override marker, path-pattern and required-marker guards (env ALLOW_DEV_REFRESH).",
)
@click.option(
    "--block-markers",
    default=None,
    metavar="LIST",
    help="Colon list of repo-root files/dirs that block the refresh (env BLOCK_MARKERS).",
)
@click.option(
    "--require-markers",
    default=None,
    metavar="LIST",
    help="Colon list; at least one must exist at the repo root (env REQUIRE_MARKERS).",
)
@click.option(
    "--block-path-patterns",
    default=None,
    metavar="LIST",
    help="Colon list of substrings that block when found in the repo path "
    "(env BLOCK_PATH_PATTERNS).",
)
@click.option(
    "--require-remote-host",
    default=None,
    metavar="HOST",
    help="Require the origin URL to contain HOST (env REQUIRE_REMOTE_HOST).",
)
@click.option(
    "--stash-before-refresh",
    type=click.Choice(["0", "1"]),
    default=None,
    help="Stash tracked changes first (env STASH_BEFORE_REFRESH; default 1).",
)
@click.option("--service", default=None, help="Service to stop (default: manifest service_name).")
@click.option("-y", "--yes", is_flag=True, help="Non-interactive: skip the confirmation prompt.")
@click.pass_obj
def refresh(
    app: AppContext,
    branch: str | None,
    allow_dev_refresh: bool,
    block_markers: str | None,
    require_markers: str | None,
    block_path_patterns: str | None,
    require_remote_host: str | None,
    stash_before_refresh: str | None,
    service: str | None,
    yes: bool,
) -> None:
    """Hard-reset the working tree to origin/<branch> and resync dependencies.

    Only for deployed clones: dev markers and blocked paths stop the run
    unless --allow-dev-refresh is given.
    """
    from appctl.config.settings import RefreshSettings
    from appctl.services.refresh import RefreshService

    try:
        settings = RefreshSettings.from_cli(
            branch=branch,
            allow_dev_refresh=allow_dev_refresh or None,
            block_markers=block_markers,
            require_markers=require_markers,
            block_path_patterns=block_path_patterns,
            require_remote_host=require_remote_host,
            stash_before_refresh=stash_before_refresh,
            service=service,
            non_interactive=yes or None,
        )
    except ValidationError as exc:
        raise click.ClickException(f"Invalid refresh configuration:\n{exc}") from exc

    app.emit(RefreshService(app.settings, settings).run(confirm=confirm_refresh))
