"""Command: test, bump, commit, tag and push a new release."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from appctl.commands._base import AppCommand

if TYPE_CHECKING:
    from appctl.commands._context import AppContext
    from appctl.services.release import ReleasePlan


def confirm_release(plan: ReleasePlan) -> bool:
    click.echo(f"Current version: {plan.current_version}", err=True)
    click.echo(f"New version:     {plan.new_version}", err=True)
    click.echo(f"Comment:         {plan.comment}", err=True)
    answer = click.prompt(
        "\nEnter Y to continue, any other key to abort",
        default="",
        show_default=False,
        err=True,
    )
    return answer.strip() in ("Y", "y")


@click.command(
    cls=AppCommand,
    examples="""\
  appctl release 1.4.0 "Add MQTT support"
  appctl release 1.4.1 "Fix reconnect loop" --yes
  appctl release 2.0.0 "Major rewrite" --branch trunk""",
)
@click.argument("new_version")
@click.argument("comment")
@click.option("--branch", default="main", show_default=True, help="Branch to push.")
@click.option("-y", "--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def release(app: AppContext, new_version: str, comment: str, branch: str, yes: bool) -> None:
    """Run tests and docs, bump the manifest version, commit, tag and push."""
    from appctl.services.release import ReleaseService

    app.emit(
        ReleaseService(app.settings).release(
            new_version,
            comment,
            branch=branch,
            confirm=None if yes else confirm_release,
        )
    )
