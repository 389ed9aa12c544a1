"""Command: show the deployed project's version."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from appctl.commands._base import AppCommand

if TYPE_CHECKING:
    from appctl.commands._context import AppContext


@click.command(
    cls=AppCommand,
    examples="""\
  appctl version
  appctl -C /opt/myapp version
  appctl --json version""",
)
@click.pass_obj
def version(app: AppContext) -> None:
    """Show the project name and version from the manifest."""
    from appctl.services.version import VersionService

    app.emit(VersionService(app.settings).show())
