"""Command: start, stop, restart or query the application's service unit."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from appctl.commands._base import AppCommand
from appctl.services.service_control import ACTIONS

if TYPE_CHECKING:
    from appctl.commands._context import AppContext


@click.command(
    cls=AppCommand,
    examples="""\
  appctl service restart
  appctl service status
  appctl --json service stop""",
)
@click.argument("action", type=click.Choice(ACTIONS))
@click.pass_obj
def service(app: AppContext, action: str) -> None:
    """Manage the systemd unit named by the manifest's service_name."""
    from appctl.services.service_control import ServiceControlService

    app.emit(ServiceControlService(app.settings).control(action))
