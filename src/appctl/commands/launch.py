"""Command: run the application in the foreground for a process supervisor."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from appctl.commands._base import AppCommand

if TYPE_CHECKING:
    from appctl.commands._context import AppContext


@click.command(
    cls=AppCommand,
    examples="""\
  appctl launch
  appctl launch /opt/myapp

  # systemd unit
  ExecStart=/home/pi/.local/bin/appctl launch /opt/myapp""",
)
@click.argument(
    "home_dir",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.pass_obj
def launch(app: AppContext, home_dir: Path | None) -> None:
    """Sync dependencies, then run the manifest's launch_path with uv.

    SIGINT/SIGTERM stop the app and exit 0 so systemd does not restart it.
    """
    from appctl.services.launch import LaunchService

    settings = app.settings
    if home_dir is not None:
        settings = settings.model_copy(update={"project_dir": home_dir.resolve()})
    app.emit(LaunchService(settings).launch())
