"""Subcommand modules for appctl.

Provides register_commands() which uses deferred imports to keep
``appctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from appctl.commands.launch import launch
    from appctl.commands.refresh import refresh
    from appctl.commands.release import release
    from appctl.commands.service import service
    from appctl.commands.version import version

    cli.add_command(version)
    cli.add_command(refresh)
    cli.add_command(service)
    cli.add_command(launch)
    cli.add_command(release)
