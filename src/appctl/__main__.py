"""Allow ``python -m appctl``."""

from appctl.cli import cli

cli()
