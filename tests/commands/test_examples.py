"""Tests for --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from appctl.cli import cli
from appctl.commands._base import AppCommand, AppGroup

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["version", "--examples"], ["appctl -C /opt/myapp version"]),
    (["refresh", "--examples"], ["--require-markers .deployment", "BLOCK_PATH_PATTERNS="]),
    (["service", "--examples"], ["appctl service restart"]),
    (["launch", "--examples"], ["ExecStart="]),
    (["release", "--examples"], ["appctl release 1.4.0"]),
]


@pytest.mark.parametrize(("args", "keywords"), EXAMPLES_COMMANDS)
def test_examples(cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    assert "Examples for" in result.output
    for keyword in keywords:
        assert keyword in result.output


def test_examples_listed_in_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["refresh", "--help"])
    assert result.exit_code == 0
    assert "--examples" in result.output


def test_command_without_examples_has_no_flag() -> None:
    cmd = AppCommand("bare", callback=lambda: None)
    assert [p.name for p in cmd.params if p.name == "examples"] == []


def test_root_group_builds_app_commands() -> None:
    assert AppGroup.command_class is AppCommand
