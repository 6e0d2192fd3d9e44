"""Parametrized help tests for all CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from standctl.cli import cli

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    # -- stands group --
    (
        ["stands", "--help"],
        ["list", "get", "available", "create", "show", "sell", "release", "link", "add-buyer"],
    ),
    (["stands", "list", "--help"], ["--status"]),
    (["stands", "get", "--help"], ["STAND_ID"]),
    (["stands", "available", "--help"], []),
    (["stands", "create", "--help"], ["--name", "--number", "--type", "--price", "--size"]),
    (["stands", "show", "--help"], ["STAND_ID"]),
    (["stands", "sell", "--help"], ["STAND_ID", "--buyer-user", "--note"]),
    (["stands", "release", "--help"], ["STAND_ID", "LINK_ID", "--reason"]),
    (["stands", "link", "--help"], ["--buyer-user", "--notes"]),
    (["stands", "add-buyer", "--help"], ["--first-name", "--email", "--phone", "--national-id"]),
    # -- buyers group --
    (["buyers", "--help"], ["roster", "create"]),
    (["buyers", "roster", "--help"], ["--stand"]),
    (["buyers", "create", "--help"], ["--first-name", "--password"]),
    # -- import --
    (["import", "--help"], ["FILE", "--dry-run"]),
]


@pytest.mark.parametrize(
    ("args", "keywords"),
    HELP_COMMANDS,
    ids=[" ".join(args[:-1]) for args, _ in HELP_COMMANDS],
)
def test_help(cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "--examples" in result.output
    for keyword in keywords:
        assert keyword in result.output
