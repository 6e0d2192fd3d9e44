"""Tests for the buyers command group."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from standctl.cli import cli
from standctl.domain.errors import TransientFetchError
from tests.conftest import FakeStandDirectory, make_buyer, make_stand


def _seed(directory: FakeStandDirectory) -> None:
    ada = make_buyer("b1", "Ada", "Lovelace")
    directory.add_stand(make_stand("s1"), buyers=[ada, make_buyer("b2", "Alan", "Turing")])
    directory.add_stand(make_stand("s2"), buyers=[ada])


class TestRoster:
    def test_roster(self, cli_runner: CliRunner, cli_directory: FakeStandDirectory) -> None:
        _seed(cli_directory)
        result = cli_runner.invoke(cli, ["buyers", "roster"])
        assert result.exit_code == 0
        assert "Ada Lovelace" in result.output
        assert "2 buyers across 2 stands" in result.output

    def test_roster_json(self, cli_runner: CliRunner, cli_directory: FakeStandDirectory) -> None:
        _seed(cli_directory)
        result = cli_runner.invoke(cli, ["--json", "buyers", "roster"])
        items = json.loads(result.output)["data"]["items"]
        assert [item["id"] for item in items] == ["b1", "b2"]
        assert items[0]["standIds"] == ["s1", "s2"]

    def test_roster_stand_filter(
        self, cli_runner: CliRunner, cli_directory: FakeStandDirectory
    ) -> None:
        _seed(cli_directory)
        result = cli_runner.invoke(cli, ["-q", "buyers", "roster", "--stand", "s2"])
        assert result.exit_code == 0
        assert result.output.split() == ["b1"]

    def test_degraded_source_still_succeeds(
        self, cli_runner: CliRunner, cli_directory: FakeStandDirectory
    ) -> None:
        _seed(cli_directory)
        cli_directory.fail["list_stand_buyers:s2"] = TransientFetchError("timed out")
        result = cli_runner.invoke(cli, ["buyers", "roster"])
        assert result.exit_code == 0
        assert "1 source(s) could not be loaded" in result.output


class TestCreate:
    def test_create(self, cli_runner: CliRunner, cli_directory: FakeStandDirectory) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "buyers", "create",
                "--first-name", "Ada",
                "--last-name", "Lovelace",
                "--email", "ada@example.com",
                "--phone", "077",
                "--password", "s3cret",
            ],
        )  # fmt: skip
        assert result.exit_code == 0
        assert "Ada Lovelace was added successfully." in result.output

    def test_password_from_env(
        self,
        cli_runner: CliRunner,
        cli_directory: FakeStandDirectory,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("STANDCTL_BUYER_PASSWORD", "from-env")
        result = cli_runner.invoke(
            cli,
            [
                "buyers", "create",
                "--first-name", "Ada",
                "--last-name", "Lovelace",
                "--email", "ada@example.com",
                "--phone", "077",
            ],
        )  # fmt: skip
        assert result.exit_code == 0
        assert cli_directory.payloads[-1]["password"] == "from-env"

    def test_missing_fields(self, cli_runner: CliRunner, cli_directory: FakeStandDirectory) -> None:
        result = cli_runner.invoke(cli, ["buyers", "create", "--first-name", "Ada"])
        assert result.exit_code == 1
        assert "Please complete all required fields." in result.output
        assert cli_directory.calls == []
