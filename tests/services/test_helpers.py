"""Tests for shared service helpers."""

from __future__ import annotations

import asyncio
import logging

import pytest

from standctl.domain.errors import TransientFetchError
from standctl.services._helpers import dump_models, fetch_or_default, plural
from tests.conftest import make_stand


async def _ok() -> list[str]:
    return ["a"]


async def _boom() -> list[str]:
    raise TransientFetchError("GET /stands/s1/buyers: timed out")


class TestFetchOrDefault:
    def test_returns_value(self) -> None:
        assert asyncio.run(fetch_or_default(_ok(), [], label="buyers")) == ["a"]

    def test_failure_returns_default_and_records_label(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        failures: list[str] = []
        with caplog.at_level(logging.WARNING, logger="standctl.services._helpers"):
            value = asyncio.run(
                fetch_or_default(_boom(), [], label="buyers:s1", failures=failures)
            )
        assert value == []
        assert failures == ["buyers:s1"]
        assert "buyers:s1" in caplog.text

    def test_failure_without_collector(self) -> None:
        assert asyncio.run(fetch_or_default(_boom(), ["fallback"], label="x")) == ["fallback"]


class TestPlural:
    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, "0 stands"), (1, "1 stand"), (2, "2 stands")],
    )
    def test_plural(self, count: int, expected: str) -> None:
        assert plural(count, "stand") == expected


class TestDumpModels:
    def test_uses_aliases(self) -> None:
        dumped = dump_models([make_stand("s1")])
        assert dumped[0]["standNumber"] == "S1"
        assert "stand_number" not in dumped[0]
