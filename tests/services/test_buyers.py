"""Tests for BuyerService."""

from __future__ import annotations

import asyncio

from standctl.infrastructure.directory import RequestContext
from standctl.services.buyers import BuyerService
from tests.conftest import FakeStandDirectory


class TestCreateBuyer:
    def test_creates(self, directory: FakeStandDirectory, ctx: RequestContext) -> None:
        result = asyncio.run(
            BuyerService(directory, ctx).create_buyer(
                first_name="Ada",
                last_name="Lovelace",
                email="ada@example.com",
                phone_number="077",
                password="s3cret",
            )
        )
        assert result.ok
        assert result.data["name"] == "Ada Lovelace"
        assert result.data["message"] == "Ada Lovelace was added successfully."
        assert directory.payloads[-1]["password"] == "s3cret"

    def test_validation(self, directory: FakeStandDirectory, ctx: RequestContext) -> None:
        result = asyncio.run(
            BuyerService(directory, ctx).create_buyer(
                first_name="Ada",
                last_name="",
                email="ada@example.com",
                phone_number="077",
                password="",
            )
        )
        assert result.error is not None
        assert result.error.detail == {"fields": ["lastName", "password"]}
        assert directory.calls == []
