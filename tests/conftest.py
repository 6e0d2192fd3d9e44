"""Shared pytest fixtures and test helpers for standctl tests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Generator
from typing import Any

import pytest
from click.testing import CliRunner

from standctl.domain.errors import TransientFetchError
from standctl.domain.models import (
    Buyer,
    Stand,
    StandBuyerLink,
    StandCreationRecord,
    StatusUpdateOutcome,
    StatusUpdateRequest,
)
from standctl.infrastructure.directory import RequestContext
from standctl.services.telemetry import _current_span, disable_telemetry

# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_stand(stand_id: str, **kwargs: Any) -> Stand:
    fields: dict[str, Any] = {
        "id": stand_id,
        "name": f"Stand {stand_id}",
        "stand_number": stand_id.upper(),
        "type": "residential",
        "price": 1000.0,
        "size": 300.0,
        "location": "North",
        "status": "available",
    }
    fields.update(kwargs)
    return Stand(**fields)


def make_buyer(buyer_id: str | None, first: str = "", last: str = "", **kwargs: Any) -> Buyer:
    return Buyer(id=buyer_id, first_name=first, last_name=last, **kwargs)


def make_link(link_id: str, stand_id: str, buyer: Buyer | None = None, **kwargs: Any) -> Any:
    fields: dict[str, Any] = {"id": link_id, "stand_id": stand_id, "buyer": buyer}
    if buyer is not None and "buyer_user_id" not in kwargs and "buyer_id" not in kwargs:
        fields["buyer_user_id"] = buyer.id
    fields.update(kwargs)
    return StandBuyerLink(**fields)


# ---------------------------------------------------------------------------
# In-memory directory
# ---------------------------------------------------------------------------


class FakeStandDirectory:
    """In-memory StandDirectory that records every call.

    ``fail`` maps ``"method"`` or ``"method:stand_id"`` to an exception to
    raise. ``status_responses`` maps a stand id to the raw payload that
    ``update_stand_status`` should acknowledge with. ``hold`` (when set)
    blocks writes until the event fires.
    """

    def __init__(self) -> None:
        self.stands: dict[str, Stand] = {}
        self.buyers: dict[str, list[Buyer]] = {}
        self.links: dict[str, list[StandBuyerLink]] = {}
        self.calls: list[tuple[str, str | None]] = []
        self.contexts: list[RequestContext] = []
        self.fail: dict[str, Exception] = {}
        self.status_responses: dict[str, Any] = {}
        self.status_requests: list[StatusUpdateRequest] = []
        self.bulk_batches: list[list[StandCreationRecord]] = []
        self.payloads: list[dict[str, Any]] = []
        self.hold: asyncio.Event | None = None
        self.active_reads = 0
        self.peak_reads = 0
        self._seq = 0

    # -- seeding --------------------------------------------------------

    def add_stand(
        self,
        stand: Stand,
        *,
        buyers: list[Buyer] | None = None,
        links: list[StandBuyerLink] | None = None,
    ) -> Stand:
        self.stands[stand.id] = stand
        self.buyers[stand.id] = list(buyers or [])
        self.links[stand.id] = list(links or [])
        return stand

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    # -- internals ------------------------------------------------------

    def _record(self, method: str, ctx: RequestContext, stand_id: str | None = None) -> None:
        self.calls.append((method, stand_id))
        self.contexts.append(ctx)
        exc = self.fail.get(f"{method}:{stand_id}") or self.fail.get(method)
        if exc is not None:
            raise exc

    def _next_id(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}_{self._seq}"

    async def _read(self) -> None:
        self.active_reads += 1
        self.peak_reads = max(self.peak_reads, self.active_reads)
        try:
            await asyncio.sleep(0)
        finally:
            self.active_reads -= 1

    async def _write(self) -> None:
        if self.hold is not None:
            await self.hold.wait()

    # -- StandDirectory -------------------------------------------------

    async def list_stands(self, ctx: RequestContext) -> list[Stand]:
        self._record("list_stands", ctx)
        await self._read()
        return list(self.stands.values())

    async def get_stand(self, ctx: RequestContext, stand_id: str) -> Stand:
        self._record("get_stand", ctx, stand_id)
        await self._read()
        if stand_id not in self.stands:
            raise TransientFetchError(f"GET /stands/{stand_id}: Not found", status_code=404)
        return self.stands[stand_id]

    async def create_stand(self, ctx: RequestContext, record: StandCreationRecord) -> Stand:
        self._record("create_stand", ctx)
        await self._write()
        stand = Stand(id=self._next_id("st"), **record.model_dump(exclude_none=True))
        self.add_stand(stand)
        return stand

    async def bulk_create_stands(
        self, ctx: RequestContext, records: list[StandCreationRecord]
    ) -> dict[str, Any]:
        self._record("bulk_create_stands", ctx)
        await self._write()
        self.bulk_batches.append(list(records))
        return {"created": len(records)}

    async def update_stand_status(
        self, ctx: RequestContext, stand_id: str, request: StatusUpdateRequest
    ) -> StatusUpdateOutcome:
        self._record("update_stand_status", ctx, stand_id)
        await self._write()
        self.status_requests.append(request)
        payload = self.status_responses.get(stand_id, {"status": request.status})
        return StatusUpdateOutcome.from_payload(payload, requested_status=request.status)

    async def list_stand_buyers(self, ctx: RequestContext, stand_id: str) -> list[Buyer]:
        self._record("list_stand_buyers", ctx, stand_id)
        await self._read()
        return list(self.buyers.get(stand_id, []))

    async def list_stand_buyer_links(
        self, ctx: RequestContext, stand_id: str
    ) -> list[StandBuyerLink]:
        self._record("list_stand_buyer_links", ctx, stand_id)
        await self._read()
        return list(self.links.get(stand_id, []))

    async def link_buyer_user_to_stand(
        self, ctx: RequestContext, stand_id: str, payload: dict[str, Any]
    ) -> StandBuyerLink:
        self._record("link_buyer_user_to_stand", ctx, stand_id)
        await self._write()
        self.payloads.append(payload)
        link = StandBuyerLink(
            id=self._next_id("lnk"),
            stand_id=stand_id,
            buyer_user_id=payload["buyerUserId"],
        )
        self.links.setdefault(stand_id, []).append(link)
        return link

    async def release_stand_buyer_link(
        self, ctx: RequestContext, stand_id: str, link_id: str, *, reason: str
    ) -> dict[str, Any]:
        self._record("release_stand_buyer_link", ctx, stand_id)
        await self._write()
        self.payloads.append({"linkId": link_id, "reason": reason})
        released = {"released_at": "2026-01-01T00:00:00Z", "release_reason": reason}
        self.links[stand_id] = [
            link.model_copy(update=released)
            if link.id == link_id
            else link
            for link in self.links.get(stand_id, [])
        ]
        return {"id": link_id}

    async def add_buyer_to_stand(
        self, ctx: RequestContext, stand_id: str, payload: dict[str, Any]
    ) -> Buyer:
        self._record("add_buyer_to_stand", ctx, stand_id)
        await self._write()
        self.payloads.append(payload)
        first, _, last = payload["fullName"].partition(" ")
        buyer = Buyer(
            id=self._next_id("byr"),
            first_name=first,
            last_name=last,
            email=payload["email"],
            phone_number=payload["phoneNumber"],
        )
        self.buyers.setdefault(stand_id, []).append(buyer)
        return buyer

    async def create_buyer(self, ctx: RequestContext, payload: dict[str, Any]) -> dict[str, Any]:
        self._record("create_buyer", ctx)
        await self._write()
        self.payloads.append(payload)
        return {
            "id": self._next_id("usr"),
            "firstName": payload["firstName"],
            "lastName": payload["lastName"],
            "email": payload["email"],
        }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_ambient_state() -> Generator[None]:
    """Undo logging and telemetry changes made by CLI invocations."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    app_logger = logging.getLogger("standctl")
    app_level = app_logger.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    app_logger.setLevel(app_level)
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def directory() -> FakeStandDirectory:
    return FakeStandDirectory()


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(token="test-token")


@pytest.fixture
def cli_directory(
    directory: FakeStandDirectory,
    tmp_path: Any,
    monkeypatch: pytest.MonkeyPatch,
) -> FakeStandDirectory:
    """Route the CLI's directory client to the in-memory fake.

    Also isolates config discovery and STANDCTL_* env vars.
    """
    import standctl.infrastructure.http as http

    for name in ("STANDCTL_CONFIG", "STANDCTL_TOKEN", "STANDCTL_JSON_OUTPUT", "STANDCTL_QUIET"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(http, "HttpStandDirectory", lambda *args, **kwargs: directory)
    return directory
