"""The Stand Directory Service contract.

Every collaborator call receives an explicit :class:`RequestContext`
carrying the bearer credential; nothing is read from ambient state.
Implementations raise :class:`~standctl.domain.errors.TransientFetchError`
for failed reads and :class:`~standctl.domain.errors.DirectoryError` for
failed writes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from standctl.domain.models import (
    Buyer,
    Stand,
    StandBuyerLink,
    StandCreationRecord,
    StatusUpdateOutcome,
    StatusUpdateRequest,
)


@dataclass(frozen=True)
class RequestContext:
    """Per-request credentials supplied by the caller's auth collaborator."""

    token: str | None = field(default=None, repr=False)

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


class StandDirectory(Protocol):
    """Async interface to the remote stand store."""

    async def list_stands(self, ctx: RequestContext) -> list[Stand]: ...

    async def get_stand(self, ctx: RequestContext, stand_id: str) -> Stand: ...

    async def create_stand(self, ctx: RequestContext, record: StandCreationRecord) -> Stand: ...

    async def bulk_create_stands(
        self, ctx: RequestContext, records: list[StandCreationRecord]
    ) -> dict[str, Any]: ...

    async def update_stand_status(
        self, ctx: RequestContext, stand_id: str, request: StatusUpdateRequest
    ) -> StatusUpdateOutcome: ...

    async def list_stand_buyers(self, ctx: RequestContext, stand_id: str) -> list[Buyer]: ...

    async def list_stand_buyer_links(
        self, ctx: RequestContext, stand_id: str
    ) -> list[StandBuyerLink]: ...

    async def link_buyer_user_to_stand(
        self, ctx: RequestContext, stand_id: str, payload: dict[str, Any]
    ) -> StandBuyerLink: ...

    async def release_stand_buyer_link(
        self, ctx: RequestContext, stand_id: str, link_id: str, *, reason: str
    ) -> dict[str, Any]: ...

    async def add_buyer_to_stand(
        self, ctx: RequestContext, stand_id: str, payload: dict[str, Any]
    ) -> Buyer: ...

    async def create_buyer(
        self, ctx: RequestContext, payload: dict[str, Any]
    ) -> dict[str, Any]: ...
