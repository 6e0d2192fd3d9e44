"""AllocationCoordinator — stand sale transitions and link reconciliation.

Pipeline per transition: GUARD → SUBMIT → APPLY → RECONCILE → RESPOND

INVARIANT: Local state changes only after the directory acknowledges a
transition. A failed or refused transition leaves the stand copy and
the link cache exactly as they were.

INVARIANT: At most one transition per stand is in flight from this
coordinator. A second submission is refused locally without a call.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, TypeVar

from standctl.domain.errors import StandctlError, TransitionError, ValidationError
from standctl.domain.forms import build_stand_buyer_payload
from standctl.domain.lifecycle import StandStatus
from standctl.domain.models import (
    Buyer,
    LinksAbsent,
    LinksPresent,
    Stand,
    StandBuyerLink,
    StatusUpdateOutcome,
    StatusUpdateRequest,
)
from standctl.domain.roster import resolve_link_buyer, roster_lookup
from standctl.services._helpers import dump_models, fetch_or_default
from standctl.services.base import BaseService
from standctl.services.result import ServiceResult
from standctl.services.telemetry import traced

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RELEASE_REASON = "Released via dashboard"


@dataclass
class StandState:
    """Client-side view of one stand: the stand copy, buyers, and link cache."""

    stand: Stand | None = None
    buyers: list[Buyer] = field(default_factory=list)
    links: list[StandBuyerLink] = field(default_factory=list)
    submitting: bool = False


class AllocationCoordinator(BaseService):
    """Applies sale/release transitions to stands and keeps local state in sync.

    One coordinator instance owns the state of every stand it has touched;
    share it between callers that must observe each other's in-flight flag.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._states: dict[str, StandState] = {}

    def state(self, stand_id: str) -> StandState:
        """Local state for *stand_id* (created empty on first access)."""
        return self._states.setdefault(stand_id, StandState())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @traced
    async def load(self, stand_id: str) -> ServiceResult:
        """Fetch the stand, its buyers, and its links into local state."""
        op = "stand_state"
        state = self.state(stand_id)
        try:
            state.stand = await self._directory.get_stand(self._ctx, stand_id)
        except StandctlError as exc:
            return self._failure(op, exc)

        warnings = await self._refresh(stand_id, state)
        data = self._snapshot(stand_id, state)
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @traced
    async def sell_with_buyer(
        self,
        stand_id: str,
        buyer_user_id: str,
        *,
        note: str | None = None,
    ) -> ServiceResult:
        """Mark the stand sold to a buyer account.

        On acknowledgement the stand's status is overwritten with the
        returned status. Links come from the response when it carries
        them; otherwise the link list is reloaded.
        """
        op = "sell_stand"
        try:
            buyer_user_id = (buyer_user_id or "").strip()
            if not buyer_user_id:
                raise ValidationError(
                    "Select a valid buyer user to link and sell this stand.",
                    fields=["buyerUserId"],
                )
            request = StatusUpdateRequest(
                status=StandStatus.SOLD,
                buyer_user_id=buyer_user_id,
                allocation_note=(note or "").strip() or None,
            )
            async with self._in_flight(stand_id) as state:
                outcome = await self._submit(
                    self._directory.update_stand_status(self._ctx, stand_id, request),
                    f"Unable to sell stand {stand_id}",
                )
                warnings, links_source = await self._apply(stand_id, state, outcome)
        except StandctlError as exc:
            return self._failure(op, exc)

        data = self._snapshot(stand_id, state)
        data["buyer_user_id"] = buyer_user_id
        data["status"] = outcome.status
        data["links_source"] = links_source
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    @traced
    async def release_link(self, stand_id: str, link_id: str, *, reason: str = "") -> ServiceResult:
        """Release a buyer link, then refresh buyers and links."""
        op = "release_link"
        try:
            link_id = (link_id or "").strip()
            if not link_id:
                raise ValidationError("A link id is required.", fields=["linkId"])
            reason = reason.strip() or DEFAULT_RELEASE_REASON
            async with self._in_flight(stand_id) as state:
                await self._submit(
                    self._directory.release_stand_buyer_link(
                        self._ctx, stand_id, link_id, reason=reason
                    ),
                    f"Unable to release link {link_id}",
                )
                warnings = await self._refresh(stand_id, state)
        except StandctlError as exc:
            return self._failure(op, exc)

        data = self._snapshot(stand_id, state)
        data["link_id"] = link_id
        data["reason"] = reason
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    @traced
    async def link_buyer_user(
        self,
        stand_id: str,
        buyer_user_id: str,
        *,
        notes: str | None = None,
    ) -> ServiceResult:
        """Link a buyer account to the stand without changing its status."""
        op = "link_buyer"
        try:
            buyer_user_id = (buyer_user_id or "").strip()
            if not buyer_user_id:
                raise ValidationError("A buyer user id is required.", fields=["buyerUserId"])
            payload: dict[str, Any] = {"buyerUserId": buyer_user_id}
            if notes and notes.strip():
                payload["notes"] = notes.strip()
            async with self._in_flight(stand_id) as state:
                link = await self._submit(
                    self._directory.link_buyer_user_to_stand(self._ctx, stand_id, payload),
                    f"Unable to link buyer user {buyer_user_id}",
                )
                state.links = [*state.links, link]
        except StandctlError as exc:
            return self._failure(op, exc)

        data = self._snapshot(stand_id, state)
        data["id"] = link.id
        return ServiceResult(ok=True, op=op, data=data)

    @traced
    async def add_buyer(self, stand_id: str, **form: Any) -> ServiceResult:
        """Create a buyer directly on the stand, then refresh its buyer list.

        Accepts the add-buyer form fields of
        :func:`~standctl.domain.forms.build_stand_buyer_payload`.
        """
        op = "add_buyer"
        try:
            payload = build_stand_buyer_payload(**form)
            buyer = await self._directory.add_buyer_to_stand(self._ctx, stand_id, payload)
        except StandctlError as exc:
            return self._failure(op, exc)

        state = self.state(stand_id)
        state.buyers = await fetch_or_default(
            self._directory.list_stand_buyers(self._ctx, stand_id),
            state.buyers,
            label=f"buyers of stand {stand_id}",
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": buyer.id,
                "stand_id": stand_id,
                "name": buyer.display_name,
                "buyers": dump_models(state.buyers),
            },
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _in_flight(self, stand_id: str) -> AsyncIterator[StandState]:
        state = self.state(stand_id)
        if state.submitting:
            raise TransitionError(
                f"A change to stand {stand_id} is already being submitted.",
                code="TRANSITION_IN_FLIGHT",
            )
        state.submitting = True
        try:
            yield state
        finally:
            state.submitting = False

    @staticmethod
    async def _submit(call: Awaitable[T], failure_message: str) -> T:
        """Await a directory write; any failure becomes a retryable TransitionError."""
        try:
            return await call
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            reason = exc.message if isinstance(exc, StandctlError) else str(exc)
            raise TransitionError(f"{failure_message}: {reason}") from exc

    async def _apply(
        self, stand_id: str, state: StandState, outcome: StatusUpdateOutcome
    ) -> tuple[list[str], str]:
        if state.stand is not None:
            state.stand = state.stand.model_copy(update={"status": outcome.status})
        else:
            logger.debug("Stand %s not loaded; status %s not cached", stand_id, outcome.status)

        failures: list[str] = []
        match outcome.links:
            case LinksPresent(links=links):
                state.links = list(links)
                source = "response"
            case LinksAbsent():
                state.links = await fetch_or_default(
                    self._directory.list_stand_buyer_links(self._ctx, stand_id),
                    [],
                    label=f"buyer links of stand {stand_id}",
                    failures=failures,
                )
                source = "reloaded"

        state.buyers = await fetch_or_default(
            self._directory.list_stand_buyers(self._ctx, stand_id),
            [],
            label=f"buyers of stand {stand_id}",
            failures=failures,
        )
        warnings = [f"Could not load {label}; treated as empty" for label in failures]
        return warnings, source

    async def _refresh(self, stand_id: str, state: StandState) -> list[str]:
        failures: list[str] = []
        state.buyers, state.links = await asyncio.gather(
            fetch_or_default(
                self._directory.list_stand_buyers(self._ctx, stand_id),
                [],
                label=f"buyers of stand {stand_id}",
                failures=failures,
            ),
            fetch_or_default(
                self._directory.list_stand_buyer_links(self._ctx, stand_id),
                [],
                label=f"buyer links of stand {stand_id}",
                failures=failures,
            ),
        )
        return [f"Could not load {label}; treated as empty" for label in failures]

    @staticmethod
    def _snapshot(stand_id: str, state: StandState) -> dict[str, Any]:
        lookup = roster_lookup(state.buyers)
        links: list[dict[str, Any]] = []
        for link in state.links:
            row = link.model_dump(mode="json", by_alias=True, exclude={"buyer"})
            buyer = resolve_link_buyer(link, lookup)
            row["buyerName"] = buyer.display_name if buyer is not None else None
            links.append(row)
        return {
            "stand_id": stand_id,
            "status": state.stand.status if state.stand is not None else None,
            "stand": state.stand.model_dump(mode="json", by_alias=True) if state.stand else None,
            "buyers": dump_models(state.buyers),
            "links": links,
        }
