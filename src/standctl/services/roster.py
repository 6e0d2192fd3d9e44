"""RosterService — the deduplicated, cross-stand buyer roster.

Pipeline: LIST STANDS → FAN OUT → JOIN → MERGE → RESPOND

Each stand contributes two independent reads (direct buyers and buyer
links). All of them run concurrently and the merge only starts once
every read has settled. A failed read contributes an empty list.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from standctl.domain.errors import StandctlError
from standctl.domain.models import RosterEntry, Stand
from standctl.domain.roster import StandContribution, merge_roster
from standctl.services._helpers import dump_models, fetch_or_default
from standctl.services.base import BaseService
from standctl.services.result import ServiceResult
from standctl.services.telemetry import get_current_span, trace_span, traced


class RosterService(BaseService):
    """Aggregates buyers across stands."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    async def roster(self, *, stand_ids: Sequence[str] | None = None) -> ServiceResult:
        """List stands, then aggregate their buyers into one roster.

        Args:
            stand_ids: Restrict aggregation to these stands. Unknown ids
                produce a warning.
        """
        op = "roster"
        warnings: list[str] = []

        try:
            stands = await self._directory.list_stands(self._ctx)
        except StandctlError as exc:
            return self._failure(op, exc)

        if stand_ids:
            wanted = list(dict.fromkeys(stand_ids))
            known = {stand.id for stand in stands}
            warnings.extend(f"Unknown stand: {sid}" for sid in wanted if sid not in known)
            stands = [stand for stand in stands if stand.id in wanted]

        failures: list[str] = []
        entries = await self.aggregate_buyers(stands, failures=failures)
        warnings.extend(f"Could not load {label}; treated as empty" for label in failures)

        span = get_current_span()
        if span is not None:
            span.annotate("stands", len(stands))
            span.annotate("failed_fetches", len(failures))

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "count": len(entries),
                "stand_count": len(stands),
                "degraded": len(failures),
                "items": dump_models(entries),
            },
            warnings=warnings,
        )

    async def aggregate_buyers(
        self,
        stands: Sequence[Stand],
        *,
        failures: list[str] | None = None,
    ) -> list[RosterEntry]:
        """Merge every stand's direct buyers and link buyers.

        Returns ``[]`` without any directory call when *stands* is empty.
        Failed reads are appended to *failures* (when given) by label.
        """
        if not stands:
            return []
        contributions = await asyncio.gather(
            *(self._contribution(stand.id, failures) for stand in stands)
        )
        return merge_roster(contributions)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _contribution(self, stand_id: str, failures: list[str] | None) -> StandContribution:
        with trace_span(f"stand:{stand_id}"):
            buyers, links = await asyncio.gather(
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
        return StandContribution(stand_id=stand_id, buyers=buyers, links=links)
