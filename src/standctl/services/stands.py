"""StandService — stand listing, lookup, and single-stand creation."""

from __future__ import annotations

from typing import Any

from standctl.domain.errors import StandctlError
from standctl.domain.forms import build_stand_record
from standctl.domain.lifecycle import is_available
from standctl.services._helpers import dump_models
from standctl.services.base import BaseService
from standctl.services.result import ServiceResult
from standctl.services.telemetry import traced


class StandService(BaseService):
    """Read and create stands through the directory."""

    @traced
    async def list_stands(self, *, status: str | None = None) -> ServiceResult:
        """List stands, optionally filtered by status (case-insensitive)."""
        op = "list_stands"
        try:
            stands = await self._directory.list_stands(self._ctx)
        except StandctlError as exc:
            return self._failure(op, exc)

        if status:
            wanted = status.strip().lower()
            stands = [stand for stand in stands if stand.status.strip().lower() == wanted]

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "count": len(stands),
                "available": sum(1 for stand in stands if is_available(stand.status)),
                "items": dump_models(stands),
            },
        )

    @traced
    async def get_stand(self, stand_id: str) -> ServiceResult:
        op = "get_stand"
        try:
            stand = await self._directory.get_stand(self._ctx, stand_id)
        except StandctlError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data=stand.model_dump(mode="json", by_alias=True))

    @traced
    async def available_count(self) -> ServiceResult:
        """Count stands whose status is ``available``."""
        op = "available_count"
        try:
            stands = await self._directory.list_stands(self._ctx)
        except StandctlError as exc:
            return self._failure(op, exc)
        available = sum(1 for stand in stands if is_available(stand.status))
        return ServiceResult(ok=True, op=op, data={"available": available, "total": len(stands)})

    @traced
    async def create_stand(self, **form: Any) -> ServiceResult:
        """Validate a single-stand form and create it.

        Accepts the fields of :func:`~standctl.domain.forms.build_stand_record`.
        Validation failures return before any directory call.
        """
        op = "create_stand"
        try:
            record = build_stand_record(**form)
            stand = await self._directory.create_stand(self._ctx, record)
        except StandctlError as exc:
            return self._failure(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": stand.id,
                "name": stand.name,
                "stand_number": stand.stand_number,
                "status": stand.status,
                "message": f"Stand {stand.stand_number or stand.name} added successfully.",
            },
        )
