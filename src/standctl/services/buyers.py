"""BuyerService — standalone buyer accounts."""

from __future__ import annotations

from typing import Any

from standctl.domain.errors import StandctlError
from standctl.domain.forms import build_signup_payload
from standctl.services.base import BaseService
from standctl.services.result import ServiceResult
from standctl.services.telemetry import traced


class BuyerService(BaseService):
    """Creates buyer accounts that are not yet linked to any stand."""

    @traced
    async def create_buyer(self, **form: Any) -> ServiceResult:
        """Validate the signup form and register the buyer.

        The server's echo of the buyer is preferred for the returned name;
        the submitted names are used when it omits them.
        """
        op = "create_buyer"
        try:
            payload = build_signup_payload(**form)
            created = await self._directory.create_buyer(self._ctx, payload)
        except StandctlError as exc:
            return self._failure(op, exc)

        first_name = created.get("firstName") or payload["firstName"]
        last_name = created.get("lastName") or payload["lastName"]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": created.get("id"),
                "name": f"{first_name} {last_name}",
                "email": created.get("email") or payload["email"],
                "message": f"{first_name} {last_name} was added successfully.",
            },
        )
