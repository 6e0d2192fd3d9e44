"""HTTP implementation of :class:`StandDirectory` over ``requests``.

Blocking ``requests`` calls run through ``asyncio.to_thread`` so the
caller's event loop stays free to drive other fetches. Responses use a
``{"success": bool, "data": ...}`` envelope; bare payloads are accepted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, TypeVar

import requests
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from standctl.domain.errors import DirectoryError, TransientFetchError
from standctl.domain.models import (
    Buyer,
    Stand,
    StandBuyerLink,
    StandCreationRecord,
    StatusUpdateOutcome,
    StatusUpdateRequest,
)
from standctl.infrastructure.directory import RequestContext

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_BASE_URL = "https://standmanagementsystem.vercel.app/api"


def unwrap_envelope(payload: Any) -> Any:
    """Return ``payload["data"]`` for enveloped responses, else the payload.

    Raises:
        DirectoryError: The envelope reports ``success: false``.
    """
    if isinstance(payload, dict) and "success" in payload:
        if payload["success"] is False:
            raise DirectoryError(_server_message(payload) or "Request was not successful")
        if "data" in payload:
            return payload["data"]
    return payload


def _validate(
    model: type[M], data: Any, path: str, error_cls: type[DirectoryError] = DirectoryError
) -> M:
    try:
        return model.model_validate(data)
    except SchemaError as exc:
        raise error_cls(f"{path} returned an unexpected {model.__name__} payload") from exc


def _validate_items(
    model: type[M], items: list[dict[str, Any]], path: str
) -> list[M]:
    """Validate list items one by one, skipping any the schema rejects."""
    valid: list[M] = []
    for item in items:
        try:
            valid.append(model.model_validate(item))
        except SchemaError as exc:
            logger.warning(
                "Skipping %s item from %s: %d validation error(s)",
                model.__name__,
                path,
                exc.error_count(),
            )
    return valid


def _server_message(payload: Any) -> str | None:
    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return None


class HttpStandDirectory:
    """Stand Directory Service client.

    Args:
        base_url: API root, e.g. ``https://host/api``.
        timeout: Socket timeout in seconds for each request.
        session: Optional pre-built session (tests inject a mock).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _send(
        self,
        method: str,
        path: str,
        ctx: RequestContext,
        *,
        body: Any = None,
        error_cls: type[DirectoryError] = DirectoryError,
    ) -> Any:
        url = f"{self._base_url}{path}"
        headers = {"Accept": "application/json", **ctx.auth_headers()}
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method, url, json=body, headers=headers, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise error_cls(f"{method} {path} failed: {exc}") from exc

        payload: Any = None
        if response.content:
            try:
                payload = response.json()
            except ValueError as exc:
                if response.ok:
                    raise error_cls(
                        f"{method} {path} returned invalid JSON",
                        status_code=response.status_code,
                    ) from exc

        if not response.ok:
            message = _server_message(payload) or f"HTTP {response.status_code}"
            raise error_cls(f"{method} {path}: {message}", status_code=response.status_code)

        try:
            return unwrap_envelope(payload)
        except DirectoryError as exc:
            raise error_cls(
                f"{method} {path}: {exc.message}", status_code=response.status_code
            ) from exc

    async def _call(self, method: str, path: str, ctx: RequestContext, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self._send, method, path, ctx, **kwargs)

    async def _read_list(self, path: str, ctx: RequestContext) -> list[dict[str, Any]]:
        data = await self._call("GET", path, ctx, error_cls=TransientFetchError)
        if data is None:
            return []
        if not isinstance(data, list):
            kind = type(data).__name__
            raise TransientFetchError(f"GET {path} returned {kind}, expected a list")
        return [item for item in data if isinstance(item, dict)]

    # ------------------------------------------------------------------
    # Stands
    # ------------------------------------------------------------------

    async def list_stands(self, ctx: RequestContext) -> list[Stand]:
        items = await self._read_list("/stands", ctx)
        return _validate_items(Stand, items, "/stands")

    async def get_stand(self, ctx: RequestContext, stand_id: str) -> Stand:
        path = f"/stands/{stand_id}"
        data = await self._call("GET", path, ctx, error_cls=TransientFetchError)
        return _validate(Stand, data, path, TransientFetchError)

    async def create_stand(self, ctx: RequestContext, record: StandCreationRecord) -> Stand:
        data = await self._call("POST", "/stands", ctx, body=record.to_payload())
        return _validate(Stand, data, "/stands")

    async def bulk_create_stands(
        self, ctx: RequestContext, records: list[StandCreationRecord]
    ) -> dict[str, Any]:
        body = {"stands": [record.to_payload() for record in records]}
        data = await self._call("POST", "/stands/bulk", ctx, body=body)
        return data if isinstance(data, dict) else {"result": data}

    async def update_stand_status(
        self, ctx: RequestContext, stand_id: str, request: StatusUpdateRequest
    ) -> StatusUpdateOutcome:
        data = await self._call(
            "PATCH", f"/stands/{stand_id}/status", ctx, body=request.to_payload()
        )
        return StatusUpdateOutcome.from_payload(data, requested_status=request.status)

    # ------------------------------------------------------------------
    # Buyers and links
    # ------------------------------------------------------------------

    async def list_stand_buyers(self, ctx: RequestContext, stand_id: str) -> list[Buyer]:
        path = f"/stands/{stand_id}/buyers"
        return _validate_items(Buyer, await self._read_list(path, ctx), path)

    async def list_stand_buyer_links(
        self, ctx: RequestContext, stand_id: str
    ) -> list[StandBuyerLink]:
        path = f"/stands/{stand_id}/buyer-links"
        return _validate_items(StandBuyerLink, await self._read_list(path, ctx), path)

    async def link_buyer_user_to_stand(
        self, ctx: RequestContext, stand_id: str, payload: dict[str, Any]
    ) -> StandBuyerLink:
        data = await self._call("POST", f"/stands/{stand_id}/buyer-links", ctx, body=payload)
        return _validate(StandBuyerLink, data, "buyer-links")

    async def release_stand_buyer_link(
        self, ctx: RequestContext, stand_id: str, link_id: str, *, reason: str
    ) -> dict[str, Any]:
        path = f"/stands/{stand_id}/buyer-links/{link_id}/release"
        data = await self._call("POST", path, ctx, body={"reason": reason})
        return data if isinstance(data, dict) else {}

    async def add_buyer_to_stand(
        self, ctx: RequestContext, stand_id: str, payload: dict[str, Any]
    ) -> Buyer:
        data = await self._call("POST", f"/stands/{stand_id}/buyers", ctx, body=payload)
        return _validate(Buyer, data, "buyers")

    async def create_buyer(self, ctx: RequestContext, payload: dict[str, Any]) -> dict[str, Any]:
        data = await self._call("POST", "/buyer-auth/signup", ctx, body=payload)
        return data if isinstance(data, dict) else {}
