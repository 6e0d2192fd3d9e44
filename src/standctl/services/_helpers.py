"""Shared service-layer helper functions."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def fetch_or_default(
    awaitable: Awaitable[T],
    default: T,
    *,
    label: str,
    failures: list[str] | None = None,
) -> T:
    """Await *awaitable*; on any failure log it and return *default*.

    Used for read paths where one unreachable source must not sink the
    whole operation. *label* names the source in logs and, when
    *failures* is given, is appended to it.
    """
    try:
        return await awaitable
    except Exception as exc:
        logger.warning("Fetch failed for %s: %s", label, exc)
        if failures is not None:
            failures.append(label)
        return default


def dump_models(models: Any) -> list[dict[str, Any]]:
    """Serialize pydantic models by alias for ServiceResult payloads."""
    return [model.model_dump(mode="json", by_alias=True) for model in models]


def plural(count: int, noun: str) -> str:
    """``1 stand`` / ``2 stands``."""
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
