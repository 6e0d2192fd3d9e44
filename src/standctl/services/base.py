"""BaseService — shared foundation for all standctl services.

Every service receives the :class:`StandDirectory` collaborator and the
:class:`RequestContext` to authorize its calls. Services never reach for
credentials on their own.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from standctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from standctl.domain.errors import StandctlError
    from standctl.infrastructure.directory import RequestContext, StandDirectory

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class StandService(BaseService):
            async def get_stand(self, stand_id: str) -> ServiceResult:
                stand = await self._directory.get_stand(self._ctx, stand_id)
                ...
    """

    def __init__(self, directory: StandDirectory, ctx: RequestContext) -> None:
        self._directory = directory
        self._ctx = ctx

    @staticmethod
    def _failure(
        op: str, exc: StandctlError, *, warnings: list[str] | None = None
    ) -> ServiceResult:
        """Convert a domain/directory exception into an error result."""
        logger.debug("%s failed: %s (%s)", op, exc.message, exc.code)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=exc.code, message=exc.message, detail=exc.detail),
            warnings=warnings or [],
        )
