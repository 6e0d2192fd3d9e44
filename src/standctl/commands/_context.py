"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy directory construction, a runner for
the async services, and centralized result emission (stdout/stderr
routing + exit codes).
"""

from __future__ import annotations

import asyncio
import locale
import logging
from typing import TYPE_CHECKING, Any

import click

from standctl.infrastructure.directory import RequestContext
from standctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from standctl.config.settings import StandSettings
    from standctl.infrastructure.directory import StandDirectory
    from standctl.services.result import ServiceResult

logger = logging.getLogger(__name__)


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  The directory client
    is created lazily on first use so ``--help`` and ``--version`` never
    open an HTTP session.
    """

    def __init__(self, settings: StandSettings) -> None:
        self.settings = settings
        self._directory: StandDirectory | None = None

        # Configure structured logging
        from standctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        # Enable telemetry context var when verbose
        if settings.verbose:
            from standctl.services.telemetry import enable_telemetry

            enable_telemetry()

        if settings.roster.locale:
            try:
                locale.setlocale(locale.LC_COLLATE, settings.roster.locale)
            except locale.Error:
                logger.warning("Unknown collation locale %r; using default", settings.roster.locale)

    @property
    def directory(self) -> StandDirectory:
        """The stand directory client (created lazily on first access)."""
        if self._directory is None:
            from standctl.infrastructure.http import HttpStandDirectory

            self._directory = HttpStandDirectory(
                self.settings.api.base_url,
                timeout=self.settings.api.timeout_seconds,
            )
        return self._directory

    @property
    def request_context(self) -> RequestContext:
        """Per-call credentials derived from ``--token`` / ``STANDCTL_TOKEN``."""
        return RequestContext(token=self.settings.bearer_token)

    def run(self, coro: Coroutine[Any, Any, ServiceResult]) -> ServiceResult:
        """Drive an async service call to completion."""
        return asyncio.run(coro)

    def close(self) -> None:
        """Release the HTTP session, if one was opened."""
        close = getattr(self._directory, "close", None)
        if close is not None:
            close()
        self._directory = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
