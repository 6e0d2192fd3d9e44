"""BulkImportService — parse an uploaded file, then bulk-create its stands.

Pipeline: CHECK FILE → DECODE → NORMALIZE → SUBMIT → RESPOND

INVARIANT: Nothing is sent to the directory unless parsing produced at
least one valid record. Parse failures abort before any side effect.
"""

from __future__ import annotations

from collections.abc import Collection
from pathlib import Path

from standctl.domain.bulk import BulkParseResult, build_records
from standctl.domain.errors import StandctlError, TransitionError, ValidationError
from standctl.infrastructure.directory import RequestContext, StandDirectory
from standctl.infrastructure.tabular import read_rows
from standctl.services._helpers import dump_models, plural
from standctl.services.base import BaseService
from standctl.services.result import ServiceResult
from standctl.services.telemetry import trace_span, traced

DEFAULT_MAX_FILE_BYTES = 5 * 1024 * 1024
DEFAULT_ALLOWED_SUFFIXES = (".csv", ".tsv", ".txt", ".xlsx", ".xlsm")


def parse_bulk_file(
    raw_content: bytes | str,
    *,
    filename: str | None = None,
    delimiter: str | None = None,
) -> BulkParseResult:
    """Turn uploaded file content into validated stand creation records.

    Raises:
        ParseError: The content is empty, has no data rows, has no valid
            rows, or is an unreadable spreadsheet.
    """
    rows = read_rows(raw_content, filename=filename, delimiter=delimiter)
    return build_records(rows)


class BulkImportService(BaseService):
    """Validates uploaded stand files and submits them in one bulk call."""

    def __init__(
        self,
        directory: StandDirectory,
        ctx: RequestContext,
        *,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
        allowed_suffixes: Collection[str] = DEFAULT_ALLOWED_SUFFIXES,
        delimiter: str | None = None,
    ) -> None:
        super().__init__(directory, ctx)
        self._max_file_bytes = max_file_bytes
        self._allowed_suffixes = {suffix.lower() for suffix in allowed_suffixes}
        self._delimiter = delimiter

    @traced
    async def import_file(self, path: Path, *, dry_run: bool = False) -> ServiceResult:
        """Check, parse, and (unless *dry_run*) submit the stands in *path*."""
        op = "bulk_import"
        try:
            raw = self._read_upload(path)
        except StandctlError as exc:
            return self._failure(op, exc)
        return await self.import_content(raw, filename=path.name, dry_run=dry_run)

    @traced
    async def import_content(
        self,
        raw_content: bytes | str,
        *,
        filename: str | None = None,
        dry_run: bool = False,
    ) -> ServiceResult:
        """Parse already-uploaded content and submit it."""
        op = "bulk_import"
        try:
            with trace_span("parse"):
                parsed = parse_bulk_file(raw_content, filename=filename, delimiter=self._delimiter)
            if not dry_run:
                with trace_span("submit"):
                    ack = await self._submit(parsed)
        except StandctlError as exc:
            return self._failure(op, exc)

        data: dict[str, object] = {
            "count": parsed.count,
            "dry_run": dry_run,
            "items": dump_models(parsed.records),
        }
        if dry_run:
            data["message"] = f"{plural(parsed.count, 'stand')} ready to upload."
        else:
            data["message"] = f"Uploaded {plural(parsed.count, 'stand')} successfully."
            data["response"] = ack
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read_upload(self, path: Path) -> bytes:
        if path.suffix.lower() not in self._allowed_suffixes:
            allowed = ", ".join(sorted(self._allowed_suffixes))
            suffix = path.suffix or "(none)"
            raise ValidationError(f"Unsupported file type {suffix}; use {allowed}.")
        if not path.is_file():
            raise ValidationError(f"File not found: {path}")
        size = path.stat().st_size
        if size > self._max_file_bytes:
            limit_mb = self._max_file_bytes / (1024 * 1024)
            raise ValidationError(
                f"File is too large. Please choose a file smaller than {limit_mb:g}MB."
            )
        return path.read_bytes()

    async def _submit(self, parsed: BulkParseResult) -> dict[str, object]:
        try:
            return await self._directory.bulk_create_stands(self._ctx, parsed.records)
        except StandctlError as exc:
            raise TransitionError(
                f"Bulk upload failed: {exc.message}", code="BULK_CREATE_FAILED"
            ) from exc
