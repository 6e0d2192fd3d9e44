"""Exception taxonomy shared by every layer.

Services catch these at their boundary and convert them into
:class:`~standctl.services.result.ServiceResult` errors; they never
reach the CLI as tracebacks.

- ``ValidationError``: malformed user input on a write path.
- ``ParseError``: malformed uploaded file, raised before any network call.
- ``DirectoryError`` / ``TransientFetchError``: remote failures.
- ``TransitionError``: a stand status transition that did not happen.
"""

from __future__ import annotations

from typing import Any, Literal

ParseErrorKind = Literal["empty", "missing_rows", "no_valid_rows", "unreadable"]


class StandctlError(Exception):
    """Base class carrying a machine-readable code and optional detail."""

    code = "STANDCTL_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = dict(detail or {})


class ValidationError(StandctlError):
    """User input is missing or malformed. Not retryable until corrected."""

    code = "VALIDATION_FAILED"

    def __init__(self, message: str, *, fields: list[str] | None = None) -> None:
        super().__init__(message, detail={"fields": fields} if fields else None)
        self.fields = list(fields or [])


_PARSE_CODES: dict[str, str] = {
    "empty": "PARSE_EMPTY",
    "missing_rows": "PARSE_MISSING_ROWS",
    "no_valid_rows": "PARSE_NO_VALID_ROWS",
    "unreadable": "PARSE_UNREADABLE",
}


class ParseError(StandctlError):
    """An uploaded file could not be turned into creation records."""

    def __init__(self, kind: ParseErrorKind, message: str) -> None:
        super().__init__(message, detail={"kind": kind})
        self.kind = kind
        self.code = _PARSE_CODES[kind]


class DirectoryError(StandctlError):
    """The Stand Directory Service call failed (network, HTTP, or payload)."""

    code = "DIRECTORY_ERROR"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message, detail={"status_code": status_code} if status_code else None)
        self.status_code = status_code


class TransientFetchError(DirectoryError):
    """A read-path failure. The roster aggregator degrades these to empty lists."""

    code = "FETCH_FAILED"


class TransitionError(StandctlError):
    """A stand transition failed or was refused; local state is untouched."""

    code = "TRANSITION_FAILED"

    def __init__(self, message: str, *, code: str | None = None, retryable: bool = True) -> None:
        super().__init__(message, detail={"retryable": retryable})
        if code is not None:
            self.code = code
        self.retryable = retryable
