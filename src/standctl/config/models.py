"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, standctl.toml only contains
overrides. A fresh install needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from standctl.infrastructure.http import DEFAULT_BASE_URL
from standctl.services.bulk_import import DEFAULT_ALLOWED_SUFFIXES, DEFAULT_MAX_FILE_BYTES


class ApiConfig(BaseModel):
    """[api] section."""

    model_config = {"frozen": True}

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 30.0


class UploadConfig(BaseModel):
    """[upload] section: bulk import file checks."""

    model_config = {"frozen": True}

    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    allowed_suffixes: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_SUFFIXES))
    delimiter: str | None = None


class RosterConfig(BaseModel):
    """[roster] section."""

    model_config = {"frozen": True}

    # Collation locale for roster ordering; empty uses the process locale.
    locale: str = ""
