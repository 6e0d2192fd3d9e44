"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``STANDCTL_*`` prefix
  3. TOML file    — ``standctl.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`standctl.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from standctl.config.discovery import find_config
from standctl.config.models import ApiConfig, RosterConfig, UploadConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``standctl.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class StandSettings(BaseSettings):
    """Unified settings for the entire standctl CLI.

    Merges CLI flags, environment variables, TOML config sections,
    and code-baked defaults into a single frozen object.  Stored on the
    :class:`~standctl.commands._context.AppContext` at the CLI root.

    Attributes:
        config_path: The TOML file that was loaded, or None.
        token: Bearer token for the stand management API.  Never echoed.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "STANDCTL_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    token: SecretStr | None = None

    # --- TOML sections ---
    api: ApiConfig = Field(default_factory=ApiConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    roster: RosterConfig = Field(default_factory=RosterConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        base_url: str | None = None,
        token: str | None = None,
        **cli_flags: Any,
    ) -> StandSettings:
        """Construct settings from CLI invocation.

        Discovers ``standctl.toml`` via walk-up (or explicit *config_path*)
        and merges CLI flags as highest-priority overrides.  ``--base-url``
        only replaces the URL; the rest of ``[api]`` still comes from
        lower-priority sources.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config()

        overrides: dict[str, Any] = {k: v for k, v in cli_flags.items() if v is not None}
        if token:
            overrides["token"] = token

        _tls.toml_path = toml_path
        try:
            settings = cls(config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None

        if base_url:
            api = settings.api.model_copy(update={"base_url": base_url})
            settings = settings.model_copy(update={"api": api})
        return settings

    @property
    def bearer_token(self) -> str | None:
        """The plain token, or None when unset or blank."""
        if self.token is None:
            return None
        return self.token.get_secret_value().strip() or None
