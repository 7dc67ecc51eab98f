"""Unified settings — CLI flags, env vars, .env, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``MUSICAPP_*`` prefix, ``__`` for nesting
     (``MUSICAPP_DATABASE__HOST``)
  3. ``.env``     — same keys, read from the working directory
  4. Flat vars    — ``MUSICAPP_PG_HOST`` and friends, as read by the
     earlier deployment scripts (see :class:`LegacyEnvSettingsSource`)
  5. TOML file    — ``mlm.toml`` discovered via walk-up
  6. Code defaults — baked into the section models

Uses Pydantic Settings v2 with custom sources for TOML and the flat vars.
"""

from __future__ import annotations

import os
import threading
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from mlm.config.discovery import find_config
from mlm.config.models import DatabaseConfig, ServerConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from an ``mlm.toml`` file discovered via walk-up."""

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


# Flat variable -> [database] field.
LEGACY_DATABASE_ENV: dict[str, str] = {
    "MUSICAPP_PG_HOST": "host",
    "MUSICAPP_PG_PORT": "port",
    "MUSICAPP_PG_USER": "user",
    "MUSICAPP_PG_PASS": "password",
    "MUSICAPP_PG_DATABASE": "name",
}
LEGACY_DRIVER = "mysql+pymysql"


class LegacyEnvSettingsSource(PydanticBaseSettingsSource):
    """Map the flat ``MUSICAPP_PG_*`` variables onto the ``[database]`` section.

    Setting any of them means a MySQL server, so ``driver`` becomes
    :data:`LEGACY_DRIVER` unless ``MUSICAPP_DATABASE__DRIVER`` names one.
    Empty values count as unset.
    """

    def __init__(
        self, settings_cls: type[BaseSettings], environ: Mapping[str, str] | None = None
    ) -> None:
        super().__init__(settings_cls)
        env = os.environ if environ is None else environ
        database: dict[str, Any] = {
            field: env[key] for key, field in LEGACY_DATABASE_ENV.items() if env.get(key)
        }
        if database and not env.get("MUSICAPP_DATABASE__DRIVER"):
            database["driver"] = LEGACY_DRIVER
        self._data: dict[str, Any] = {"database": database} if database else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class MlmSettings(BaseSettings):
    """Unified settings for the mlm CLI and server.

    Attributes:
        project_root: Directory relative SQLite paths resolve against
            (parent of ``mlm.toml``, or CWD if no config found).
        config_path: The TOML file in use, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "MUSICAPP_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "extra": "ignore",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the flat-var and TOML sources between the .env file and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            LegacyEnvSettingsSource(settings_cls),
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> MlmSettings:
        """Construct settings from a CLI invocation.

        Discovers ``mlm.toml`` via walk-up (or explicit *config_path*),
        resolves *project_root* from the config file's parent directory,
        and merges CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None

    def database_url(self) -> str:
        """SQLAlchemy URL with relative SQLite paths anchored at ``project_root``."""
        db = self.database
        if db.url is None and db.driver.startswith("sqlite"):
            path = Path(db.path)
            if not path.is_absolute():
                path = self.project_root / path
            return f"{db.driver}:///{path}"
        return db.sqlalchemy_url()
