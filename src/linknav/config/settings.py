"""LinkNavSettings: CLI flags, ``LINKNAV_*`` env vars and linknav.toml merged.

Priority, highest first:

1. keyword arguments (the root CLI group's flags)
2. env vars, nested with ``__`` (``LINKNAV_CACHE__MAX_SIZE=50``)
3. the TOML file found by :func:`linknav.config.discovery.find_config`
4. defaults of the section models in :mod:`linknav.config.models`
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from linknav.config.discovery import find_config, find_vault_root, read_toml
from linknav.config.models import CacheConfig, CanvasConfig, LinkNavConfig, TraversalConfig

# TOML file handed to the settings source while from_cli() builds an instance.
_active_toml: ContextVar[Path | None] = ContextVar("linknav_active_toml", default=None)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by one linknav.toml (or nothing)."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data = read_toml(toml_path) if toml_path is not None and toml_path.is_file() else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class LinkNavSettings(BaseSettings):
    """Everything one CLI invocation needs.

    Attributes:
        vault_root: The vault to navigate.  Defaults to the folder of the
            config file, else the nearest folder with a vault marker,
            else the working directory.
        config_path: The TOML file in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "LINKNAV_",
        "env_nested_delimiter": "__",
    }

    vault_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    cache: CacheConfig = Field(default_factory=CacheConfig)
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    traversal: TraversalConfig = Field(default_factory=TraversalConfig)

    @property
    def config(self) -> LinkNavConfig:
        """The TOML-backed sections as a standalone config object."""
        return LinkNavConfig(cache=self.cache, canvas=self.canvas, traversal=self.traversal)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, _active_toml.get()),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        vault_root: Path | None = None,
        **cli_flags: Any,
    ) -> LinkNavSettings:
        """Build settings for one invocation.

        An explicit *config_path* that does not exist means "no config
        file"; it does not fall back to discovery.
        """
        if config_path:
            explicit = Path(config_path)
            toml_path = explicit if explicit.is_file() else None
        else:
            toml_path = find_config(vault_root)

        if vault_root is None:
            if toml_path is not None:
                vault_root = toml_path.parent
            else:
                vault_root = find_vault_root() or Path.cwd()

        token = _active_toml.set(toml_path)
        try:
            return cls(vault_root=vault_root, config_path=toml_path, **cli_flags)
        finally:
            _active_toml.reset(token)
