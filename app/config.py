from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

DEFAULT_CONFIG_PATH = Path("config/diakit.yaml")


class ExportSettings(BaseModel):
    output_dir: Path = Path("data/exports")
    frames_dir: Path = Path("data/frames")
    file_prefix: str = "diakit"
    raster_font_path: str | None = None

    @field_validator("file_prefix", mode="before")
    @classmethod
    def normalize_prefix(cls, value: object) -> str:
        prefix = str(value or "").strip()
        return prefix or "diakit"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DIAKIT_", env_nested_delimiter="__")

    export: ExportSettings = ExportSettings()
    params_path: Path | None = None
    max_ticks: int = 1000
    log_level: str = "WARNING"

    _yaml_path: ClassVar[Path | None] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        return str(value).upper() if value else "WARNING"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        if cls._yaml_path is None:
            return init_settings, env_settings
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path),
        )


def resolve_config_path(config_path: Path | None = None) -> Path | None:
    env_path = os.getenv("DIAKIT_CONFIG_PATH")
    explicit = config_path or (Path(env_path) if env_path else None)
    if explicit is None:
        return DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None
    if not explicit.exists():
        msg = f"Config file not found: {explicit}"
        raise FileNotFoundError(msg)
    return explicit


def load_settings(config_path: Path | None = None) -> AppSettings:
    AppSettings._yaml_path = resolve_config_path(config_path)
    try:
        return AppSettings()
    finally:
        AppSettings._yaml_path = None
