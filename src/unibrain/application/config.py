from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from unibrain.domain.constants import DEFAULT_HOST, DEFAULT_PORT


class AppConfig(BaseSettings):
    """
    Configuration model for unibrain.
    Supports loading from:
    1. Environment variables (UNIBRAIN_*)
    2. Config file (~/.config/unibrain/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="UNIBRAIN_",
        extra="ignore",
    )

    # Paths
    deck_path: Path | None = None

    # Study
    seed: int | None = None

    # Server
    server_host: str = DEFAULT_HOST
    server_port: int = DEFAULT_PORT

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Resolved at call time so a patched HOME is honoured
        toml_files = [
            Path.home() / ".config/unibrain/config.toml",
            Path.home() / ".unibrain.toml",
        ]
        toml_file = next((f for f in toml_files if f.exists()), None)

        # Earlier sources win: CLI overrides > env > TOML > defaults
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("deck_path", mode="before")
    @classmethod
    def resolve_deck_path(cls, v: Any) -> Path | None:
        if v is None:
            return None
        return Path(v).expanduser().resolve()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/unibrain/config.toml (if exists)
    3. Environment variables (UNIBRAIN_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
