"""Command-line configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """htmlpages runtime settings."""

    model_config = SettingsConfigDict(
        env_prefix="HTMLPAGES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    debug: bool = False
    mode: str = Field(default="production", min_length=1)

    # Paths
    root: Path = Path(".")
    config_file: Path = Path("htmlpages.toml")

    # Overrides the [plugin] verbose flag when set
    verbose: bool | None = None

    @property
    def config_path(self) -> Path:
        """Config file path, resolved against the project root when relative."""
        if self.config_file.is_absolute():
            return self.config_file
        return self.root / self.config_file
