"""Schemas describing what the host bundler hands to the plugin."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ResolvedConfig(BaseModel):
    """Host configuration after resolution."""

    model_config = ConfigDict(frozen=True)

    root: Path = Field(default_factory=Path.cwd)
    base: str = "/"
    out_dir: str = "dist"
    mode: str = "development"
    command: Literal["build", "serve"] = "serve"
    # Reverse-proxy path prefix -> target
    proxy: dict[str, Any] = Field(default_factory=dict)
    define: dict[str, Any] = Field(default_factory=dict)
    env: dict[str, Any] = Field(default_factory=dict)
    input: str | dict[str, str] | None = None

    @property
    def out_path(self) -> Path:
        return (self.root / self.out_dir).resolve()


class HtmlContext(BaseModel):
    """Per-document context passed to the HTML transform hook."""

    path: str
    filename: str | None = None
