"""TOML reader for the htmlpages.toml project file."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from htmlpages.schemas.page import PluginOptions

if TYPE_CHECKING:
    from pathlib import Path

_BUILD_KEYS = frozenset({"base", "out_dir", "proxy", "define"})


@dataclass
class ProjectConfig:
    """Parsed project configuration from htmlpages.toml."""

    options: PluginOptions = field(default_factory=PluginOptions)
    build: dict[str, Any] = field(default_factory=dict)


def parse_project_config(config_path: Path) -> ProjectConfig:
    """Parse htmlpages.toml.

    ``[plugin]`` holds the top-level plugin options, ``[[pages]]`` the page
    records and ``[build]`` the host settings (base, out_dir, proxy, define).
    A missing file yields the defaults.
    """
    if not config_path.exists():
        return ProjectConfig()

    data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    plugin_data: dict[str, Any] = dict(data.get("plugin", {}))

    pages: list[dict[str, Any]] = []
    for page_data in data.get("pages", []):
        if not isinstance(page_data, dict):
            msg = f"Page entry must be a table: {page_data!r}"
            raise ValueError(msg)
        pages.append(page_data)
    if pages:
        plugin_data["pages"] = pages

    build_data: dict[str, Any] = data.get("build", {})
    unknown = set(build_data) - _BUILD_KEYS
    if unknown:
        msg = f"Unknown [build] keys: {', '.join(sorted(unknown))}"
        raise ValueError(msg)

    return ProjectConfig(
        options=PluginOptions.model_validate(plugin_data),
        build=dict(build_data),
    )
