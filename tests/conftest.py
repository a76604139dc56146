"""Shared test fixtures for htmlpages."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from htmlpages.context import PluginContext
from htmlpages.schemas.build import ResolvedConfig
from htmlpages.schemas.page import PluginOptions

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

INDEX_TEMPLATE = """<!DOCTYPE html>
<html>
<head><title>{{ title }}</title></head>
<body>
<div id="app"></div>
<script type="module" src="/src/main.js"></script>
</body>
</html>
"""

ABOUT_TEMPLATE = """<!DOCTYPE html>
<html>
<head><title>About {{ title }}</title></head>
<body>
<div id="about"></div>
</body>
</html>
"""


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project with a root index template and an about page in its own directory."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "index.html").write_text(INDEX_TEMPLATE)
    (root / "about").mkdir()
    (root / "about" / "about.html").write_text(ABOUT_TEMPLATE)
    return root


@pytest.fixture
def multi_page_options() -> PluginOptions:
    return PluginOptions.model_validate(
        {
            "entry": "/src/main.js",
            "pages": [
                {
                    "filename": "about.html",
                    "template": "about/about.html",
                    "entry": "/src/about.js",
                    "injectOptions": {"data": {"title": "Us"}},
                },
                {"filename": "index.html", "template": "index.html"},
            ],
        }
    )


@pytest.fixture
def make_context(project_root: Path) -> Callable[..., PluginContext]:
    """Build a PluginContext for the temporary project."""

    def _make(
        options: PluginOptions | None = None,
        env: dict[str, Any] | None = None,
        **config: Any,
    ) -> PluginContext:
        config.setdefault("root", project_root)
        return PluginContext.create(
            ResolvedConfig(**config),
            options or PluginOptions(),
            env,
        )

    return _make
