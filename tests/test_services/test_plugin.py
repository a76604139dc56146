"""Tests for the plugin hooks and build mode detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from htmlpages.context import BuildMode, PluginContext, detect_build_mode
from htmlpages.plugin import HtmlPagesPlugin, html_pages
from htmlpages.schemas.build import HtmlContext, ResolvedConfig
from htmlpages.schemas.page import PageDescriptor, PluginOptions

if TYPE_CHECKING:
    from pathlib import Path


class TestDetectBuildMode:
    @pytest.mark.parametrize(
        ("build_input", "expected"),
        [
            (None, BuildMode.SINGLE_PAGE),
            ("index.html", BuildMode.SINGLE_PAGE),
            ({"main": "index.html"}, BuildMode.SINGLE_PAGE),
            ({"a": "a.html", "b": "b.html"}, BuildMode.MULTI_PAGE),
        ],
    )
    def test_from_input(self, build_input: object, expected: BuildMode) -> None:
        assert detect_build_mode(build_input) is expected  # type: ignore[arg-type]

    def test_configured_pages_force_multi_page(self) -> None:
        assert detect_build_mode(None, (PageDescriptor(),)) is BuildMode.MULTI_PAGE


class TestPluginContext:
    def test_single_page_synthesizes_one_page(self, tmp_path: Path) -> None:
        options = PluginOptions(entry="/src/main.js", template="src/index.html")
        ctx = PluginContext.create(ResolvedConfig(root=tmp_path), options)
        assert ctx.mode is BuildMode.SINGLE_PAGE
        assert ctx.pages == (
            PageDescriptor(filename="index.html", template="src/index.html", entry="/src/main.js"),
        )

    def test_env_is_read_only(self, tmp_path: Path) -> None:
        ctx = PluginContext.create(ResolvedConfig(root=tmp_path), PluginOptions(), {"A": "1"})
        with pytest.raises(TypeError):
            ctx.env["A"] = "2"  # type: ignore[index]


class TestHtmlPagesPlugin:
    def test_context_before_resolution_raises(self) -> None:
        with pytest.raises(RuntimeError, match="config_resolved"):
            _ = HtmlPagesPlugin().context

    def test_config_hook_single_root_template(self, tmp_path: Path) -> None:
        assert html_pages().config({"root": tmp_path}) is None

    def test_config_hook_multi_page(self, tmp_path: Path) -> None:
        plugin = html_pages(
            pages=[
                {"filename": "index.html", "template": "index.html"},
                {"filename": "about.html", "template": "about/about.html"},
            ]
        )
        contributed = plugin.config({"root": tmp_path})
        assert contributed == {
            "build": {
                "input": {
                    "index": str((tmp_path / "index.html").resolve()),
                    "about": str((tmp_path / "about" / "about.html").resolve()),
                }
            }
        }

    def test_config_resolved_loads_env(
        self, project_root: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("SITE_NAME", raising=False)
        (project_root / ".env").write_text("SITE_NAME=dotenv\n")
        (project_root / ".env.production").write_text("SITE_NAME=prod\n")
        plugin = HtmlPagesPlugin()

        ctx = plugin.config_resolved(ResolvedConfig(root=project_root, mode="production"))

        assert ctx.env["SITE_NAME"] == "prod"
        assert plugin.context is ctx

    async def test_transform_hook_uses_env_and_defines(
        self, project_root: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("SITE_NAME", raising=False)
        monkeypatch.delenv("HTMLPAGES_TEST_VERSION", raising=False)
        (project_root / ".env").write_text("SITE_NAME=dotenv\n")
        plugin = HtmlPagesPlugin(PluginOptions(entry="/src/main.js"))
        define = {"HTMLPAGES_TEST_VERSION": "1.2.3", "SITE_NAME": "define"}
        plugin.config_resolved(ResolvedConfig(root=project_root, define=define))
        html = "<p>{{ SITE_NAME }} {{ HTMLPAGES_TEST_VERSION }}</p><body></body>"

        result = await plugin.transform_index_html(html, HtmlContext(path="/"))

        assert result.html == (
            '<p>dotenv 1.2.3</p><body><script type="module" src="/src/main.js"></script></body>'
        )

    async def test_close_bundle_flattens_output(self, project_root: Path) -> None:
        plugin = html_pages(
            pages=[
                {"filename": "index.html", "template": "index.html"},
                {"filename": "about.html", "template": "about/about.html"},
            ]
        )
        plugin.config_resolved(ResolvedConfig(root=project_root, command="build"))
        out = project_root / "dist"
        (out / "about").mkdir(parents=True)
        (out / "about" / "about.html").write_text("about")

        await plugin.close_bundle()

        assert (out / "about.html").read_text() == "about"
        assert not (out / "about").exists()
