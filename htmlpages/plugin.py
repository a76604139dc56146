"""Host-facing plugin object wiring the page model into build and dev-server hooks."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from htmlpages.context import PluginContext, detect_build_mode
from htmlpages.filesystem.env_loader import load_env
from htmlpages.middleware.history import HistoryFallbackMiddleware
from htmlpages.rendering.renderer import transform_index_html
from htmlpages.schemas.page import PluginOptions
from htmlpages.services.flatten_service import flatten_output
from htmlpages.services.input_service import create_input
from htmlpages.services.rewrite_service import create_rewrite_rules

if TYPE_CHECKING:
    from collections.abc import Mapping

    from starlette.applications import Starlette

    from htmlpages.schemas.build import HtmlContext, ResolvedConfig
    from htmlpages.schemas.page import TransformResult

logger = logging.getLogger(__name__)


class HtmlPagesPlugin:
    """Multi-page HTML plugin.

    Hook order follows the host: ``config`` before resolution,
    ``config_resolved`` once, then ``configure_server`` (serve) or
    ``transform_index_html`` per document and ``close_bundle`` (build).
    """

    name = "htmlpages"
    enforce = "pre"

    def __init__(self, options: PluginOptions | Mapping[str, Any] | None = None) -> None:
        if options is None:
            options = PluginOptions()
        elif not isinstance(options, PluginOptions):
            options = PluginOptions.model_validate(options)
        self.options = options
        self._context: PluginContext | None = None

    @property
    def context(self) -> PluginContext:
        if self._context is None:
            msg = "Plugin context not initialized. Call config_resolved() first."
            raise RuntimeError(msg)
        return self._context

    def config(self, user_config: Mapping[str, Any]) -> dict[str, Any] | None:
        """Contribute the multi-entry input to the unresolved host config."""
        root = Path(user_config.get("root") or Path.cwd())
        build_input = user_config.get("build", {}).get("input")
        mode = detect_build_mode(build_input, self.options.pages)
        build_entries = create_input(self.options, root, mode)
        if build_entries is None:
            return None
        logger.debug("Registering %d HTML input(s): %s", len(build_entries), build_entries)
        return {"build": {"input": build_entries}}

    def config_resolved(self, config: ResolvedConfig) -> PluginContext:
        """Freeze the resolved config, options and env into the plugin context."""
        env = load_env(config.mode, config.root, "")
        self._context = PluginContext.create(config, self.options, env)
        logger.info(
            "htmlpages resolved in %s mode with %d page(s)",
            self._context.mode.value,
            len(self._context.pages),
        )
        return self._context

    def configure_server(self, app: Starlette) -> None:
        """Register the history fallback middleware on the dev server."""
        rules = create_rewrite_rules(self.context)
        app.add_middleware(HistoryFallbackMiddleware, rules=rules)

    async def transform_index_html(self, html: str, html_ctx: HtmlContext) -> TransformResult:
        return await transform_index_html(html, html_ctx, self.context)

    async def close_bundle(self) -> list[Path]:
        """Flatten nested HTML output once the bundle has been written."""
        return await flatten_output(self.context)


def html_pages(**options: Any) -> HtmlPagesPlugin:
    """Create the plugin from keyword options."""
    return HtmlPagesPlugin(options)
