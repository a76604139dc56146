"""Jinja2-based HTML template renderer with module entry script injection."""

from __future__ import annotations

import logging
import posixpath
import re
from html.parser import HTMLParser
from typing import TYPE_CHECKING, Any

import jinja2

from htmlpages.schemas.page import InjectOptions, TransformResult
from htmlpages.services.page_service import get_page, html_name_for_request

if TYPE_CHECKING:
    from collections.abc import Mapping

    from htmlpages.context import PluginContext
    from htmlpages.schemas.build import HtmlContext, ResolvedConfig

logger = logging.getLogger(__name__)


class RenderError(RuntimeError):
    """Raised when a page template cannot be rendered (syntax error, undefined access)."""


_BODY_CLOSE_RE = re.compile(r"</body>")
_NEWLINE_RE = re.compile(r"\n")


def normalize_path(path: str) -> str:
    """Normalize a script path to forward slashes and collapse ``.``/``..`` segments."""
    return posixpath.normpath(path.replace("\\", "/"))


def _is_module_script(tag: str, attrs: list[tuple[str, str | None]]) -> bool:
    return tag == "script" and any(
        name.lower() == "type" and value == "module" for name, value in attrs
    )


class _ModuleScriptFinder(HTMLParser):
    """Collects the source spans of every ``<script type="module">`` element.

    Offsets come from ``getpos()``, so callers can cut the spans out of the
    original string and leave every other byte untouched.
    """

    def __init__(self, source: str) -> None:
        super().__init__(convert_charrefs=False)
        self._source = source
        self._line_starts = [0]
        self._line_starts.extend(match.end() for match in _NEWLINE_RE.finditer(source))
        self._open_at: int | None = None
        self.spans: list[tuple[int, int]] = []

    def _offset(self) -> int:
        line, column = self.getpos()
        return self._line_starts[line - 1] + column

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self._open_at is None and _is_module_script(tag, attrs):
            self._open_at = self._offset()

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self._open_at is None and _is_module_script(tag, attrs):
            start = self._offset()
            self.spans.append((start, start + len(self.get_starttag_text() or "")))

    def handle_endtag(self, tag: str) -> None:
        if self._open_at is None or tag != "script":
            return
        close = self._source.find(">", self._offset())
        end = len(self._source) if close < 0 else close + 1
        self.spans.append((self._open_at, end))
        self._open_at = None

    def close(self) -> None:
        super().close()
        if self._open_at is not None:
            # Unterminated module script: drop it like a closed one.
            self.spans.append((self._open_at, len(self._source)))
            self._open_at = None


def remove_entry_script(html: str, verbose: bool = False) -> str:
    """Remove every ``<script type="module">`` element from ``html``.

    Everything outside those elements is returned exactly as written.
    """
    if not html:
        return html

    finder = _ModuleScriptFinder(html)
    finder.feed(html)
    finder.close()
    if not finder.spans:
        return html

    kept: list[str] = []
    removed: list[str] = []
    last = 0
    for start, end in finder.spans:
        kept.append(html[last:start])
        removed.append(html[start:end])
        last = end
    kept.append(html[last:])

    if verbose:
        logger.warning(
            "Since an entry is configured, %s was deleted. "
            "You may also delete it from the template.",
            ", ".join(removed),
        )
    return "".join(kept)


def inject_entry_script(html: str, entry: str) -> str:
    """Insert the module script for ``entry`` right before the first ``</body>``."""
    script = f'<script type="module" src="{normalize_path(entry)}"></script>'
    return _BODY_CLOSE_RE.sub(lambda _: f"{script}</body>", html, count=1)


def build_template_data(
    config: ResolvedConfig,
    env: Mapping[str, Any],
    data: Mapping[str, Any],
) -> dict[str, Any]:
    """Merge template variables; later sources win.

    resolved env < compile-time defines < loaded .env values < page data
    """
    return {**config.env, **config.define, **env, **data}


def render_template(html: str, data: Mapping[str, Any], render_options: Mapping[str, Any]) -> str:
    """Render ``html`` as a Jinja2 template.

    Raises RenderError on unknown renderer options, malformed template syntax
    or failed evaluation.
    """
    try:
        environment = jinja2.Environment(**render_options)
    except TypeError as exc:
        raise RenderError(f"Invalid render options: {exc}") from exc
    try:
        return environment.from_string(html).render(dict(data))
    except jinja2.TemplateError as exc:
        raise RenderError(f"Template rendering failed: {exc}") from exc


def render_html(
    html: str,
    *,
    inject_options: InjectOptions,
    config: ResolvedConfig,
    env: Mapping[str, Any],
    entry: str | None,
    verbose: bool = False,
) -> str:
    """Render a template and swap in the configured entry script."""
    data = build_template_data(config, env, inject_options.data)
    result = render_template(html, data, inject_options.render_options)

    if entry:
        result = remove_entry_script(result, verbose)
        result = inject_entry_script(result, entry)
    return result


async def transform_index_html(
    html: str,
    html_ctx: HtmlContext,
    ctx: PluginContext,
) -> TransformResult:
    """Transform one HTML document for the page matching its request path."""
    html_name = html_name_for_request(html_ctx.filename or html_ctx.path, ctx)
    page = get_page(html_name, ctx)
    inject_options = page.inject_options

    rendered = render_html(
        html,
        inject_options=inject_options,
        config=ctx.config,
        env=ctx.env,
        entry=page.entry or ctx.options.entry,
        verbose=ctx.options.verbose,
    )
    return TransformResult(html=rendered, tags=inject_options.tags)
