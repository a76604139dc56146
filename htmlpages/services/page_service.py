"""Page service: resolving requests to pages and reading page templates."""

from __future__ import annotations

import logging
import os
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING

from htmlpages.context import BuildMode, create_spa_page
from htmlpages.exceptions import TemplateNotFoundError
from htmlpages.schemas.page import DEFAULT_TEMPLATE, PageDescriptor
from htmlpages.services.rewrite_service import strip_base

if TYPE_CHECKING:
    from collections.abc import Iterable

    from htmlpages.context import PluginContext

logger = logging.getLogger(__name__)


def _site_path(path: str) -> str:
    """Resolve a template or request path against the site root ``/``."""
    return posixpath.normpath("/" + path.replace("\\", "/").lstrip("/"))


def get_page_config(
    html_name: str,
    pages: Iterable[PageDescriptor],
    default_page: str = DEFAULT_TEMPLATE,
) -> PageDescriptor:
    """Return the first page whose template matches ``html_name``, else a default page."""
    wanted = _site_path(html_name)
    for page in pages:
        if _site_path(page.template) == wanted:
            return page
    return PageDescriptor(filename=default_page, template=f"./{default_page}")


def get_page(html_name: str, ctx: PluginContext) -> PageDescriptor:
    """Resolve the page that applies to ``html_name``.

    Never raises: when no configured page matches, the synthesized default
    page is returned.
    """
    if ctx.mode is BuildMode.MULTI_PAGE:
        return get_page_config(html_name, ctx.pages)
    options = ctx.options
    return create_spa_page(options.entry, options.template, options.inject)


def html_name_for_request(path: str, ctx: PluginContext) -> str:
    """Turn a served path or an absolute template file path into a root-relative name."""
    candidate = Path(path)
    if candidate.is_absolute():
        for root in (ctx.config.root, ctx.config.root.resolve()):
            if candidate.is_relative_to(root):
                return candidate.relative_to(root).as_posix()
    return strip_base(path, ctx.config.base or "/")


def get_html_path(page: PageDescriptor, root: Path) -> Path:
    """Absolute path to a page's template file."""
    template = page.template if page.template.startswith(".") else f"./{page.template}"
    return Path(os.path.normpath(root / template))


def read_html(path: Path) -> str:
    """Read a template file, raising ``TemplateNotFoundError`` when it is missing."""
    if not path.exists():
        raise TemplateNotFoundError(path)
    return path.read_text(encoding="utf-8")


def get_html_in_pages(page: PageDescriptor, root: Path) -> str:
    """Read the template for ``page`` under ``root``."""
    html_path = get_html_path(page, root)
    logger.debug("Reading template for %s from %s", page.filename, html_path)
    return read_html(html_path)
