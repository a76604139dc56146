"""Bundler multi-entry input derived from page templates."""

from __future__ import annotations

import posixpath
import re
from typing import TYPE_CHECKING

from htmlpages.context import BuildMode
from htmlpages.exceptions import ConfigurationError
from htmlpages.schemas.page import IGNORED_DIRS

if TYPE_CHECKING:
    from pathlib import Path

    from htmlpages.schemas.page import PluginOptions

_WHITESPACE_RE = re.compile(r"\s+")
_FILE_KEY_DIRS = frozenset({"", ".", "public"})


def _strip_extension(filename: str) -> str:
    return posixpath.splitext(filename)[0]


def input_key(template: str) -> str:
    """Derive the entry key for a page template.

    Templates at the root or under ``public/`` are keyed by file name without
    extension; anything else by its directory with ``/`` turned into ``-``.

    >>> input_key("about/about.html")
    'about'
    >>> input_key("docs/guide/index.html")
    'docs-guide'
    >>> input_key("./login.html")
    'login'
    """
    normalized = posixpath.normpath(template.replace("\\", "/"))
    dir_name = posixpath.dirname(normalized)
    file_name = posixpath.basename(normalized)

    dir_name = _WHITESPACE_RE.sub("", dir_name).replace("/", "-")
    if dir_name in _FILE_KEY_DIRS:
        return _strip_extension(file_name)
    return dir_name


def create_input(
    options: PluginOptions,
    root: Path,
    mode: BuildMode,
) -> dict[str, str] | None:
    """Build the ``{entry key: absolute template path}`` input mapping.

    Returns ``None`` in single-page mode when the template sits at the project
    root, meaning the host's default single entry is enough. Raises
    ``ConfigurationError`` when two different templates map to the same key.
    """
    if mode is BuildMode.MULTI_PAGE:
        entries: dict[str, str] = {}
        for page in options.pages:
            key = input_key(page.template)
            template_path = str((root / page.template).resolve())
            existing = entries.get(key)
            if existing is not None and existing != template_path:
                msg = f"Templates {existing} and {template_path} both map to input key {key!r}"
                raise ConfigurationError(msg)
            entries[key] = template_path
        return entries

    if posixpath.dirname(options.template) in IGNORED_DIRS:
        return None
    key = _strip_extension(posixpath.basename(options.template))
    return {key: str((root / options.template).resolve())}
