"""Build mode detection and the per-invocation plugin context."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from htmlpages.schemas.page import DEFAULT_TEMPLATE, InjectOptions, PageDescriptor

if TYPE_CHECKING:
    from collections.abc import Mapping

    from htmlpages.schemas.build import ResolvedConfig
    from htmlpages.schemas.page import PluginOptions


class BuildMode(enum.Enum):
    SINGLE_PAGE = "single-page"
    MULTI_PAGE = "multi-page"


def detect_build_mode(
    build_input: str | Mapping[str, str] | None,
    pages: tuple[PageDescriptor, ...] = (),
) -> BuildMode:
    """Multi-page when the bundler input has several entries or pages are configured."""
    if pages:
        return BuildMode.MULTI_PAGE
    if build_input is None or isinstance(build_input, str):
        return BuildMode.SINGLE_PAGE
    return BuildMode.MULTI_PAGE if len(build_input) > 1 else BuildMode.SINGLE_PAGE


def create_spa_page(
    entry: str | None,
    template: str,
    inject: InjectOptions | None = None,
) -> PageDescriptor:
    """Synthesize the single page used in single-page mode."""
    return PageDescriptor(
        entry=entry,
        filename=DEFAULT_TEMPLATE,
        template=template,
        inject_options=inject or InjectOptions(),
    )


@dataclass(frozen=True)
class PluginContext:
    """Read-only state shared by every hook of one build or serve invocation.

    Created once when the host configuration is resolved. ``pages`` is the
    effective page list: the user's pages in multi-page mode, otherwise the
    single synthesized page.
    """

    config: ResolvedConfig
    options: PluginOptions
    mode: BuildMode
    pages: tuple[PageDescriptor, ...]
    env: Mapping[str, Any]

    @classmethod
    def create(
        cls,
        config: ResolvedConfig,
        options: PluginOptions,
        env: Mapping[str, Any] | None = None,
    ) -> PluginContext:
        mode = detect_build_mode(config.input, options.pages)
        if mode is BuildMode.MULTI_PAGE:
            pages = options.pages
        else:
            pages = (create_spa_page(options.entry, options.template, options.inject),)
        return cls(
            config=config,
            options=options,
            mode=mode,
            pages=pages,
            env=MappingProxyType(dict(env or {})),
        )
