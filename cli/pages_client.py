"""CLI for inspecting and statically rendering htmlpages projects."""

from __future__ import annotations

import argparse
import asyncio
import html
import json
import logging
import posixpath
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from htmlpages.config import Settings
from htmlpages.filesystem.toml_manager import parse_project_config
from htmlpages.plugin import HtmlPagesPlugin
from htmlpages.rendering.renderer import RenderError
from htmlpages.schemas.build import HtmlContext, ResolvedConfig
from htmlpages.services.page_service import get_html_in_pages
from htmlpages.services.rewrite_service import create_rewrite_rules

if TYPE_CHECKING:
    from collections.abc import Sequence

    from htmlpages.schemas.page import TagDescriptor

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure CLI logging."""
    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stdout,
        force=True,
    )


def _render_tag(tag: TagDescriptor) -> str:
    attrs = ""
    for name, value in tag.attrs.items():
        if value is True:
            attrs += f" {name}"
        elif value is not False:
            attrs += f' {name}="{html.escape(str(value), quote=True)}"'
    if isinstance(tag.children, str):
        children = tag.children
    elif tag.children:
        children = "".join(_render_tag(child) for child in tag.children)
    else:
        children = ""
    return f"<{tag.tag}{attrs}>{children}</{tag.tag}>"


def apply_tags(document: str, tags: Sequence[TagDescriptor]) -> str:
    """Splice extra tags into the head/body of ``document``."""
    for tag in tags:
        markup = _render_tag(tag)
        if tag.inject_to == "head":
            document = document.replace("</head>", f"{markup}</head>", 1)
        elif tag.inject_to == "head-prepend":
            document = document.replace("<head>", f"<head>{markup}", 1)
        elif tag.inject_to == "body":
            document = document.replace("</body>", f"{markup}</body>", 1)
        else:
            document = document.replace("<body>", f"<body>{markup}", 1)
    return document


def build_plugin(settings: Settings, command: str) -> HtmlPagesPlugin:
    """Load htmlpages.toml and run the plugin through config resolution."""
    root = settings.root.resolve()
    project = parse_project_config(settings.config_path)
    options = project.options
    if settings.verbose is not None:
        options = options.model_copy(update={"verbose": settings.verbose})

    plugin = HtmlPagesPlugin(options)
    contributed = plugin.config({"root": root}) or {}
    resolved = ResolvedConfig(
        root=root,
        mode=settings.mode,
        command=command,
        input=contributed.get("build", {}).get("input"),
        **project.build,
    )
    plugin.config_resolved(resolved)
    return plugin


def inspect_project(plugin: HtmlPagesPlugin) -> dict[str, Any]:
    """Summarize the input map and rewrite rules of a resolved plugin."""
    ctx = plugin.context
    rules = create_rewrite_rules(ctx)
    return {
        "mode": ctx.mode.value,
        "input": ctx.config.input,
        "rewrites": [
            {
                "match": rule.matcher.kind.value,
                "path": rule.matcher.value,
                "filename": rule.page.filename,
                "target": rule.target,
            }
            for rule in rules
        ],
    }


async def render_project(plugin: HtmlPagesPlugin) -> list[Path]:
    """Render every page template into the output directory, then flatten it."""
    ctx = plugin.context
    root = ctx.config.root
    out_root = ctx.config.out_path

    for page in ctx.pages:
        source = get_html_in_pages(page, root)
        rel_template = posixpath.normpath(page.template.replace("\\", "/")).lstrip("/")
        result = await plugin.transform_index_html(source, HtmlContext(path=f"/{rel_template}"))

        destination = out_root / rel_template
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(apply_tags(result.html, result.tags), encoding="utf-8")
        logger.info("Rendered %s -> %s", page.template, destination)

    await plugin.close_bundle()
    return sorted(out_root.glob("*.html"))


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="htmlpages",
        description="Inspect or render multi-page HTML templates",
    )
    parser.add_argument("--root", "-r", help="Project root (default: current)")
    parser.add_argument("--config", "-c", help="Project file (default: htmlpages.toml)")
    parser.add_argument("--mode", "-m", help="Env mode used to pick .env files")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("inspect", help="Print the input map and rewrite rules")
    subparsers.add_parser("render", help="Render pages into the output directory")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    overrides: dict[str, Any] = {}
    if args.root:
        overrides["root"] = Path(args.root)
    if args.config:
        overrides["config_file"] = Path(args.config)
    if args.mode:
        overrides["mode"] = args.mode
    if args.debug:
        overrides["debug"] = True
    settings = Settings(**overrides)
    _configure_logging(settings.debug)

    try:
        if args.command == "inspect":
            plugin = build_plugin(settings, "serve")
            print(json.dumps(inspect_project(plugin), indent=2))
        else:
            plugin = build_plugin(settings, "build")
            written = asyncio.run(render_project(plugin))
            print(f"Rendered {len(written)} page(s) into {plugin.context.config.out_path}")
    except (ValueError, RenderError, OSError) as exc:
        # ConfigurationError and pydantic's ValidationError are ValueErrors
        logger.error("%s", exc)
        sys.exit(1)
    except ExceptionGroup as group:
        for exc in group.exceptions:
            logger.error("%s: %s", group.message, exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
