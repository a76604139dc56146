"""Post-build flattening of generated HTML into the output root."""

from __future__ import annotations

import asyncio
import logging
import os
import posixpath
from typing import TYPE_CHECKING, Any

from htmlpages.schemas.page import IGNORED_DIRS

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable
    from pathlib import Path

    from htmlpages.context import PluginContext

logger = logging.getLogger(__name__)


def template_dirs(templates: Iterable[str]) -> list[str]:
    """Distinct template directories, skipping the root markers."""
    dirs: list[str] = []
    for template in templates:
        dir_name = posixpath.dirname(template.replace("\\", "/"))
        if dir_name in IGNORED_DIRS:
            continue
        dir_name = posixpath.normpath(dir_name).lstrip("/")
        if dir_name and dir_name != "." and dir_name not in dirs:
            dirs.append(dir_name)
    return dirs


def _is_dir_empty(path: Path) -> bool:
    return not any(path.iterdir())


def _find_html_files(out_root: Path, dirs: list[str]) -> list[Path]:
    return sorted(
        path
        for dir_name in dirs
        for path in out_root.glob(f"{dir_name}/*.html")
        if path.is_file()
    )


def _existing_dirs(out_root: Path, dirs: list[str]) -> list[Path]:
    return [out_root / dir_name for dir_name in dirs if (out_root / dir_name).is_dir()]


def _move_html(source: Path, out_root: Path) -> Path:
    destination = out_root / source.name
    # os.replace overwrites an existing destination file
    os.replace(source, destination)
    logger.info("Moved %s to %s", source, destination)
    return destination


def _remove_if_empty(path: Path) -> bool:
    if not _is_dir_empty(path):
        return False
    path.rmdir()
    logger.info("Removed empty output directory %s", path)
    return True


async def _run_wave(label: str, calls: Iterable[Awaitable[Any]]) -> list[Any]:
    """Await ``calls`` concurrently; raise all failures together once every call has settled."""
    outcomes = await asyncio.gather(*calls, return_exceptions=True)
    errors: list[Exception] = []
    for outcome in outcomes:
        if isinstance(outcome, Exception):
            errors.append(outcome)
        elif isinstance(outcome, BaseException):
            raise outcome
    if errors:
        raise ExceptionGroup(f"Output flattening failed while {label}", errors)
    return list(outcomes)


async def flatten_directories(out_root: Path, dirs: Iterable[str]) -> list[Path]:
    """Move ``*.html`` found directly under each of ``dirs`` into ``out_root``.

    Directories left empty afterwards are deleted; the rest are kept. Returns
    the new paths of the moved files.
    """
    dir_list = list(dirs)
    html_files = await asyncio.to_thread(_find_html_files, out_root, dir_list)

    moved = await _run_wave(
        "moving HTML files",
        (asyncio.to_thread(_move_html, path, out_root) for path in html_files),
    )

    existing_dirs = await asyncio.to_thread(_existing_dirs, out_root, dir_list)
    await _run_wave(
        "removing empty directories",
        (asyncio.to_thread(_remove_if_empty, path) for path in existing_dirs),
    )
    return moved


async def flatten_output(ctx: PluginContext) -> list[Path]:
    """Flatten the build output of the current invocation."""
    out_root = ctx.config.out_path
    dirs = template_dirs(page.template for page in ctx.pages)
    if not dirs:
        logger.debug("No nested template directories, nothing to flatten")
        return []
    return await flatten_directories(out_root, dirs)
