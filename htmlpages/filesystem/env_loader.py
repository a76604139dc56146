"""Mode-aware ``.env`` file loading."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from dotenv import dotenv_values

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)


def env_files_for_mode(mode: str) -> list[str]:
    """Env file names in load order; later files override earlier ones."""
    return [".env", ".env.local", f".env.{mode}", f".env.{mode}.local"]


def load_env(mode: str, env_dir: Path, prefixes: str | Iterable[str] = "VITE_") -> dict[str, str]:
    """Load env values for ``mode`` from ``env_dir``.

    Only keys starting with one of ``prefixes`` are returned. Variables already
    present in the process environment take precedence over file values. An
    empty prefix exposes every key.
    """
    if mode == "local":
        msg = '"local" cannot be used as a mode name because it conflicts with the .local postfix'
        raise ValueError(msg)

    prefix_list = [prefixes] if isinstance(prefixes, str) else list(prefixes)

    parsed: dict[str, str] = {}
    for name in env_files_for_mode(mode):
        path = env_dir / name
        if not path.is_file():
            continue
        logger.debug("Loading env file %s", path)
        for key, value in dotenv_values(path, interpolate=True).items():
            parsed[key] = value if value is not None else ""

    env = {
        key: value
        for key, value in parsed.items()
        if any(key.startswith(prefix) for prefix in prefix_list)
    }
    for key, value in os.environ.items():
        if any(key.startswith(prefix) for prefix in prefix_list):
            env[key] = value
    return env
