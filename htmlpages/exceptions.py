"""Plugin-level exception types.

Convention:
- ``ConfigurationError``: for page configurations that cannot produce a
  consistent build (two templates mapping to the same input key, etc.).
  It subclasses ``ValueError`` so callers validating options can catch both.
- ``TemplateNotFoundError``: a page template was explicitly read and the file
  does not exist.
- ``RenderError`` lives next to the renderer in ``htmlpages/rendering/renderer.py``.

File-system errors raised while flattening the output directory are not
wrapped; they propagate to the host build as-is.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when the page configuration is internally inconsistent."""


class TemplateNotFoundError(FileNotFoundError):
    """Raised when a page's template file does not exist."""

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"template not found at {path}")
