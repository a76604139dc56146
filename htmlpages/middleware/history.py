"""History fallback middleware: serve page templates for HTML navigations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from htmlpages.services.rewrite_service import match_rule

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp

    from htmlpages.services.rewrite_service import RewriteRule

logger = logging.getLogger(__name__)

DEFAULT_HTML_ACCEPT_HEADERS = ("text/html", "application/xhtml+xml")


class HistoryFallbackMiddleware(BaseHTTPMiddleware):
    """Rewrite browser navigations to the HTML document that should serve them.

    Only GET/HEAD requests that accept HTML are considered. The first rewrite
    rule matching the path decides the target. Without a match, paths whose
    last segment looks like a file (contains a dot) pass through and
    everything else is rewritten to ``index``.
    """

    def __init__(
        self,
        app: ASGIApp,
        rules: Sequence[RewriteRule] = (),
        index: str = "/index.html",
        html_accept_headers: Sequence[str] = DEFAULT_HTML_ACCEPT_HEADERS,
        disable_dot_rule: bool = False,
    ) -> None:
        super().__init__(app)
        self.rules = tuple(rules)
        self.index = index
        self.html_accept_headers = tuple(html_accept_headers)
        self.disable_dot_rule = disable_dot_rule

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        target = self.rewrite_target(request)
        if target is not None and target != request.url.path:
            logger.debug("Rewriting %s %s to %s", request.method, request.url.path, target)
            request.scope["path"] = target
            request.scope["raw_path"] = target.encode("utf-8")
        return await call_next(request)

    def _accepts_html(self, accept: str) -> bool:
        return any(header in accept for header in self.html_accept_headers)

    def rewrite_target(self, request: Request) -> str | None:
        """Path the request should be served from, or None to leave it alone."""
        if request.method not in {"GET", "HEAD"}:
            return None
        accept = request.headers.get("accept")
        if accept is None or accept.startswith("application/json"):
            return None
        if not self._accepts_html(accept):
            return None

        path = request.url.path
        rule = match_rule(self.rules, path)
        if rule is not None:
            return rule.resolve(path)

        if not self.disable_dot_rule and path.rfind(".") > path.rfind("/"):
            return None
        return self.index
