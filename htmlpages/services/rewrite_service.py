"""Dev-server fallback rewrite rules built from the page list."""

from __future__ import annotations

import enum
import logging
import posixpath
from dataclasses import dataclass
from typing import TYPE_CHECKING

from htmlpages.schemas.page import DEFAULT_TEMPLATE, PageDescriptor

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from htmlpages.context import PluginContext

logger = logging.getLogger(__name__)


class MatchKind(enum.Enum):
    EXACT = "exact"
    PREFIX = "prefix"
    CATCH_ALL = "catch-all"


@dataclass(frozen=True)
class PathMatcher:
    """Tagged path matcher; ``value`` is ignored for ``CATCH_ALL``."""

    kind: MatchKind
    value: str = ""

    @classmethod
    def exact(cls, path: str) -> PathMatcher:
        return cls(MatchKind.EXACT, path)

    @classmethod
    def prefix(cls, path: str) -> PathMatcher:
        return cls(MatchKind.PREFIX, path)

    @classmethod
    def catch_all(cls) -> PathMatcher:
        return cls(MatchKind.CATCH_ALL)

    def matches(self, path: str) -> bool:
        if self.kind is MatchKind.CATCH_ALL:
            return True
        if self.kind is MatchKind.EXACT:
            return path == self.value
        return path.startswith(self.value)


def strip_base(path: str, base: str) -> str:
    """Remove the base URL from ``path``, keeping a leading slash."""
    if base and base != "/" and path.startswith(base):
        return "/" + path[len(base) :].lstrip("/")
    return path


def _proxy_prefixes(proxy_keys: Iterable[str]) -> tuple[str, ...]:
    return tuple(posixpath.normpath("/" + key.lstrip("/")) for key in proxy_keys if key)


@dataclass(frozen=True)
class RewriteRule:
    """One fallback rule: requests accepted by ``matcher`` are served ``page``."""

    matcher: PathMatcher
    page: PageDescriptor
    base: str = "/"
    proxy_prefixes: tuple[str, ...] = ()

    @property
    def target(self) -> str:
        """The page template resolved against the base URL."""
        return posixpath.normpath(posixpath.join(self.base or "/", self.page.template))

    def matches(self, path: str) -> bool:
        return self.matcher.matches(strip_base(path, self.base))

    def resolve(self, path: str) -> str:
        """Target path for a request to ``path``.

        Proxied API paths come back with the base stripped so the proxy
        handles them; everything else is served the page template.
        """
        stripped = strip_base(path, self.base)
        if stripped == "/":
            return self.target
        if any(stripped.startswith(prefix) for prefix in self.proxy_prefixes):
            return stripped
        return self.target


def build_rewrite_rules(
    pages: Sequence[PageDescriptor],
    base: str = "/",
    proxy_keys: Iterable[str] = (),
) -> list[RewriteRule]:
    """Ordered rules: one prefix rule per non-default page, then the default page catch-all."""
    prefixes = _proxy_prefixes(proxy_keys)
    rules: list[RewriteRule] = []
    index_page: PageDescriptor | None = None
    for page in pages:
        if page.filename == DEFAULT_TEMPLATE:
            index_page = page
            continue
        rules.append(
            RewriteRule(
                matcher=PathMatcher.prefix(f"/{page.filename}"),
                page=page,
                base=base,
                proxy_prefixes=prefixes,
            )
        )

    # Catch-all must stay last: rules are tried in order.
    if index_page is not None:
        rules.append(
            RewriteRule(
                matcher=PathMatcher.catch_all(),
                page=index_page,
                base=base,
                proxy_prefixes=prefixes,
            )
        )
    return rules


def create_rewrite_rules(ctx: PluginContext) -> list[RewriteRule]:
    """Rewrite rules for the dev server of the current invocation.

    ``ctx.pages`` already holds the synthesized page in single-page mode and
    page records with missing filename/template defaulted.
    """
    rules = build_rewrite_rules(
        ctx.pages,
        base=ctx.config.base or "/",
        proxy_keys=ctx.config.proxy.keys(),
    )
    logger.debug("Built %d rewrite rule(s)", len(rules))
    return rules


def match_rule(rules: Iterable[RewriteRule], path: str) -> RewriteRule | None:
    """First rule whose matcher accepts ``path``."""
    return next((rule for rule in rules if rule.matches(path)), None)
