"""Property-based tests for rewrite rule ordering and proxy pass-through."""

from __future__ import annotations

import string

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from htmlpages.schemas.page import PageDescriptor
from htmlpages.services.rewrite_service import MatchKind, build_rewrite_rules

PROPERTY_SETTINGS = settings(
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

_SEGMENT = st.text(alphabet=string.ascii_lowercase + string.digits + "-_", min_size=1, max_size=8)
_BASE = st.sampled_from(["/", "/app/", "/nested/base/"])


@st.composite
def _page_lists(draw: st.DrawFn) -> list[PageDescriptor]:
    names = draw(st.lists(_SEGMENT, unique=True, max_size=6))
    pages = [
        PageDescriptor(filename=f"{name}.html", template=f"{name}/{name}.html")
        for name in names
        if name != "index"
    ]
    if draw(st.booleans()):
        position = draw(st.integers(min_value=0, max_value=len(pages)))
        pages.insert(position, PageDescriptor(filename="index.html", template="index.html"))
    return pages


@given(pages=_page_lists(), base=_BASE)
@PROPERTY_SETTINGS
def test_default_page_rule_is_always_last(pages: list[PageDescriptor], base: str) -> None:
    rules = build_rewrite_rules(pages, base=base)
    kinds = [rule.matcher.kind for rule in rules]
    has_index = any(page.filename == "index.html" for page in pages)

    assert len(rules) == len(pages)
    assert kinds.count(MatchKind.CATCH_ALL) == (1 if has_index else 0)
    if has_index:
        assert kinds[-1] is MatchKind.CATCH_ALL
        assert rules[-1].page.filename == "index.html"


@given(pages=_page_lists(), base=_BASE, proxy=_SEGMENT, tail=st.lists(_SEGMENT, max_size=3))
@PROPERTY_SETTINGS
def test_proxied_paths_are_never_rewritten_to_templates(
    pages: list[PageDescriptor], base: str, proxy: str, tail: list[str]
) -> None:
    rules = build_rewrite_rules(pages, base=base, proxy_keys=[f"/{proxy}"])
    stripped = "/" + "/".join([proxy, *tail])
    request_path = base.rstrip("/") + stripped
    for rule in rules:
        assert rule.resolve(request_path) == stripped


@given(pages=_page_lists(), base=_BASE, proxy=_SEGMENT)
@PROPERTY_SETTINGS
def test_root_path_always_resolves_to_template(
    pages: list[PageDescriptor], base: str, proxy: str
) -> None:
    rules = build_rewrite_rules(pages, base=base, proxy_keys=["/", f"/{proxy}"])
    for rule in rules:
        assert rule.resolve(base) == rule.target
