"""Embedded-player extraction from provider pages.

Provider pages wrap the actual stream in an ``<iframe>``. Layouts differ
per site and drift over time, so extraction walks an ordered selector
chain and returns the first usable ``src``.
"""

from __future__ import annotations

from collections.abc import Iterable

from bs4 import BeautifulSoup

from sourcarr.domain.entities.lookup import is_absolute_http_url

IFRAME_SELECTORS: tuple[str, ...] = (
    # ID-based
    "iframe#player",
    "iframe#iframe",
    "iframe#video-player",
    "iframe#embed",
    # class-based
    "iframe.player",
    "iframe.embed-responsive-item",
    "iframe.metaframe",
    "iframe.video-frame",
    # container-scoped
    "#player iframe",
    ".player iframe",
    ".video iframe",
    "#video iframe",
    ".embed iframe",
    # anything with a source
    "iframe[src]",
)

# Lazy-loading players keep the real URL in a data attribute.
_SRC_ATTRS: tuple[str, ...] = ("src", "data-src", "data-lazy-src")


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (lxml parser)."""
    return BeautifulSoup(html, "lxml")


def normalize_src(src: object) -> str | None:
    """Return an absolute http(s) URL for an iframe source, or ``None``.

    Protocol-relative sources (``//host/path``) are upgraded to https.
    """
    if not isinstance(src, str):
        return None
    value = src.strip()
    if value.startswith("//"):
        value = f"https:{value}"
    return value if is_absolute_http_url(value) else None


def find_iframe_src(
    html: str,
    selectors: Iterable[str] = IFRAME_SELECTORS,
) -> str | None:
    """Return the first usable iframe source in *html*.

    Selectors are tried in order; within a selector, matches are tried
    in document order. Iframes whose source is missing, relative or
    non-http are skipped (``about:blank`` placeholders are common).
    """
    if not html:
        return None
    soup = parse_html(html)
    for sel in selectors:
        for tag in soup.select(sel):
            for attr in _SRC_ATTRS:
                src = normalize_src(tag.get(attr))
                if src is not None:
                    return src
    return None
