"""Title slugs for building provider URLs."""

from __future__ import annotations

import re
import unicodedata

_DISALLOWED_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-{2,}")


def make_slug(title: str | None) -> str:
    """Build a URL-safe slug from a media title.

    1. Lowercase
    2. NFD decomposition + combining-mark stripping (é → e, ñ → n)
    3. Drop everything outside ``[a-z0-9\\s-]``
    4. Whitespace runs → ``-``, hyphen runs collapsed, edges trimmed

    Total: ``None`` or an empty title yields ``""``.

    >>> make_slug("The   Matrix -- Reloaded")
    'the-matrix-reloaded'
    """
    if not title:
        return ""
    decomposed = unicodedata.normalize("NFD", str(title).lower())
    text = "".join(c for c in decomposed if not unicodedata.combining(c))
    text = _DISALLOWED_RE.sub("", text).strip()
    text = _WHITESPACE_RE.sub("-", text)
    text = _HYPHENS_RE.sub("-", text)
    return text.strip("-")
