"""Shared constants for providers."""

from __future__ import annotations

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

DEFAULT_LANG = "LAT"
DEFAULT_CLIENT_TIMEOUT = 15.0

# Headless browser limits for rendered pages.
DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000
DEFAULT_SETTLE_MS = 3_000
DEFAULT_VIEWPORT = {"width": 1280, "height": 720}
