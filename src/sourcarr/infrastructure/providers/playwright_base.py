"""Shared base class for Playwright-based providers.

Every call gets its own browser: Playwright is started, Chromium is
launched, a context and page are opened, and all four are released in
reverse order when the call ends, whether it succeeded, failed or was
cancelled.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

import structlog
from playwright.async_api import Page, async_playwright

from sourcarr.domain.entities.lookup import Deadline, LookupRequest
from sourcarr.domain.providers.base import ProviderKind, ProviderOutcome

from .constants import (
    DEFAULT_LANG,
    DEFAULT_NAVIGATION_TIMEOUT_MS,
    DEFAULT_SETTLE_MS,
    DEFAULT_USER_AGENT,
    DEFAULT_VIEWPORT,
)


class PlaywrightProviderBase:
    """Shared base for Playwright-based providers.

    Subclasses **must** set ``name`` and override ``_resolve()``.
    """

    name: str = ""
    lang: str = DEFAULT_LANG
    kind: ProviderKind = "rendered"

    _user_agent: str = DEFAULT_USER_AGENT
    _headless: bool = True
    _navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    _settle_ms: int = DEFAULT_SETTLE_MS

    def __init__(
        self,
        *,
        headless: bool | None = None,
        navigation_timeout_ms: int | None = None,
        settle_ms: int | None = None,
        user_agent: str | None = None,
    ) -> None:
        if headless is not None:
            self._headless = headless
        if navigation_timeout_ms is not None:
            self._navigation_timeout_ms = navigation_timeout_ms
        if settle_ms is not None:
            self._settle_ms = settle_ms
        if user_agent:
            self._user_agent = user_agent
        self._log = structlog.get_logger(self.name or __name__)

    # ------------------------------------------------------------------
    # Browser lifecycle
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _open_page(self) -> AsyncIterator[Page]:
        """Launch a private browser and yield a fresh page.

        Each resource is registered on the exit stack as soon as it
        exists, so a failure halfway through launch still releases what
        was already acquired, each exactly once.
        """
        async with AsyncExitStack() as stack:
            pw = await async_playwright().start()
            stack.push_async_callback(pw.stop)

            browser = await pw.chromium.launch(headless=self._headless)
            stack.push_async_callback(browser.close)
            self._log.debug("provider_browser_launched", provider=self.name)

            context = await browser.new_context(
                user_agent=self._user_agent,
                viewport=DEFAULT_VIEWPORT,
            )
            stack.push_async_callback(context.close)

            page = await context.new_page()
            stack.push_async_callback(page.close)

            yield page

    async def cleanup(self) -> None:
        """Nothing to release: browsers never outlive a single call."""

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def resolve(
        self,
        request: LookupRequest,
        *,
        deadline: Deadline | None = None,
    ) -> ProviderOutcome:
        """Resolve *request* to stream candidates; never raises."""
        deadline = deadline or Deadline.never()
        t0 = time.perf_counter()
        try:
            outcome = await self._resolve(request, deadline)
        except Exception as exc:  # noqa: BLE001
            self._log.warning(
                "provider_failed",
                provider=self.name,
                title=request.title,
                error=str(exc),
                error_type=type(exc).__name__,
                duration_ms=int((time.perf_counter() - t0) * 1000),
            )
            return None
        return outcome

    async def _resolve(
        self, request: LookupRequest, deadline: Deadline
    ) -> ProviderOutcome:
        raise NotImplementedError(f"{type(self).__name__}._resolve() not implemented")

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------

    async def _fetch_rendered_html(self, url: str, deadline: Deadline) -> str:
        """Navigate to *url*, let scripts settle, and return the DOM HTML.

        Returns an empty string when the deadline is already spent or the
        page answers with an error status. Navigation errors propagate.
        """
        nav_timeout_ms = int(deadline.clamp(self._navigation_timeout_ms / 1000) * 1000)
        if nav_timeout_ms <= 0:
            self._log.warning(
                "provider_deadline_exceeded", provider=self.name, url=url
            )
            return ""

        async with self._open_page() as page:
            resp = await page.goto(
                url, wait_until="domcontentloaded", timeout=nav_timeout_ms
            )
            if resp is not None and resp.status >= 400:
                self._log.warning(
                    "provider_page_error",
                    provider=self.name,
                    url=url,
                    status=resp.status,
                )
                return ""

            settle = deadline.clamp(self._settle_ms / 1000)
            if settle > 0:
                await asyncio.sleep(settle)
            return await page.content()
