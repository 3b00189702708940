"""Tests for PlaywrightProviderBase per-call browser scope."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sourcarr.domain.entities.lookup import Deadline, LookupRequest
from sourcarr.infrastructure.providers.page_provider import (
    ProviderSpec,
    RenderedIframeProvider,
)
from sourcarr.infrastructure.providers.playwright_base import PlaywrightProviderBase

_PATCH_TARGET = "sourcarr.infrastructure.providers.playwright_base.async_playwright"

_SPEC = ProviderSpec(
    name="Rendered",
    movie_template="https://rendered.example/pelicula/{slug}",
    series_template="https://rendered.example/serie/{slug}/{season}/{episode}",
)


class _TestProvider(PlaywrightProviderBase):
    name = "test-pw"


# ---------------------------------------------------------------------------
# Mock Playwright stack
# ---------------------------------------------------------------------------


class _Stack:
    """Mocked playwright -> browser -> context -> page chain.

    ``released`` records close/stop calls in order.
    """

    def __init__(self, *, status: int = 200, content: str = "<html></html>") -> None:
        self.released: list[str] = []

        self.page = AsyncMock()
        self.page.goto = AsyncMock(return_value=MagicMock(status=status))
        self.page.content = AsyncMock(return_value=content)
        self.page.close = AsyncMock(side_effect=lambda: self.released.append("page"))

        self.context = AsyncMock()
        self.context.new_page = AsyncMock(return_value=self.page)
        self.context.close = AsyncMock(
            side_effect=lambda: self.released.append("context")
        )

        self.browser = AsyncMock()
        self.browser.new_context = AsyncMock(return_value=self.context)
        self.browser.close = AsyncMock(
            side_effect=lambda: self.released.append("browser")
        )

        self.pw = AsyncMock()
        self.pw.chromium.launch = AsyncMock(return_value=self.browser)
        self.pw.stop = AsyncMock(side_effect=lambda: self.released.append("playwright"))

    def install(self, mock_apw: MagicMock) -> None:
        mock_apw.return_value.start = AsyncMock(return_value=self.pw)


_FULL_RELEASE = ["page", "context", "browser", "playwright"]


# ---------------------------------------------------------------------------
# _open_page
# ---------------------------------------------------------------------------


class TestOpenPage:
    async def test_launch_uses_configured_options(self) -> None:
        stack = _Stack()
        provider = _TestProvider(headless=False, user_agent="UA/2.0")
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            async with provider._open_page() as page:
                assert page is stack.page

        stack.pw.chromium.launch.assert_awaited_once_with(headless=False)
        ctx_kwargs = stack.browser.new_context.await_args.kwargs
        assert ctx_kwargs["user_agent"] == "UA/2.0"
        assert ctx_kwargs["viewport"] == {"width": 1280, "height": 720}

    async def test_releases_in_reverse_order(self) -> None:
        stack = _Stack()
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            async with _TestProvider()._open_page():
                assert stack.released == []

        assert stack.released == _FULL_RELEASE

    async def test_releases_on_error_inside_scope(self) -> None:
        stack = _Stack()
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            with pytest.raises(RuntimeError):
                async with _TestProvider()._open_page():
                    raise RuntimeError("navigation exploded")

        assert stack.released == _FULL_RELEASE

    async def test_partial_launch_releases_what_exists(self) -> None:
        stack = _Stack()
        stack.browser.new_context = AsyncMock(side_effect=RuntimeError("no context"))
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            with pytest.raises(RuntimeError):
                async with _TestProvider()._open_page():
                    pass

        assert stack.released == ["browser", "playwright"]


# ---------------------------------------------------------------------------
# _fetch_rendered_html
# ---------------------------------------------------------------------------


class TestFetchRenderedHtml:
    async def test_returns_dom(self) -> None:
        stack = _Stack(content="<html><body>rendered</body></html>")
        provider = _TestProvider(settle_ms=0)
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            html = await provider._fetch_rendered_html(
                "https://site.example/p", Deadline.never()
            )

        assert "rendered" in html
        kwargs = stack.page.goto.await_args.kwargs
        assert kwargs["timeout"] == 30_000
        assert kwargs["wait_until"] == "domcontentloaded"

    async def test_navigation_timeout_clamped_by_deadline(self) -> None:
        stack = _Stack()
        provider = _TestProvider(settle_ms=0)
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            await provider._fetch_rendered_html("https://site.example/p", Deadline.after(2.0))

        assert 0 < stack.page.goto.await_args.kwargs["timeout"] <= 2_000

    async def test_error_status_returns_empty(self) -> None:
        stack = _Stack(status=503)
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            html = await _TestProvider(settle_ms=0)._fetch_rendered_html(
                "https://site.example/p", Deadline.never()
            )

        assert html == ""
        stack.page.content.assert_not_awaited()
        assert stack.released == _FULL_RELEASE

    async def test_spent_deadline_never_launches(self) -> None:
        with patch(_PATCH_TARGET) as mock_apw:
            html = await _TestProvider()._fetch_rendered_html(
                "https://site.example/p", Deadline(expires_at=0.0)
            )
        assert html == ""
        mock_apw.assert_not_called()

    async def test_cancellation_releases_browser(self) -> None:
        stack = _Stack()

        async def _hang(*args: object, **kwargs: object) -> None:
            await asyncio.sleep(10)

        stack.page.goto = AsyncMock(side_effect=_hang)
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            task = asyncio.create_task(
                _TestProvider()._fetch_rendered_html(
                    "https://site.example/p", Deadline.never()
                )
            )
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert stack.released == _FULL_RELEASE


# ---------------------------------------------------------------------------
# Browser released exactly once per resolve outcome
# ---------------------------------------------------------------------------


class TestRenderedProviderRelease:
    async def test_success(self, movie_request: LookupRequest) -> None:
        stack = _Stack(content='<iframe id="player" src="https://embed.example/e/1">')
        provider = RenderedIframeProvider(_SPEC, settle_ms=0)
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            result = await provider.resolve(movie_request, deadline=Deadline.never())

        assert result is not None
        assert result.url == "https://embed.example/e/1"
        assert result.provider_name == "Rendered"
        stack.page.goto.assert_awaited_once()
        assert stack.page.goto.await_args.args[0] == (
            "https://rendered.example/pelicula/inception"
        )
        assert stack.released == _FULL_RELEASE

    async def test_no_iframe(self, movie_request: LookupRequest) -> None:
        stack = _Stack(content="<html><body>no player</body></html>")
        provider = RenderedIframeProvider(_SPEC, settle_ms=0)
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            result = await provider.resolve(movie_request, deadline=Deadline.never())

        assert result is None
        assert stack.released == _FULL_RELEASE

    async def test_navigation_error(self, movie_request: LookupRequest) -> None:
        stack = _Stack()
        stack.page.goto = AsyncMock(side_effect=RuntimeError("net::ERR_NAME_NOT_RESOLVED"))
        provider = RenderedIframeProvider(_SPEC, settle_ms=0)
        with patch(_PATCH_TARGET) as mock_apw:
            stack.install(mock_apw)
            result = await provider.resolve(movie_request, deadline=Deadline.never())

        assert result is None
        assert stack.released == _FULL_RELEASE
        for handle in (stack.page, stack.context, stack.browser):
            handle.close.assert_awaited_once()
        stack.pw.stop.assert_awaited_once()

    async def test_cleanup_is_noop(self) -> None:
        await RenderedIframeProvider(_SPEC).cleanup()
