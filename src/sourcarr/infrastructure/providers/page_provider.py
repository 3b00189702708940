"""Page providers: build a page URL from a template, extract the player iframe."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from sourcarr.domain.entities.lookup import Deadline, LookupRequest, StreamCandidate
from sourcarr.domain.providers.base import ProviderOutcome

from .constants import DEFAULT_LANG
from .httpx_base import HttpxProviderBase
from .iframe import IFRAME_SELECTORS, find_iframe_src
from .playwright_base import PlaywrightProviderBase
from .slug import make_slug


@dataclass(frozen=True)
class ProviderSpec:
    """Static description of one page provider.

    Templates use ``str.format`` fields ``{slug}``, ``{season}`` and
    ``{episode}``.
    """

    name: str
    movie_template: str
    series_template: str
    lang: str = DEFAULT_LANG
    selectors: tuple[str, ...] = IFRAME_SELECTORS

    def build_url(self, request: LookupRequest) -> str | None:
        """Page URL for *request*, or ``None`` when the title has no slug."""
        slug = make_slug(request.title)
        if not slug:
            return None
        if request.is_series:
            return self.series_template.format(
                slug=slug, season=request.season, episode=request.episode
            )
        return self.movie_template.format(slug=slug)


def _candidate(spec: ProviderSpec, src: str) -> StreamCandidate:
    return StreamCandidate(provider_name=spec.name, url=src, lang=spec.lang)


class IframePageProvider(HttpxProviderBase):
    """Fetches the provider page over plain HTTP and reads the iframe."""

    kind = "static"

    def __init__(
        self,
        spec: ProviderSpec,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
        follow_redirects: bool | None = None,
    ) -> None:
        self.spec = spec
        self.name = spec.name
        self.lang = spec.lang
        super().__init__(
            http_client=http_client,
            timeout=timeout,
            user_agent=user_agent,
            follow_redirects=follow_redirects,
        )

    async def _resolve(
        self, request: LookupRequest, deadline: Deadline
    ) -> ProviderOutcome:
        url = self.spec.build_url(request)
        if url is None:
            self._log.info("provider_empty_slug", provider=self.name, title=request.title)
            return None

        resp = await self._safe_fetch(url, deadline=deadline, context="page")
        if resp is None:
            return None

        src = find_iframe_src(resp.text, self.spec.selectors)
        if src is None:
            self._log.info("provider_no_iframe", provider=self.name, url=url)
            return None

        self._log.debug("provider_iframe_found", provider=self.name, url=url, src=src)
        return _candidate(self.spec, src)


class RenderedIframeProvider(PlaywrightProviderBase):
    """Loads the provider page in a headless browser and reads the iframe.

    For sites that inject the player with JavaScript after load.
    """

    kind = "rendered"

    def __init__(
        self,
        spec: ProviderSpec,
        *,
        headless: bool | None = None,
        navigation_timeout_ms: int | None = None,
        settle_ms: int | None = None,
        user_agent: str | None = None,
    ) -> None:
        self.spec = spec
        self.name = spec.name
        self.lang = spec.lang
        super().__init__(
            headless=headless,
            navigation_timeout_ms=navigation_timeout_ms,
            settle_ms=settle_ms,
            user_agent=user_agent,
        )

    async def _resolve(
        self, request: LookupRequest, deadline: Deadline
    ) -> ProviderOutcome:
        url = self.spec.build_url(request)
        if url is None:
            self._log.info("provider_empty_slug", provider=self.name, title=request.title)
            return None

        html = await self._fetch_rendered_html(url, deadline)
        src = find_iframe_src(html, self.spec.selectors)
        if src is None:
            self._log.info("provider_no_iframe", provider=self.name, url=url)
            return None

        self._log.debug("provider_iframe_found", provider=self.name, url=url, src=src)
        return _candidate(self.spec, src)
