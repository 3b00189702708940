"""Shared base class for httpx-based providers.

Handles the parts every HTTP provider repeats: client lifecycle,
deadline-bounded fetches with structured error logging, JSON parsing
and cleanup.

The *domain* layer only knows ``ProviderProtocol``; providers that
inherit from ``HttpxProviderBase`` structurally satisfy it.
"""

from __future__ import annotations

import json
import time

import httpx
import structlog

from sourcarr.domain.entities.lookup import Deadline, LookupRequest
from sourcarr.domain.providers.base import ProviderKind, ProviderOutcome

from .constants import DEFAULT_CLIENT_TIMEOUT, DEFAULT_LANG, DEFAULT_USER_AGENT


class HttpxProviderBase:
    """Shared base for httpx-based providers.

    Subclasses **must** set ``name`` (class attribute or in ``__init__``
    before calling ``super().__init__()``) and override ``_resolve()``.

    ``resolve()`` wraps ``_resolve()`` so that no provider failure ever
    escapes to the orchestrator: errors are logged and become ``None``.
    """

    name: str = ""
    lang: str = DEFAULT_LANG
    kind: ProviderKind = "static"

    _timeout: float = DEFAULT_CLIENT_TIMEOUT
    _user_agent: str = DEFAULT_USER_AGENT
    _follow_redirects: bool = True

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
        follow_redirects: bool | None = None,
    ) -> None:
        self._client = http_client
        self._owns_client = http_client is None
        if timeout is not None:
            self._timeout = timeout
        if user_agent:
            self._user_agent = user_agent
        if follow_redirects is not None:
            self._follow_redirects = follow_redirects
        self._log = structlog.get_logger(self.name or __name__)

    # ------------------------------------------------------------------
    # Client lifecycle
    # ------------------------------------------------------------------

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Create httpx client if not already running."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=self._follow_redirects,
                headers={"User-Agent": self._user_agent},
            )
            self._owns_client = True
        return self._client

    async def cleanup(self) -> None:
        """Close httpx client (only if this provider created it)."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

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

    async def _safe_fetch(
        self,
        url: str,
        *,
        deadline: Deadline | None = None,
        context: str = "",
        **kwargs: object,
    ) -> httpx.Response | None:
        """GET *url* with structured error logging.

        The request timeout is bounded by whatever is left on *deadline*.
        Returns ``None`` on failure instead of raising.
        """
        timeout = self._timeout
        if deadline is not None:
            timeout = deadline.clamp(timeout)
            if timeout <= 0:
                self._log.warning(
                    "provider_deadline_exceeded",
                    provider=self.name,
                    url=url,
                    context=context,
                )
                return None

        client = await self._ensure_client()
        try:
            resp = await client.get(url, timeout=timeout, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.TimeoutException:
            self._log.warning(
                "provider_http_timeout",
                provider=self.name,
                url=url,
                context=context,
            )
        except httpx.HTTPStatusError as exc:
            self._log.warning(
                "provider_http_error",
                provider=self.name,
                url=url,
                status=exc.response.status_code,
                context=context,
            )
        except Exception as exc:  # noqa: BLE001
            self._log.warning(
                "provider_fetch_error",
                provider=self.name,
                url=url,
                error=str(exc),
                context=context,
            )
        return None

    def _safe_parse_json(
        self,
        response: httpx.Response,
        context: str = "",
    ) -> dict | list | None:
        """Parse JSON response with structured error logging."""
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError):
            self._log.warning(
                "provider_invalid_json",
                provider=self.name,
                url=str(response.url),
                context=context,
            )
            return None
