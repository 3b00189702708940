"""Source resolution use case.

LookupRequest -> provider calls (parallel or fallback)
-> normalise -> de-duplicate -> StreamCandidate list.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Hashable, Iterable, Sequence
from dataclasses import replace
from typing import Literal, Protocol

import structlog

from sourcarr.domain.entities.lookup import (
    DEFAULT_QUALITY,
    Deadline,
    LookupRequest,
    StreamCandidate,
)
from sourcarr.domain.exceptions import (
    InvalidLookupRequestError,
    ResolutionError,
)
from sourcarr.domain.ports.provider_registry import ProviderRegistryPort
from sourcarr.domain.ports.resolution_cache import ResolutionCachePort
from sourcarr.domain.providers.base import ProviderOutcome, ProviderProtocol

log = structlog.get_logger(__name__)

ResolutionPolicy = Literal["parallel", "fallback"]
POLICIES: tuple[str, ...] = ("parallel", "fallback")


class _ResolverConfig(Protocol):
    """Configuration values consumed by SourceResolutionUseCase."""

    policy: str
    provider_timeout_seconds: float
    request_deadline_seconds: float


def normalize_outcome(
    provider: ProviderProtocol, outcome: ProviderOutcome
) -> list[StreamCandidate]:
    """Flatten a provider outcome into valid candidates.

    Accepts ``None``, a single candidate or a sequence. Candidates
    without an absolute http(s) URL are dropped; missing provider name,
    language and quality are filled in.
    """
    if outcome is None:
        return []
    if isinstance(outcome, StreamCandidate):
        items: Sequence[object] = [outcome]
    elif isinstance(outcome, (list, tuple)):
        items = outcome
    else:
        log.warning(
            "provider_outcome_unsupported",
            provider=provider.name,
            outcome_type=type(outcome).__name__,
        )
        return []

    out: list[StreamCandidate] = []
    for item in items:
        if not isinstance(item, StreamCandidate):
            log.debug("candidate_dropped", provider=provider.name, reason="type")
            continue
        if not item.is_valid:
            log.debug(
                "candidate_dropped",
                provider=provider.name,
                reason="url",
                url=item.url,
            )
            continue
        out.append(
            replace(
                item,
                url=item.url.strip(),
                provider_name=item.provider_name or provider.name,
                lang=item.lang or provider.lang,
                quality=item.quality or DEFAULT_QUALITY,
            )
        )
    return out


def deduplicate_by_url(candidates: Iterable[StreamCandidate]) -> list[StreamCandidate]:
    """Drop repeated URLs, keeping the first (highest priority) occurrence."""
    seen: set[str] = set()
    out: list[StreamCandidate] = []
    for candidate in candidates:
        if candidate.url in seen:
            continue
        seen.add(candidate.url)
        out.append(candidate)
    return out


def cache_key(request: LookupRequest, policy: str) -> Hashable:
    title = " ".join(request.title.casefold().split())
    return (request.media_type.value, title, request.season, request.episode, policy)


class SourceResolutionUseCase:
    """Resolve a lookup request into playable stream candidates.

    Policies:
        parallel: every provider is started before any is awaited; the
            result keeps provider priority order regardless of which
            provider finishes first.
        fallback: providers run one at a time in priority order; the
            first provider yielding at least one candidate wins and the
            rest are never started.

    Provider failures and timeouts count as "no result". Only an invalid
    request (``InvalidLookupRequestError``) or a fault in the loop itself
    (``ResolutionError``) is raised.
    """

    def __init__(
        self,
        *,
        providers: ProviderRegistryPort,
        config: _ResolverConfig,
        cache: ResolutionCachePort | None = None,
    ) -> None:
        self._providers = providers
        self._default_policy = config.policy
        self._provider_timeout = config.provider_timeout_seconds
        self._request_deadline = config.request_deadline_seconds
        self._cache = cache

    async def execute(
        self,
        request: LookupRequest,
        *,
        policy: str | None = None,
        deadline: Deadline | None = None,
    ) -> list[StreamCandidate]:
        if not isinstance(request, LookupRequest):
            raise InvalidLookupRequestError("Missing type or title")
        # Instances can be mutated past __post_init__ via object.__setattr__.
        request.validate()
        chosen = (policy or self._default_policy).strip().lower()
        if chosen not in POLICIES:
            raise InvalidLookupRequestError(
                f"Unsupported policy: {policy!r} (expected parallel or fallback)"
            )
        deadline = deadline or Deadline.after(self._request_deadline)

        if self._cache is None:
            return await self._run(request, chosen, deadline)
        return await self._cache.get_or_resolve(
            cache_key(request, chosen),
            lambda: self._run(request, chosen, deadline),
        )

    async def _run(
        self, request: LookupRequest, policy: str, deadline: Deadline
    ) -> list[StreamCandidate]:
        t0 = time.perf_counter()
        log.info(
            "resolution_start",
            media_type=request.media_type.value,
            title=request.title,
            season=request.season,
            episode=request.episode,
            policy=policy,
        )
        try:
            providers = self._providers.ordered()
            if policy == "parallel":
                candidates = await self._resolve_parallel(providers, request, deadline)
            else:
                candidates = await self._resolve_fallback(providers, request, deadline)
            result = deduplicate_by_url(candidates)
        except Exception as exc:
            log.error("resolution_failed", title=request.title, exc_info=True)
            raise ResolutionError(f"Resolution failed for {request.title!r}") from exc

        log.info(
            "resolution_complete",
            title=request.title,
            policy=policy,
            providers=len(providers),
            candidates=len(result),
            duration_ms=int((time.perf_counter() - t0) * 1000),
        )
        return result

    async def _resolve_parallel(
        self,
        providers: list[ProviderProtocol],
        request: LookupRequest,
        deadline: Deadline,
    ) -> list[StreamCandidate]:
        """All providers at once; results in priority order."""
        tasks = [self._resolve_one(p, request, deadline) for p in providers]
        # gather() keeps input order, not completion order
        per_provider = await asyncio.gather(*tasks)

        out: list[StreamCandidate] = []
        for candidates in per_provider:
            out.extend(candidates)
        return out

    async def _resolve_fallback(
        self,
        providers: list[ProviderProtocol],
        request: LookupRequest,
        deadline: Deadline,
    ) -> list[StreamCandidate]:
        """One provider at a time; stop at the first hit."""
        for idx, provider in enumerate(providers):
            if deadline.expired:
                log.warning(
                    "resolution_deadline_exceeded",
                    skipped=[p.name for p in providers[idx:]],
                )
                break
            candidates = await self._resolve_one(provider, request, deadline)
            if candidates:
                log.info("fallback_hit", provider=provider.name, position=idx)
                return candidates
        return []

    async def _resolve_one(
        self,
        provider: ProviderProtocol,
        request: LookupRequest,
        deadline: Deadline,
    ) -> list[StreamCandidate]:
        """Call one provider with a deadline-bounded timeout; never raises
        except on cancellation."""
        timeout = deadline.clamp(self._provider_timeout)
        if timeout <= 0:
            log.warning("provider_skipped_deadline", provider=provider.name)
            return []

        t0 = time.perf_counter()
        try:
            outcome = await asyncio.wait_for(
                provider.resolve(request, deadline=deadline),
                timeout=timeout,
            )
        except TimeoutError:
            log.warning("provider_timeout", provider=provider.name, timeout=timeout)
            return []
        except Exception:
            log.warning("provider_error", provider=provider.name, exc_info=True)
            return []

        candidates = normalize_outcome(provider, outcome)
        duration_ms = int((time.perf_counter() - t0) * 1000)
        if candidates:
            log.info(
                "provider_resolved",
                provider=provider.name,
                count=len(candidates),
                duration_ms=duration_ms,
            )
        else:
            log.info("provider_empty", provider=provider.name, duration_ms=duration_ms)
        return candidates
