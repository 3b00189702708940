"""Memoisation of resolution results on top of diskcache."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from functools import partial
from pathlib import Path

import structlog
from diskcache import Cache as DiskCache

from sourcarr.domain.entities.lookup import StreamCandidate

log = structlog.get_logger(__name__)

Resolver = Callable[[], Awaitable[list[StreamCandidate]]]


@dataclass
class _Flight:
    task: asyncio.Task[list[StreamCandidate]]
    waiters: int = 0


class ResolutionCache:
    """TTL cache for resolved candidate lists with single-flight resolution.

    - Stored values live in a ``diskcache.Cache`` (SQLite); sync disk I/O
      runs via ``asyncio.to_thread``.
    - Concurrent callers with the same key share one in-flight task.
      A caller that gives up leaves the task running for the others;
      when the last caller gives up the task is cancelled.
    - Empty results are never stored. ``ttl_seconds=0`` disables storage
      but keeps single-flight.

    Args:
        directory: SQLite cache directory (a temporary one when ``None``).
        ttl_seconds: Lifetime of stored results.
    """

    def __init__(
        self,
        directory: str | Path | None = None,
        ttl_seconds: int = 600,
    ) -> None:
        self.directory = Path(directory) if directory is not None else None
        self.default_ttl = ttl_seconds
        self._cache: DiskCache | None = None
        self._inflight: dict[Hashable, _Flight] = {}

    # --- Context Manager ---
    async def __aenter__(self) -> ResolutionCache:
        await self._ensure_open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def _ensure_open(self) -> DiskCache:
        if self._cache is None:
            directory = str(self.directory) if self.directory is not None else None
            self._cache = await asyncio.to_thread(DiskCache, directory)
            log.info(
                "resolution_cache_opened",
                directory=self._cache.directory,
                ttl=self.default_ttl,
            )
        return self._cache

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("resolution_cache_closed")

    # --- ResolutionCachePort implementation ---
    async def get_or_resolve(
        self, key: Hashable, resolver: Resolver
    ) -> list[StreamCandidate]:
        flight = self._inflight.get(key)
        if flight is None:
            cache = await self._ensure_open()
            cached = await asyncio.to_thread(cache.get, key, None)
            if cached is not None:
                log.debug("resolution_cache_hit", key=key)
                return list(cached)

            # Re-check: another caller may have started while we read the disk.
            flight = self._inflight.get(key)
            if flight is None:
                log.debug("resolution_cache_miss", key=key)
                task = asyncio.create_task(self._resolve_and_store(key, resolver))
                flight = _Flight(task=task)
                self._inflight[key] = flight
                task.add_done_callback(partial(self._forget, key))
        else:
            log.debug("resolution_cache_join", key=key)

        flight.waiters += 1
        try:
            return list(await asyncio.shield(flight.task))
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                log.debug("resolution_cache_abandoned", key=key)
                flight.task.cancel()
                # Later callers must start afresh, not join a dying task.
                if self._inflight.get(key) is flight:
                    del self._inflight[key]

    def clear(self) -> None:
        if self._cache is not None:
            self._cache.clear()
            log.info("resolution_cache_cleared")

    # --- internals ---
    async def _resolve_and_store(
        self, key: Hashable, resolver: Resolver
    ) -> list[StreamCandidate]:
        value = list(await resolver())
        if value and self.default_ttl > 0:
            cache = await self._ensure_open()
            await asyncio.to_thread(cache.set, key, value, expire=self.default_ttl)
            log.debug("resolution_cache_set", key=key, count=len(value))
        return value

    def _forget(
        self, key: Hashable, task: asyncio.Task[list[StreamCandidate]]
    ) -> None:
        flight = self._inflight.get(key)
        if flight is not None and flight.task is task:
            del self._inflight[key]
