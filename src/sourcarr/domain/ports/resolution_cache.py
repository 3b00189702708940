"""Port for memoising resolution results."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Hashable
from typing import Protocol, runtime_checkable

from sourcarr.domain.entities.lookup import StreamCandidate


@runtime_checkable
class ResolutionCachePort(Protocol):
    """Memoising cache with at most one in-flight resolution per key."""

    async def get_or_resolve(
        self,
        key: Hashable,
        resolver: Callable[[], Awaitable[list[StreamCandidate]]],
    ) -> list[StreamCandidate]:
        """Return the cached value for *key* or run *resolver* exactly once.

        Concurrent callers with the same key await the same resolution.
        """
        ...

    def clear(self) -> None:
        """Drop all cached entries (in-flight resolutions are unaffected)."""
        ...
