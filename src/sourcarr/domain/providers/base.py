"""Domain protocol for stream providers."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal, Protocol, Union, runtime_checkable

from sourcarr.domain.entities.lookup import Deadline, LookupRequest, StreamCandidate

ProviderKind = Literal["static", "rendered", "aggregation"]

# A provider may yield nothing, a single candidate, or (aggregation APIs)
# several candidates at once. The orchestrator normalises all three.
ProviderOutcome = Union[StreamCandidate, Sequence[StreamCandidate], None]


@runtime_checkable
class ProviderProtocol(Protocol):
    """
    Protocol for stream providers.

    A provider must:
    - have ``name: str``, ``lang: str`` and ``kind: ProviderKind`` attributes
    - implement ``async def resolve(request, *, deadline) -> ProviderOutcome``
    - never raise from ``resolve()`` except for cancellation
    """

    name: str
    lang: str
    kind: ProviderKind

    async def resolve(
        self, request: LookupRequest, *, deadline: Deadline
    ) -> ProviderOutcome: ...

    async def cleanup(self) -> None: ...
