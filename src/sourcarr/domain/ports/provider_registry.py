"""Port for provider discovery and access."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sourcarr.domain.providers.base import ProviderProtocol


@runtime_checkable
class ProviderRegistryPort(Protocol):
    """Synchronous interface for ordered provider listing and retrieval."""

    def list_names(self) -> list[str]: ...
    def get(self, name: str) -> ProviderProtocol: ...
    def ordered(self) -> list[ProviderProtocol]: ...
