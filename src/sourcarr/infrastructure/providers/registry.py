"""In-memory provider registry preserving priority order."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from sourcarr.domain.providers import (
    DuplicateProviderError,
    ProviderNotFoundError,
    ProviderProtocol,
)

log = structlog.get_logger(__name__)


class ProviderRegistry:
    """
    Ordered provider registry.

    Registration order is priority order: ``ordered()`` returns providers
    in the order they were registered. Names are unique case-insensitively;
    ``get()`` accepts any casing.
    """

    def __init__(self, providers: Iterable[ProviderProtocol] = ()) -> None:
        self._providers: list[ProviderProtocol] = []
        self._by_key: dict[str, ProviderProtocol] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: ProviderProtocol) -> None:
        key = provider.name.lower()
        if key in self._by_key:
            raise DuplicateProviderError(f"Duplicate provider name: '{provider.name}'")
        self._providers.append(provider)
        self._by_key[key] = provider
        log.debug("provider_registered", provider=provider.name)

    def list_names(self) -> list[str]:
        return [p.name for p in self._providers]

    def get(self, name: str) -> ProviderProtocol:
        try:
            return self._by_key[name.lower()]
        except KeyError:
            raise ProviderNotFoundError(f"Provider '{name}' not found") from None

    def ordered(self) -> list[ProviderProtocol]:
        return list(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    async def cleanup_all(self) -> None:
        """Call ``cleanup()`` on every provider; one failure does not stop the rest."""
        for provider in self._providers:
            try:
                await provider.cleanup()
            except Exception as exc:  # noqa: BLE001
                log.warning(
                    "provider_cleanup_failed",
                    provider=provider.name,
                    error=str(exc),
                )
