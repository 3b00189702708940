"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import State

from sourcarr.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from sourcarr.application.use_cases.resolve_sources import SourceResolutionUseCase
    from sourcarr.infrastructure.cache import ResolutionCache
    from sourcarr.infrastructure.providers import ProviderRegistry


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Providers in priority order
    providers: ProviderRegistry

    # Memoisation (optional, resolver.cache_enabled)
    resolution_cache: ResolutionCache | None

    # Application Services
    resolve_sources_uc: SourceResolutionUseCase
