"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import structlog
from fastapi import FastAPI

from sourcarr.application.use_cases.resolve_sources import SourceResolutionUseCase
from sourcarr.infrastructure.cache import ResolutionCache
from sourcarr.infrastructure.providers import build_registry
from sourcarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Provider registry (validates the configured provider table)
        2. Resolution cache (optional)
        3. Source resolution use case (uses both)
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) Providers
    state.providers = build_registry(config)

    # 2) Cache
    state.resolution_cache = None
    if config.resolver.cache_enabled:
        cache = ResolutionCache(
            directory=config.resolver.cache_directory,
            ttl_seconds=config.resolver.cache_ttl_seconds,
        )
        await cache.__aenter__()
        state.resolution_cache = cache

    # 3) Use case
    state.resolve_sources_uc = SourceResolutionUseCase(
        providers=state.providers,
        config=config.resolver,
        cache=state.resolution_cache,
    )

    log.info(
        "app_startup_complete",
        providers=state.providers.list_names(),
        policy=config.resolver.policy,
        cache_enabled=config.resolver.cache_enabled,
    )

    try:
        yield
    finally:
        await state.providers.cleanup_all()
        log.info("providers_cleaned_up")

        if state.resolution_cache is not None:
            await state.resolution_cache.aclose()
            log.info("cache_closed")

        log.info("app_shutdown_complete")
