"""Built-in provider table and construction from configuration."""

from __future__ import annotations

import structlog

from sourcarr.domain.providers import ProviderConfigError, ProviderProtocol
from sourcarr.infrastructure.config.schema import AppConfig

from .consumet import ConsumetProvider
from .page_provider import IframePageProvider, ProviderSpec, RenderedIframeProvider
from .registry import ProviderRegistry

log = structlog.get_logger(__name__)

PAGE_PROVIDERS: dict[str, ProviderSpec] = {
    "cuevana": ProviderSpec(
        name="Cuevana",
        movie_template="https://cuevana.bi/pelicula/{slug}",
        series_template=(
            "https://cuevana.bi/serie/{slug}/temporada-{season}/episodio-{episode}"
        ),
    ),
    "pelisplus": ProviderSpec(
        name="PelisPlus",
        movie_template="https://pelisplus.lat/pelicula/{slug}",
        series_template=(
            "https://pelisplus.lat/serie/{slug}/temporada-{season}/episodio-{episode}"
        ),
    ),
    "repelis": ProviderSpec(
        name="RePelis",
        movie_template="https://repelishd.city/pelicula/{slug}",
        series_template=(
            "https://repelishd.city/serie/{slug}-temporada-{season}-episodio-{episode}"
        ),
    ),
}

AGGREGATION_PROVIDERS: frozenset[str] = frozenset({"flixhq"})


def known_provider_names() -> list[str]:
    return [spec.name for spec in PAGE_PROVIDERS.values()] + [ConsumetProvider.name]


def build_provider(name: str, config: AppConfig) -> ProviderProtocol:
    """Instantiate the provider called *name* (case-insensitive).

    Raises:
        ProviderConfigError: *name* is not in the built-in table.
    """
    key = name.strip().lower()
    rendered = {n.lower() for n in config.resolver.rendered_providers}

    spec = PAGE_PROVIDERS.get(key)
    if spec is not None:
        if key in rendered:
            return RenderedIframeProvider(
                spec,
                headless=config.playwright_headless,
                navigation_timeout_ms=config.playwright_navigation_timeout_ms,
                settle_ms=config.playwright_settle_ms,
                user_agent=config.http_user_agent,
            )
        return IframePageProvider(
            spec,
            timeout=config.http_timeout_seconds,
            user_agent=config.http_user_agent,
            follow_redirects=config.http_follow_redirects,
        )

    if key in AGGREGATION_PROVIDERS:
        if key in rendered:
            raise ProviderConfigError(f"Provider '{name}' cannot be rendered")
        return ConsumetProvider(
            base_url=config.resolver.consumet_base_url,
            timeout=config.http_timeout_seconds,
            user_agent=config.http_user_agent,
            follow_redirects=config.http_follow_redirects,
        )

    raise ProviderConfigError(
        f"Unknown provider '{name}' (known: {', '.join(known_provider_names())})"
    )


def build_registry(config: AppConfig) -> ProviderRegistry:
    """Build the registry for the enabled providers, in configured order."""
    enabled = {n.lower() for n in config.resolver.providers}
    for name in config.resolver.rendered_providers:
        if name.lower() not in enabled:
            raise ProviderConfigError(
                f"Rendered provider '{name}' is not in the enabled providers list"
            )

    registry = ProviderRegistry(
        build_provider(name, config) for name in config.resolver.providers
    )
    log.info(
        "providers_built",
        providers={p.name: p.kind for p in registry.ordered()},
    )
    return registry
