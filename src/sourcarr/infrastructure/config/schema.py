"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
ResolutionPolicy = Literal["parallel", "fallback"]


class ResolverConfig(BaseModel):
    """Configuration for the source resolution orchestrator.

    All values configurable via YAML (resolver section) or ENV vars.
    """

    policy: ResolutionPolicy = Field(
        default="parallel",
        description=(
            "Default execution policy: 'parallel' queries every provider at "
            "once, 'fallback' queries them in order and stops at the first hit."
        ),
    )

    providers: list[str] = Field(
        default=["Cuevana", "PelisPlus", "RePelis", "FlixHQ"],
        description="Enabled providers in priority order.",
    )

    rendered_providers: list[str] = Field(
        default_factory=list,
        description=(
            "Page providers that should load their page in a headless browser "
            "instead of a plain HTTP fetch."
        ),
    )

    provider_timeout_seconds: float = Field(
        default=35.0,
        description="Per-provider timeout in seconds.",
    )

    request_deadline_seconds: float = Field(
        default=60.0,
        description="Overall deadline for one resolution request in seconds.",
    )

    consumet_base_url: str = Field(
        default="https://api-consumet-org-wg40.onrender.com",
        description="Base URL of the Consumet aggregation API.",
    )

    cache_enabled: bool = Field(
        default=False,
        description="Memoise results of identical lookups.",
    )

    cache_ttl_seconds: int = Field(
        default=600,
        description="TTL for memoised lookups (seconds).",
    )

    cache_directory: Optional[str] = Field(
        default=None,
        description="diskcache directory for memoised lookups (temporary if unset).",
    )

    @field_validator("provider_timeout_seconds", "request_deadline_seconds")
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("cache_ttl_seconds")
    @classmethod
    def _validate_cache_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache_ttl_seconds must be >= 0")
        return v

    @field_validator("providers")
    @classmethod
    def _validate_providers(cls, v: list[str]) -> list[str]:
        seen: set[str] = set()
        for name in v:
            key = name.lower()
            if key in seen:
                raise ValueError(f"provider listed twice: {name}")
            seen.add(key)
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/playwright/logging/resolver).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="sourcarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="HTTP timeout in seconds for static pages and API calls.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing requests (browser UA when unset).",
    )

    # Playwright (YAML section: playwright.*)
    playwright_headless: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "playwright_headless",
            AliasPath("playwright", "headless"),
        ),
        description="Run Playwright headless.",
    )
    playwright_navigation_timeout_ms: int = Field(
        default=30_000,
        validation_alias=AliasChoices(
            "playwright_navigation_timeout_ms",
            AliasPath("playwright", "navigation_timeout_ms"),
        ),
        description="Page navigation timeout in milliseconds.",
    )
    playwright_settle_ms: int = Field(
        default=3_000,
        validation_alias=AliasChoices(
            "playwright_settle_ms",
            AliasPath("playwright", "settle_ms"),
        ),
        description="Fixed delay after navigation for dynamic content.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Resolver (YAML section: resolver.*)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("playwright_navigation_timeout_ms")
    @classmethod
    def _validate_playwright_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("playwright_navigation_timeout_ms must be > 0")
        return v

    @field_validator("playwright_settle_ms")
    @classmethod
    def _validate_settle(cls, v: int) -> int:
        if v < 0:
            raise ValueError("playwright_settle_ms must be >= 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read SOURCARR_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - SOURCARR_HTTP_TIMEOUT_SECONDS
    - SOURCARR_PLAYWRIGHT_HEADLESS
    - SOURCARR_LOG_LEVEL
    - SOURCARR_POLICY
    - SOURCARR_PROVIDERS='["Cuevana","FlixHQ"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="SOURCARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    playwright_headless: Optional[bool] = None
    playwright_navigation_timeout_ms: Optional[int] = None
    playwright_settle_ms: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    policy: Optional[ResolutionPolicy] = None
    providers: Optional[list[str]] = None
    rendered_providers: Optional[list[str]] = None
    provider_timeout_seconds: Optional[float] = None
    request_deadline_seconds: Optional[float] = None
    consumet_base_url: Optional[str] = None
    cache_enabled: Optional[bool] = None
    cache_ttl_seconds: Optional[int] = None
    cache_directory: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
