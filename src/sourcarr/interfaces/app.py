"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from sourcarr.infrastructure.config import AppConfig
from sourcarr.interfaces.app_state import AppState
from sourcarr.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration only, no resource initialization.

    Resources (providers, cache, use case) are created in lifespan().
    """
    app = FastAPI(
        title="Sourcarr",
        description="Stream source resolver for movies and series",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    from sourcarr.interfaces.api.sources.router import router as sources_router

    app.include_router(sources_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        """Liveness probe: returns 200 as long as the process is running."""
        providers = getattr(app.state, "providers", None)
        ordered = providers.ordered() if providers else []
        return {
            "status": "ok",
            "providers": [p.name for p in ordered],
            "kinds": {p.name: p.kind for p in ordered},
        }

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
