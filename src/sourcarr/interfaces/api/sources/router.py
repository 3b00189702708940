"""Source lookup endpoints."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from sourcarr.domain.entities.lookup import LookupRequest
from sourcarr.domain.exceptions import InvalidLookupRequestError
from sourcarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["sources"])

_BANNER = "Stream source resolver"


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


@router.get("/")
async def index(request: Request) -> dict[str, Any]:
    """Service banner with the enabled providers."""
    state = cast(AppState, request.app.state)
    providers = getattr(state, "providers", None)
    return {
        "message": _BANNER,
        "providers": providers.list_names() if providers else [],
        "aggregator": state.config.resolver.consumet_base_url,
    }


@router.get("/api/sources")
async def get_sources(
    request: Request,
    media_type: str | None = Query(default=None, alias="type"),
    title: str | None = None,
    season: str | None = None,
    episode: str | None = None,
    policy: str | None = None,
) -> JSONResponse:
    """Resolve stream sources for a movie or a series episode.

    ``type`` is ``movie``, ``series`` or ``tv``; series lookups need
    ``season`` and ``episode``. ``policy`` overrides the configured
    resolution policy (``parallel`` or ``fallback``).
    """
    state = cast(AppState, request.app.state)

    try:
        lookup = LookupRequest.create(media_type, title, season, episode)
        sources = await state.resolve_sources_uc.execute(lookup, policy=policy)
    except InvalidLookupRequestError as exc:
        log.info(
            "sources_invalid_request",
            media_type=media_type,
            title=title,
            error=str(exc),
        )
        return _error(str(exc), 400)
    except Exception:
        log.error("sources_failed", media_type=media_type, title=title, exc_info=True)
        return _error("Failed to get sources", 500)

    return JSONResponse(content={"sources": [s.to_dict() for s in sources]})
