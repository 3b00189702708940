"""Tests for the /api/sources and / endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from sourcarr.application.use_cases.resolve_sources import SourceResolutionUseCase
from sourcarr.domain.entities.lookup import LookupRequest, MediaType, StreamCandidate
from sourcarr.domain.exceptions import (
    InvalidLookupRequestError,
    ResolutionError,
)
from sourcarr.infrastructure.config.schema import AppConfig
from sourcarr.interfaces.api.sources.router import router


def _make_app(
    *,
    resolve_sources_uc: object | None = None,
    provider_names: list[str] | None = None,
) -> FastAPI:
    """Create a minimal FastAPI app with the sources router."""
    app = FastAPI()
    app.include_router(router)

    app.state.config = AppConfig()

    providers = MagicMock()
    providers.list_names.return_value = provider_names or []
    app.state.providers = providers

    if resolve_sources_uc is None:
        resolve_sources_uc = AsyncMock()
        resolve_sources_uc.execute = AsyncMock(return_value=[])
    app.state.resolve_sources_uc = resolve_sources_uc
    return app


def _uc(result=None, error: Exception | None = None) -> AsyncMock:
    uc = AsyncMock()
    uc.execute = AsyncMock(return_value=result or [], side_effect=error)
    return uc


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_missing_title(self) -> None:
        uc = _uc()
        resp = TestClient(_make_app(resolve_sources_uc=uc)).get(
            "/api/sources", params={"type": "movie"}
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing type or title"}
        uc.execute.assert_not_awaited()

    def test_missing_type(self) -> None:
        uc = _uc()
        resp = TestClient(_make_app(resolve_sources_uc=uc)).get(
            "/api/sources", params={"title": "Inception"}
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing type or title"}
        uc.execute.assert_not_awaited()

    def test_blank_title(self) -> None:
        resp = TestClient(_make_app()).get(
            "/api/sources", params={"type": "movie", "title": "  "}
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing type or title"}

    def test_unknown_type(self) -> None:
        resp = TestClient(_make_app()).get(
            "/api/sources", params={"type": "anime", "title": "Akira"}
        )
        assert resp.status_code == 400
        assert "Unsupported type" in resp.json()["error"]

    def test_series_without_episode(self) -> None:
        uc = _uc()
        resp = TestClient(_make_app(resolve_sources_uc=uc)).get(
            "/api/sources", params={"type": "tv", "title": "Dark", "season": "1"}
        )
        assert resp.status_code == 400
        assert "season and episode" in resp.json()["error"]
        uc.execute.assert_not_awaited()

    def test_invalid_policy_from_use_case(self) -> None:
        uc = _uc(error=InvalidLookupRequestError("Unsupported policy: 'x'"))
        resp = TestClient(_make_app(resolve_sources_uc=uc)).get(
            "/api/sources", params={"type": "movie", "title": "Inception", "policy": "x"}
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Unsupported policy: 'x'"}


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestSources:
    def test_movie(self) -> None:
        uc = _uc(
            [
                StreamCandidate(
                    provider_name="Cuevana", url="https://embed.example/e/1", lang="LAT"
                )
            ]
        )
        resp = TestClient(_make_app(resolve_sources_uc=uc)).get(
            "/api/sources", params={"type": "movie", "title": "Inception"}
        )

        assert resp.status_code == 200
        assert resp.json() == {
            "sources": [
                {
                    "name": "Cuevana",
                    "url": "https://embed.example/e/1",
                    "lang": "LAT",
                    "quality": "auto",
                }
            ]
        }
        uc.execute.assert_awaited_once_with(
            LookupRequest(media_type=MediaType.MOVIE, title="Inception"), policy=None
        )

    def test_tv_alias_and_policy_forwarded(self) -> None:
        uc = _uc()
        TestClient(_make_app(resolve_sources_uc=uc)).get(
            "/api/sources",
            params={
                "type": "tv",
                "title": "Dark",
                "season": "2",
                "episode": "3",
                "policy": "fallback",
            },
        )
        uc.execute.assert_awaited_once_with(
            LookupRequest(media_type=MediaType.SERIES, title="Dark", season=2, episode=3),
            policy="fallback",
        )

    def test_no_sources_is_200(self) -> None:
        resp = TestClient(_make_app(resolve_sources_uc=_uc([]))).get(
            "/api/sources", params={"type": "movie", "title": "Nothing"}
        )
        assert resp.status_code == 200
        assert resp.json() == {"sources": []}

    def test_internal_fault_is_500(self) -> None:
        uc = _uc(error=ResolutionError("loop fault"))
        resp = TestClient(_make_app(resolve_sources_uc=uc)).get(
            "/api/sources", params={"type": "movie", "title": "Inception"}
        )
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to get sources"}

    def test_end_to_end_with_real_use_case(self, make_provider, make_registry) -> None:
        provider_a = make_provider(
            "A",
            StreamCandidate(provider_name="A", url="https://cdn.example/a/1", lang="LAT"),
        )
        provider_b = make_provider("B", None)
        uc = SourceResolutionUseCase(
            providers=make_registry([provider_a, provider_b]),
            config=AppConfig().resolver,
        )

        resp = TestClient(_make_app(resolve_sources_uc=uc)).get(
            "/api/sources", params={"type": "movie", "title": "Inception"}
        )

        assert resp.status_code == 200
        assert resp.json() == {
            "sources": [
                {
                    "name": "A",
                    "url": "https://cdn.example/a/1",
                    "lang": "LAT",
                    "quality": "auto",
                }
            ]
        }


# ---------------------------------------------------------------------------
# Banner
# ---------------------------------------------------------------------------


class TestIndex:
    def test_banner(self) -> None:
        app = _make_app(provider_names=["Cuevana", "FlixHQ"])
        resp = TestClient(app).get("/")

        assert resp.status_code == 200
        data = resp.json()
        assert data["message"]
        assert data["providers"] == ["Cuevana", "FlixHQ"]
        assert data["aggregator"] == "https://api-consumet-org-wg40.onrender.com"
