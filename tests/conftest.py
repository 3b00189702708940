"""Shared test fixtures for the Sourcarr test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from sourcarr.domain.entities.lookup import (
    Deadline,
    LookupRequest,
    MediaType,
    StreamCandidate,
)
from sourcarr.domain.providers.base import ProviderOutcome

# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------


class FakeProvider:
    """Scriptable provider recording every call.

    ``outcome`` is returned after ``delay`` seconds; ``error`` is raised
    instead when set. ``events`` (shared between providers) records
    ``("start", name)`` / ``("end", name)`` in call order.
    """

    kind = "static"

    def __init__(
        self,
        name: str,
        outcome: ProviderOutcome = None,
        *,
        delay: float = 0.0,
        error: BaseException | None = None,
        lang: str = "LAT",
        events: list[tuple[str, str]] | None = None,
    ) -> None:
        self.name = name
        self.lang = lang
        self.outcome = outcome
        self.delay = delay
        self.error = error
        self.events = events if events is not None else []
        self.calls: list[LookupRequest] = []
        self.deadlines: list[Deadline] = []
        self.cleaned_up = False

    async def resolve(
        self, request: LookupRequest, *, deadline: Deadline
    ) -> ProviderOutcome:
        self.calls.append(request)
        self.deadlines.append(deadline)
        self.events.append(("start", self.name))
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return self.outcome
        finally:
            self.events.append(("end", self.name))

    async def cleanup(self) -> None:
        self.cleaned_up = True


class FakeRegistry:
    """Minimal ProviderRegistryPort over a fixed list."""

    def __init__(self, providers: Sequence[FakeProvider]) -> None:
        self._providers = list(providers)

    def list_names(self) -> list[str]:
        return [p.name for p in self._providers]

    def get(self, name: str) -> FakeProvider:
        for p in self._providers:
            if p.name == name:
                return p
        raise KeyError(name)

    def ordered(self) -> list[FakeProvider]:
        return list(self._providers)


def _candidate(
    provider: str, url: str, *, quality: str = "auto", name: str = ""
) -> StreamCandidate:
    return StreamCandidate(
        provider_name=provider, url=url, lang="LAT", quality=quality, name=name
    )


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def movie_request() -> LookupRequest:
    return LookupRequest(media_type=MediaType.MOVIE, title="Inception")


@pytest.fixture()
def series_request() -> LookupRequest:
    return LookupRequest(
        media_type=MediaType.SERIES, title="Breaking Bad", season=1, episode=2
    )


# ---------------------------------------------------------------------------
# Provider fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_provider() -> type[FakeProvider]:
    """The FakeProvider class, for building scripted providers in tests."""
    return FakeProvider


@pytest.fixture()
def make_registry() -> type[FakeRegistry]:
    return FakeRegistry


@pytest.fixture()
def make_candidate():
    """Factory for LAT StreamCandidates: ``make_candidate(provider, url)``."""
    return _candidate
