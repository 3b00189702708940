"""FlixHQ via the Consumet aggregation API.

Three-step flow: search by title, fetch media info to pick an episode,
then fetch the watch payload. One lookup can yield several candidates.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from sourcarr.domain.entities.lookup import (
    DEFAULT_QUALITY,
    Deadline,
    LookupRequest,
    StreamCandidate,
)
from sourcarr.domain.providers.base import ProviderOutcome

from .httpx_base import HttpxProviderBase

DEFAULT_CONSUMET_BASE_URL = "https://api-consumet-org-wg40.onrender.com"


def _as_int(value: object) -> int | None:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


class ConsumetProvider(HttpxProviderBase):
    """Aggregation-API provider for FlixHQ."""

    name = "FlixHQ"
    kind = "aggregation"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_CONSUMET_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
        follow_redirects: bool | None = None,
    ) -> None:
        super().__init__(
            http_client=http_client,
            timeout=timeout,
            user_agent=user_agent,
            follow_redirects=follow_redirects,
        )
        self.base_url = base_url.rstrip("/")

    async def _get_json(
        self,
        url: str,
        deadline: Deadline,
        context: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any] | None:
        resp = await self._safe_fetch(
            url, deadline=deadline, context=context, params=params
        )
        if resp is None:
            return None
        data = self._safe_parse_json(resp, context=context)
        if not isinstance(data, dict):
            return None
        return data

    async def _search(self, title: str, deadline: Deadline) -> dict[str, Any] | None:
        url = f"{self.base_url}/movies/flixhq/{quote(title, safe='')}"
        data = await self._get_json(url, deadline, "search")
        if data is None:
            return None
        results = data.get("results") or []
        self._log.info("consumet_search", title=title, results=len(results))
        if not results or not isinstance(results[0], dict):
            return None
        return results[0]

    def _pick_episode(
        self, episodes: list[dict[str, Any]], request: LookupRequest
    ) -> dict[str, Any]:
        """Matching season/number for series; first episode otherwise.

        When a series episode cannot be matched the first episode is used
        and the substitution is logged.
        """
        if not request.is_series:
            return episodes[0]
        for ep in episodes:
            if (
                _as_int(ep.get("season")) == request.season
                and _as_int(ep.get("number")) == request.episode
            ):
                return ep
        self._log.warning(
            "consumet_episode_fallback",
            title=request.title,
            season=request.season,
            episode=request.episode,
            used=episodes[0].get("id"),
        )
        return episodes[0]

    async def _resolve(
        self, request: LookupRequest, deadline: Deadline
    ) -> ProviderOutcome:
        first = await self._search(request.title, deadline)
        if first is None or not first.get("id"):
            return None
        media_id = str(first["id"])
        self._log.debug("consumet_media", media_id=media_id, title=first.get("title"))

        info = await self._get_json(
            f"{self.base_url}/movies/flixhq/info", deadline, "info", {"id": media_id}
        )
        if info is None:
            return None
        episodes = [ep for ep in info.get("episodes") or [] if isinstance(ep, dict)]
        if not episodes:
            self._log.info("consumet_no_episodes", media_id=media_id)
            return None

        episode = self._pick_episode(episodes, request)
        episode_id = episode.get("id")
        if not episode_id:
            return None

        watch = await self._get_json(
            f"{self.base_url}/movies/flixhq/watch",
            deadline,
            "watch",
            {"episodeId": str(episode_id), "mediaId": media_id},
        )
        if watch is None:
            return None

        candidates: list[StreamCandidate] = []
        for idx, source in enumerate(watch.get("sources") or [], start=1):
            if not isinstance(source, dict):
                continue
            candidates.append(
                StreamCandidate(
                    provider_name=self.name,
                    name=f"{self.name} {idx}",
                    url=str(source.get("url") or ""),
                    lang=self.lang,
                    quality=str(source.get("quality") or DEFAULT_QUALITY),
                )
            )
        self._log.info(
            "consumet_sources",
            media_id=media_id,
            episode_id=episode_id,
            count=len(candidates),
        )
        return candidates
