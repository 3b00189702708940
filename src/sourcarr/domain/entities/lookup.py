"""Domain entities for source lookups.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from sourcarr.domain.exceptions import (
    InvalidLookupRequestError,
    MissingFieldError,
)

DEFAULT_QUALITY = "auto"


class MediaType(str, Enum):
    """Kind of media being looked up."""

    MOVIE = "movie"
    SERIES = "series"

    @classmethod
    def parse(cls, raw: str | None) -> MediaType:
        """Parse a boundary value. ``tv`` is accepted as an alias for series."""
        if raw is None or not str(raw).strip():
            raise MissingFieldError("Missing type or title")
        value = str(raw).strip().lower()
        if value == "tv":
            return cls.SERIES
        try:
            return cls(value)
        except ValueError:
            raise InvalidLookupRequestError(
                f"Unsupported type: {raw!r} (expected movie, series or tv)"
            ) from None


def _parse_positive_int(name: str, raw: int | str | None) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidLookupRequestError(f"{name} must be an integer") from None
    if value <= 0:
        raise InvalidLookupRequestError(f"{name} must be a positive integer")
    return value


@dataclass(frozen=True)
class LookupRequest:
    """Validated lookup request.

    ``season``/``episode`` are always set for series and always ``None``
    for movies. Use :meth:`create` to build one from loose input.
    """

    media_type: MediaType
    title: str
    season: int | None = None
    episode: int | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check the request invariants.

        Raises:
            MissingFieldError: blank title.
            InvalidLookupRequestError: unknown media type, season/episode
                missing or not positive for a series, or set for a movie.
        """
        if not isinstance(self.title, str) or not self.title.strip():
            raise MissingFieldError("Missing type or title")
        if not isinstance(self.media_type, MediaType):
            raise InvalidLookupRequestError(
                f"Unsupported type: {self.media_type!r} (expected movie, series or tv)"
            )
        if self.media_type is MediaType.MOVIE:
            if self.season is not None or self.episode is not None:
                raise InvalidLookupRequestError(
                    "season and episode are only valid for series lookups"
                )
            return
        if self.season is None or self.episode is None:
            raise InvalidLookupRequestError(
                "season and episode are required for series lookups"
            )
        for name, value in (("season", self.season), ("episode", self.episode)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidLookupRequestError(f"{name} must be a positive integer")

    @classmethod
    def create(
        cls,
        media_type: MediaType | str | None,
        title: str | None,
        season: int | str | None = None,
        episode: int | str | None = None,
    ) -> LookupRequest:
        """Validate and normalise raw lookup parameters.

        Raises:
            MissingFieldError: type or title missing/blank.
            InvalidLookupRequestError: unknown type, bad season/episode.
        """
        if title is None or not str(title).strip():
            raise MissingFieldError("Missing type or title")
        if isinstance(media_type, MediaType):
            mt = media_type
        else:
            mt = MediaType.parse(media_type)

        if mt is MediaType.MOVIE:
            return cls(media_type=mt, title=str(title).strip())

        s = _parse_positive_int("season", season)
        e = _parse_positive_int("episode", episode)
        if s is None or e is None:
            raise InvalidLookupRequestError(
                "season and episode are required for series lookups"
            )
        return cls(media_type=mt, title=str(title).strip(), season=s, episode=e)

    @property
    def is_series(self) -> bool:
        return self.media_type is MediaType.SERIES


def is_absolute_http_url(url: object) -> bool:
    """True for syntactically valid absolute http(s) URLs."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class StreamCandidate:
    """A single resolved stream URL plus metadata from one provider."""

    provider_name: str
    url: str
    lang: str
    quality: str = DEFAULT_QUALITY
    name: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.provider_name

    @property
    def is_valid(self) -> bool:
        return is_absolute_http_url(self.url)

    def to_dict(self) -> dict[str, str]:
        """Wire shape used by the HTTP boundary."""
        return {
            "name": self.display_name,
            "url": self.url,
            "lang": self.lang,
            "quality": self.quality or DEFAULT_QUALITY,
        }


@dataclass(frozen=True)
class Deadline:
    """Absolute deadline on the monotonic clock.

    Passed into every provider call so that network and browser
    operations can bound their own timeouts by what is left.
    """

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        return cls(expires_at=time.monotonic() + seconds)

    @classmethod
    def never(cls) -> Deadline:
        return cls(expires_at=float("inf"))

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def clamp(self, seconds: float) -> float:
        """Return ``seconds`` bounded by the time left on this deadline."""
        return min(seconds, self.remaining())
