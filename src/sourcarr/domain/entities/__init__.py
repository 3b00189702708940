from .lookup import (
    DEFAULT_QUALITY,
    Deadline,
    LookupRequest,
    MediaType,
    StreamCandidate,
    is_absolute_http_url,
)

__all__ = [
    "DEFAULT_QUALITY",
    "Deadline",
    "LookupRequest",
    "MediaType",
    "StreamCandidate",
    "is_absolute_http_url",
]
