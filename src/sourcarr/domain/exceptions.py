"""Error taxonomy for source resolution."""

from __future__ import annotations


class SourcarrError(Exception):
    """Base class for all sourcarr errors."""


class InvalidLookupRequestError(SourcarrError):
    """Raised when a lookup request is rejected before any provider runs."""


class MissingFieldError(InvalidLookupRequestError):
    """Raised when ``type`` or ``title`` is missing from a lookup request."""


class ResolutionError(SourcarrError):
    """Raised when the orchestration loop itself fails.

    Never raised because of an individual provider failure.
    """


class ProviderError(SourcarrError):
    """Base class for provider registry and configuration errors."""


class ProviderNotFoundError(ProviderError):
    """Raised when a provider name is not known to the registry."""


class DuplicateProviderError(ProviderError):
    """Raised when two providers resolve to the same name."""


class ProviderConfigError(ProviderError):
    """Raised when a provider table entry cannot be turned into a provider."""
