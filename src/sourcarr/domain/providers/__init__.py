from sourcarr.domain.exceptions import (
    DuplicateProviderError,
    InvalidLookupRequestError,
    MissingFieldError,
    ProviderConfigError,
    ProviderError,
    ProviderNotFoundError,
    ResolutionError,
    SourcarrError,
)

from .base import ProviderKind, ProviderOutcome, ProviderProtocol

__all__ = [
    "DuplicateProviderError",
    "InvalidLookupRequestError",
    "MissingFieldError",
    "ProviderConfigError",
    "ProviderError",
    "ProviderKind",
    "ProviderNotFoundError",
    "ProviderOutcome",
    "ProviderProtocol",
    "ResolutionError",
    "SourcarrError",
]
