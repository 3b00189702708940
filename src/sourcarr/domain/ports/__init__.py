from .provider_registry import ProviderRegistryPort
from .resolution_cache import ResolutionCachePort

__all__ = [
    "ProviderRegistryPort",
    "ResolutionCachePort",
]
