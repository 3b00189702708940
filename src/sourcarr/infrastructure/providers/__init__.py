from .catalog import PAGE_PROVIDERS, build_provider, build_registry
from .consumet import ConsumetProvider
from .httpx_base import HttpxProviderBase
from .page_provider import IframePageProvider, ProviderSpec, RenderedIframeProvider
from .playwright_base import PlaywrightProviderBase
from .registry import ProviderRegistry
from .slug import make_slug

__all__ = [
    "PAGE_PROVIDERS",
    "ConsumetProvider",
    "HttpxProviderBase",
    "IframePageProvider",
    "PlaywrightProviderBase",
    "ProviderRegistry",
    "ProviderSpec",
    "RenderedIframeProvider",
    "build_provider",
    "build_registry",
    "make_slug",
]
