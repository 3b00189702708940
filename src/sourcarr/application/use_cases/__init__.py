from .resolve_sources import SourceResolutionUseCase

__all__ = ["SourceResolutionUseCase"]
