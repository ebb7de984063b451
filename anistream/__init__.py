"""
AniStream - Resolve anime episodes to playable streaming sources.

Queries a prioritized chain of upstream providers, normalizes and ranks the
sources they return, and falls back to plain episode links on well-known
sites when no provider can deliver a stream.
"""

__version__ = "0.1.0"
__author__ = "AniStream Team"

# Package metadata
__title__ = "anistream"
__description__ = "Anime episode streaming-source resolver with provider fallback"
__license__ = "MIT"

# Version info tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split(".")))

# Export main components for easy importing
from anistream.core.models import (
    EmbedResult,
    EpisodeRef,
    FallbackResult,
    MediaSource,
    StreamResult,
)
from anistream.core.resolver import ResolutionPipeline

__all__ = [
    "__version__",
    "__author__",
    "EpisodeRef",
    "MediaSource",
    "StreamResult",
    "EmbedResult",
    "FallbackResult",
    "ResolutionPipeline",
]
