"""
Core Data Models - Pydantic models for type safety and validation.

This module defines the data structures that flow through the resolution
pipeline: episode references, normalized media sources, subtitle tracks,
fallback links and the tagged ResolutionResult union returned to callers.
Wire names (``isM3U8``, ``lang``, ``name`` ...) are expressed as aliases so
that ``to_wire()`` yields the JSON shape consumed by the HTTP layer.
"""

import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProviderName(str, Enum):
    """Upstream identities, used as rate-limit and queue keys."""

    CONSUMET = "consumet"
    ANIFY = "anify"
    SCRAPER = "scraper"
    HIANIME = "hianime"

    def __str__(self) -> str:
        return self.value


# Fixed attempt order for the resolution pipeline.
PROVIDER_PRIORITY = (
    ProviderName.CONSUMET,
    ProviderName.ANIFY,
    ProviderName.SCRAPER,
    ProviderName.HIANIME,
)

_EPISODE_NUMBER_RE = re.compile(r"episode-(\d+)$", re.IGNORECASE)


class EpisodeRef(BaseModel):
    """
    Opaque upstream episode identifier plus an optional anime title.

    The title is only needed by the scraping provider and for building
    fallback links. Instances are immutable and created per request.
    """

    model_config = ConfigDict(frozen=True)

    episode_id: str = Field(..., min_length=1, description="Upstream episode identifier")
    anime_title: Optional[str] = Field(None, description="Human-readable anime title")

    @field_validator('episode_id')
    @classmethod
    def validate_episode_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("episode_id cannot be blank")
        return v

    @field_validator('anime_title')
    @classmethod
    def validate_anime_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @property
    def episode_number(self) -> Optional[int]:
        """Episode number encoded as a trailing ``episode-N`` in the id."""
        match = _EPISODE_NUMBER_RE.search(self.episode_id)
        return int(match.group(1)) if match else None

    def __str__(self) -> str:
        return self.episode_id


class MediaSource(BaseModel):
    """A candidate playable media URL with its quality label."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(..., min_length=1, description="Media or manifest URL")
    quality: str = Field(..., min_length=1, description="Provider-supplied quality label")
    is_segmented: bool = Field(False, alias="isM3U8", description="True for HLS manifests")
    size_hint: Optional[str] = Field(None, alias="size", description="Provider size hint")

    def __str__(self) -> str:
        return f"{self.quality} {self.url}"


class SubtitleTrack(BaseModel):
    """Subtitle track carried through from the provider unmodified."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    language_code: str = Field(..., alias="lang")
    display_language: str = Field(..., alias="language")
    url: str = Field(..., min_length=1)


class FallbackLink(BaseModel):
    """Manually followable external watch link."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str = Field(..., alias="name")
    url: str
    kind: str = Field("site", alias="type")


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the JSON-compatible wire shape."""
        return self.model_dump(by_alias=True, exclude_none=True)


class StreamResult(_WireModel):
    """Directly playable sources, best quality first."""

    type: Literal["stream"] = "stream"
    sources: List[MediaSource] = Field(..., min_length=1)
    headers: Dict[str, str] = Field(default_factory=dict)
    subtitles: List[SubtitleTrack] = Field(default_factory=list)
    provider: Optional[str] = None


class EmbedResult(_WireModel):
    """Opaque third-party player page."""

    type: Literal["embed"] = "embed"
    url: str = Field(..., min_length=1)
    provider: Optional[str] = None


class FallbackResult(_WireModel):
    """External links offered when no provider could resolve the episode."""

    type: Literal["fallback"] = "fallback"
    links: List[FallbackLink] = Field(default_factory=list)


ResolutionResult = Annotated[
    Union[StreamResult, EmbedResult, FallbackResult],
    Field(discriminator="type"),
]


class ProviderPayload(BaseModel):
    """Raw JSON object returned by a provider; its shape varies per provider."""

    provider: str
    data: Dict[str, Any] = Field(default_factory=dict)


class AnimeSearchResult(BaseModel):
    """Anime search hit from a metadata-capable provider."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    url: Optional[str] = None
    image: Optional[str] = None
    release_date: Optional[str] = None
    sub_or_dub: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.title} ({self.id})"


class EpisodeInfo(BaseModel):
    """Episode listing entry; ``id`` is the value to pass to ``resolve``."""

    id: str = Field(..., min_length=1)
    number: float = Field(..., ge=0)
    title: Optional[str] = None
    url: Optional[str] = None

    def __str__(self) -> str:
        return f"Episode {self.number:g}: {self.id}"


class AnimeInfo(BaseModel):
    """Anime metadata with its episode list."""

    id: str
    title: str
    episodes: List[EpisodeInfo] = Field(default_factory=list)
    total_episodes: Optional[int] = None
    provider: Optional[str] = None

    @field_validator('episodes')
    @classmethod
    def validate_episodes(cls, v: List[EpisodeInfo]) -> List[EpisodeInfo]:
        """Keep episodes ordered by number."""
        return sorted(v, key=lambda ep: ep.number)


# Export all models and types
__all__ = [
    "ProviderName",
    "PROVIDER_PRIORITY",
    "EpisodeRef",
    "MediaSource",
    "SubtitleTrack",
    "FallbackLink",
    "StreamResult",
    "EmbedResult",
    "FallbackResult",
    "ResolutionResult",
    "ProviderPayload",
    "AnimeSearchResult",
    "EpisodeInfo",
    "AnimeInfo",
]
