"""
Configuration Schemas - Pydantic models for configuration validation.

This module defines the data structures and validation rules for resolver
settings, per-provider upstream settings, fallback link templates and logging.
"""

import logging
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from anistream.core.models import ProviderName


logger = logging.getLogger(__name__)


class ResolverSettings(BaseModel):
    """Settings shared by every provider HTTP call."""

    timeout: float = Field(
        default=15.0,
        ge=1.0,
        le=60.0,
        description="Per-request upstream timeout in seconds"
    )
    max_retries: int = Field(
        default=0,
        ge=0,
        le=5,
        description="Retries for network failures on a single upstream call"
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Base delay between retries in seconds"
    )
    default_interval_ms: int = Field(
        default=500,
        ge=0,
        description="Minimum spacing for upstreams without an explicit interval"
    )
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/138.0.0.0 Safari/537.36"
        ),
        description="User agent string for upstream requests"
    )


class ProviderSettings(BaseModel):
    """Configuration for an individual upstream provider."""

    enabled: bool = Field(
        default=True,
        description="Whether the provider takes part in resolution"
    )
    base_url: str = Field(
        default="",
        description="Base URL of the upstream API"
    )
    min_interval_ms: int = Field(
        default=500,
        ge=0,
        le=60000,
        description="Minimum milliseconds between two calls to this upstream"
    )
    serialize: bool = Field(
        default=False,
        description="Queue calls so that at most one is in flight at a time"
    )
    backends: List[str] = Field(
        default_factory=list,
        description="Backend identities tried in order under this provider"
    )
    category: Optional[str] = Field(
        default=None,
        description="Audio/subtitle category, for providers that need one"
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Strip trailing slashes so paths can be appended."""
        return v.strip().rstrip('/')

    @field_validator('backends')
    @classmethod
    def validate_backends(cls, v: List[str]) -> List[str]:
        """Drop blank and duplicate backend names, preserving order."""
        cleaned = [name.strip() for name in v if name and name.strip()]
        return list(dict.fromkeys(cleaned))


def _default_providers() -> Dict[str, ProviderSettings]:
    return {
        ProviderName.CONSUMET.value: ProviderSettings(
            base_url="https://api.consumet.org",
            min_interval_ms=1000,
            backends=["gogoanime", "zoro", "animepahe"],
        ),
        ProviderName.ANIFY.value: ProviderSettings(
            base_url="https://api.anify.tv",
            min_interval_ms=500,
            backends=["gogoanime"],
        ),
        ProviderName.SCRAPER.value: ProviderSettings(
            base_url="https://gogoanime.fi",
            min_interval_ms=2000,
            serialize=True,
        ),
        ProviderName.HIANIME.value: ProviderSettings(
            base_url="http://localhost:4000",
            min_interval_ms=1000,
            serialize=True,
            backends=["hd-1", "hd-2"],
            category="sub",
        ),
    }


class FallbackSite(BaseModel):
    """External site template used for fallback links."""

    name: str = Field(..., min_length=1, description="Display name")
    template: str = Field(
        ...,
        description="URL template with {slug} and optional {episode} placeholders"
    )

    @field_validator('template')
    @classmethod
    def validate_template(cls, v: str) -> str:
        if "{slug}" not in v:
            raise ValueError("Template must contain a {slug} placeholder")
        return v


def _default_fallback_sites() -> List[FallbackSite]:
    return [
        FallbackSite(name="Gogoanime", template="https://gogoanime.fi/{slug}-episode-{episode}"),
        FallbackSite(name="Zoro", template="https://zoro.to/watch/{slug}-episode-{episode}"),
        FallbackSite(name="9anime", template="https://9anime.to/watch/{slug}.episode-{episode}"),
    ]


class FallbackSettings(BaseModel):
    """Fallback link generation settings."""

    sites: List[FallbackSite] = Field(default_factory=_default_fallback_sites)


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )


class AppSettings(BaseModel):
    """Main application settings container."""

    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    providers: Dict[str, ProviderSettings] = Field(default_factory=_default_providers)
    fallback: FallbackSettings = Field(default_factory=FallbackSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode='after')
    def validate_provider_names(self) -> 'AppSettings':
        """Warn about unknown provider entries and fill in missing ones."""
        known = {name.value for name in ProviderName}
        for name in self.providers:
            if name not in known:
                logger.warning(f"Ignoring settings for unknown provider '{name}'")

        defaults = _default_providers()
        for name, settings in defaults.items():
            self.providers.setdefault(name, settings)

        return self

    def provider(self, name: ProviderName) -> ProviderSettings:
        """Get settings for a specific provider."""
        return self.providers[ProviderName(name).value]

    def intervals(self) -> Dict[str, int]:
        """Minimum call spacing per upstream, in milliseconds."""
        return {name: settings.min_interval_ms for name, settings in self.providers.items()}


# Export all configuration models
__all__ = [
    "ResolverSettings",
    "ProviderSettings",
    "FallbackSite",
    "FallbackSettings",
    "LoggingSettings",
    "AppSettings",
]
