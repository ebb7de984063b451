"""
Resolution Pipeline - Resolve an episode to a playable result.

Providers are tried one at a time in a fixed priority order. The first one
that yields a usable stream (or an embed page) wins. Provider failures of
any kind only advance the pipeline to the next provider; when all of them
are exhausted the caller receives fallback links instead of an error.

The control flow is an explicit state machine: ``next_state`` is a pure
function of the current step and the typed outcome of the last attempt.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

from anistream.core.config_schemas import AppSettings
from anistream.core.exceptions import (
    AllProvidersExhaustedError,
    UpstreamError,
    UpstreamNoDataError,
)
from anistream.core.fallback import FallbackLinkBuilder
from anistream.core.models import (
    AnimeInfo,
    EmbedResult,
    EpisodeRef,
    FallbackResult,
    ProviderPayload,
    StreamResult,
)
from anistream.core.normalizer import SourceNormalizer
from anistream.core.ranker import SourceRanker
from anistream.core.rate_limiter import RateLimiter
from anistream.core.scheduler import RequestScheduler
from anistream.providers.base import BaseProvider
from anistream.providers.registry import build_providers


logger = logging.getLogger(__name__)

ResolvedResult = Union[StreamResult, EmbedResult]
AnyResult = Union[StreamResult, EmbedResult, FallbackResult]


class ResolutionState(str, Enum):
    """States of a single resolution request."""

    IDLE = "idle"
    TRYING_PROVIDER = "trying_provider"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"
    FALLBACK = "fallback"
    DONE = "done"


class OutcomeKind(str, Enum):
    """Typed outcome of one provider attempt."""

    RESOLVED = "resolved"
    NO_SOURCES = "no_sources"
    FAILED = "failed"


@dataclass(frozen=True)
class AttemptOutcome:
    """What happened when one provider was asked for sources."""

    provider: str
    kind: OutcomeKind
    result: Optional[ResolvedResult] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None


@dataclass(frozen=True)
class PipelineStep:
    """Current state plus the index of the provider being tried."""

    state: ResolutionState
    index: int = 0


def next_state(step: PipelineStep, outcome: Optional[AttemptOutcome], provider_count: int) -> PipelineStep:
    """
    Compute the next pipeline step.

    Args:
        step: Current step
        outcome: Outcome of the attempt made in ``step`` (None outside TRYING_PROVIDER)
        provider_count: Number of providers in the priority list

    Returns:
        The following step
    """
    if step.state is ResolutionState.IDLE:
        if provider_count == 0:
            return PipelineStep(ResolutionState.EXHAUSTED)
        return PipelineStep(ResolutionState.TRYING_PROVIDER, 0)

    if step.state is ResolutionState.TRYING_PROVIDER:
        if outcome is None:
            raise ValueError("An attempt outcome is required while trying providers")
        if outcome.kind is OutcomeKind.RESOLVED:
            return PipelineStep(ResolutionState.RESOLVED, step.index)
        if step.index + 1 < provider_count:
            return PipelineStep(ResolutionState.TRYING_PROVIDER, step.index + 1)
        return PipelineStep(ResolutionState.EXHAUSTED)

    if step.state is ResolutionState.EXHAUSTED:
        return PipelineStep(ResolutionState.FALLBACK)

    return PipelineStep(ResolutionState.DONE, step.index)


class ResolutionPipeline:
    """
    Orchestrates providers, normalization, ranking and fallback links.

    One pipeline is meant to live for the whole process: its rate limiter
    and request scheduler are the shared state that keeps concurrent
    resolutions from hammering the same upstream.
    """

    def __init__(
        self,
        providers: Sequence[BaseProvider],
        normalizer: Optional[SourceNormalizer] = None,
        ranker: Optional[SourceRanker] = None,
        fallback_builder: Optional[FallbackLinkBuilder] = None,
        scheduler: Optional[RequestScheduler] = None
    ):
        """
        Initialize the pipeline.

        Args:
            providers: Providers, highest priority first
            normalizer: Source normalizer
            ranker: Source ranker
            fallback_builder: Fallback link builder
            scheduler: Shared scheduler, closed together with the pipeline
        """
        self.providers = list(providers)
        self.normalizer = normalizer or SourceNormalizer()
        self.ranker = ranker or SourceRanker()
        self.fallback_builder = fallback_builder or FallbackLinkBuilder()
        self.scheduler = scheduler

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "ResolutionPipeline":
        """Build the shared limiter, scheduler and providers from settings."""
        rate_limiter = RateLimiter(
            settings.intervals(),
            default_interval_ms=settings.resolver.default_interval_ms
        )
        scheduler = RequestScheduler(rate_limiter)
        normalizer = SourceNormalizer()

        return cls(
            build_providers(settings, rate_limiter, scheduler, normalizer),
            normalizer=normalizer,
            fallback_builder=FallbackLinkBuilder(settings.fallback.sites),
            scheduler=scheduler,
        )

    async def resolve(self, episode_ref: Union[str, EpisodeRef], anime_title: Optional[str] = None) -> AnyResult:
        """
        Resolve an episode to a stream, an embed page or fallback links.

        Args:
            episode_ref: Upstream episode id or a prepared EpisodeRef
            anime_title: Anime title, used for scraping and fallback links

        Returns:
            StreamResult, EmbedResult or FallbackResult; "nothing found" is
            a FallbackResult, never an exception
        """
        if isinstance(episode_ref, EpisodeRef):
            ref = episode_ref
            if anime_title and not ref.anime_title:
                ref = ref.model_copy(update={"anime_title": anime_title.strip() or None})
        else:
            ref = EpisodeRef(episode_id=episode_ref, anime_title=anime_title)

        logger.info(f"Getting streaming sources for episode: {ref}")

        try:
            return await self._resolve_from_providers(ref)
        except AllProvidersExhaustedError as e:
            failures = ", ".join(
                f"{a.provider}={a.error_kind or a.kind.value}" for a in e.attempts
            )
            logger.info(f"All providers failed for {ref} ({failures or 'none configured'}), returning fallback links")
            links = self.fallback_builder.build(ref.anime_title, ref.episode_number)
            return FallbackResult(links=links)

    async def _resolve_from_providers(self, ref: EpisodeRef) -> ResolvedResult:
        attempts: List[AttemptOutcome] = []
        step = next_state(PipelineStep(ResolutionState.IDLE), None, len(self.providers))

        while step.state is ResolutionState.TRYING_PROVIDER:
            outcome = await self._attempt(self.providers[step.index], ref)
            attempts.append(outcome)
            step = next_state(step, outcome, len(self.providers))

        if step.state is ResolutionState.RESOLVED:
            result = attempts[-1].result
            assert result is not None
            return result

        raise AllProvidersExhaustedError(str(ref), attempts)

    async def _attempt(self, provider: BaseProvider, ref: EpisodeRef) -> AttemptOutcome:
        """Ask one provider for sources; any provider error becomes an outcome."""
        name = provider.name.value

        try:
            payload = await provider.get_sources(ref)
        except UpstreamError as e:
            logger.warning(f"Provider {name} failed for episode {ref} [{e.kind}]: {e}")
            return AttemptOutcome(name, OutcomeKind.FAILED, error=str(e), error_kind=e.kind)
        except Exception as e:
            logger.exception(f"Provider {name} raised unexpectedly for episode {ref}")
            return AttemptOutcome(name, OutcomeKind.FAILED, error=str(e), error_kind="unexpected")

        outcome = self.decide(name, payload)
        if outcome.kind is OutcomeKind.RESOLVED:
            logger.info(f"{name} success for episode {ref}")
        else:
            logger.info(f"{name} produced nothing usable for episode {ref}")
        return outcome

    def decide(self, provider: str, payload: ProviderPayload) -> AttemptOutcome:
        """
        Turn a provider payload into an attempt outcome.

        Ranked sources win over an embed page; a payload with neither counts
        as no sources.
        """
        sources = self.ranker.rank(self.normalizer.normalize(payload))
        if sources:
            result = StreamResult(
                sources=sources,
                headers=self.normalizer.headers(payload),
                subtitles=self.normalizer.subtitles(payload),
                provider=provider,
            )
            return AttemptOutcome(provider, OutcomeKind.RESOLVED, result=result)

        embed_url = self.normalizer.embed_url(payload)
        if embed_url:
            return AttemptOutcome(provider, OutcomeKind.RESOLVED, result=EmbedResult(url=embed_url, provider=provider))

        return AttemptOutcome(provider, OutcomeKind.NO_SOURCES)

    async def lookup_episodes(self, title_or_id: str) -> AnimeInfo:
        """
        Find an anime's episode list using metadata-capable providers.

        Args:
            title_or_id: Anime id or title

        Raises:
            UpstreamError: If no provider could find the anime
        """
        last_error: Optional[UpstreamError] = None

        for provider in self.providers:
            if not provider.supports_metadata:
                continue
            try:
                info = await provider.get_metadata(title_or_id)
                logger.info(f"Found {len(info.episodes)} episodes for {title_or_id} via {provider.name}")
                return info
            except UpstreamError as e:
                logger.warning(f"Metadata lookup on {provider.name} failed for '{title_or_id}': {e}")
                last_error = e

        if last_error is not None:
            raise last_error
        raise UpstreamNoDataError(f"No metadata provider available for '{title_or_id}'")

    async def aclose(self) -> None:
        """Close provider sessions and the shared scheduler."""
        for provider in self.providers:
            await provider.cleanup()
        if self.scheduler is not None:
            await self.scheduler.aclose()

    async def __aenter__(self) -> "ResolutionPipeline":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = [
    "ResolutionPipeline",
    "ResolutionState",
    "OutcomeKind",
    "AttemptOutcome",
    "PipelineStep",
    "next_state",
]
