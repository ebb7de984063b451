"""
Source Normalizer - Convert provider payloads into common records.

Providers disagree on key names (``url`` vs ``file``, ``quality`` vs
``label``) and envelope layout. The normalizer accepts those variants,
discards malformed entries and never mutates its input.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from anistream.core.models import MediaSource, ProviderPayload, SubtitleTrack


logger = logging.getLogger(__name__)

SEGMENTED_EXTENSIONS = (".m3u8",)

_URL_KEYS = ("url", "file", "src")
_QUALITY_KEYS = ("quality", "label", "resolution")
_SUBTITLE_LISTS = ("subtitles", "tracks")
_SKIPPED_TRACK_KINDS = {"thumbnails", "chapters"}

Payload = Union[ProviderPayload, Mapping[str, Any]]


def _first_text(entry: Mapping[str, Any], keys: Iterable[str]) -> Optional[str]:
    for key in keys:
        value = entry.get(key)
        if value is None or isinstance(value, (dict, list, bool)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def is_segmented_url(url: str) -> bool:
    """Whether the URL targets a segmented streaming manifest."""
    lowered = url.lower()
    return any(ext in lowered for ext in SEGMENTED_EXTENSIONS)


class SourceNormalizer:
    """Turns raw provider payloads into MediaSource lists."""

    @staticmethod
    def _data(payload: Payload) -> Mapping[str, Any]:
        if isinstance(payload, ProviderPayload):
            return payload.data
        if isinstance(payload, Mapping):
            return payload
        return {}

    def normalize(self, payload: Payload) -> List[MediaSource]:
        """
        Extract valid media sources from a payload.

        Entries without a url or a quality label are dropped. Quality labels
        are kept exactly as the provider wrote them.

        Args:
            payload: Provider payload or its raw JSON object

        Returns:
            Sources in provider order
        """
        raw_sources = self._data(payload).get("sources")
        if not isinstance(raw_sources, list):
            return []

        sources = []
        for entry in raw_sources:
            if not isinstance(entry, Mapping):
                continue

            url = _first_text(entry, _URL_KEYS)
            quality = _first_text(entry, _QUALITY_KEYS)
            if not url or not quality:
                continue

            sources.append(MediaSource(
                url=url,
                quality=quality,
                is_segmented=is_segmented_url(url),
                size_hint=_first_text(entry, ("size",)),
            ))

        dropped = len(raw_sources) - len(sources)
        if dropped:
            logger.debug(f"Dropped {dropped} malformed source entries")
        return sources

    def headers(self, payload: Payload) -> Dict[str, str]:
        """Request headers the player must send, as a string map."""
        raw = self._data(payload).get("headers")
        if not isinstance(raw, Mapping):
            return {}
        return {str(k): str(v) for k, v in raw.items() if v is not None}

    def subtitles(self, payload: Payload) -> List[SubtitleTrack]:
        """Subtitle tracks from either a ``subtitles`` or ``tracks`` list."""
        data = self._data(payload)
        tracks: List[SubtitleTrack] = []

        for list_key in _SUBTITLE_LISTS:
            raw_tracks = data.get(list_key)
            if not isinstance(raw_tracks, list):
                continue

            for entry in raw_tracks:
                if not isinstance(entry, Mapping):
                    continue
                kind = str(entry.get("kind", "")).lower()
                if kind in _SKIPPED_TRACK_KINDS:
                    continue

                url = _first_text(entry, _URL_KEYS)
                language = _first_text(entry, ("language", "lang", "label"))
                if not url or not language:
                    continue

                code = _first_text(entry, ("lang", "srclang", "code")) or language
                tracks.append(SubtitleTrack(
                    language_code=code,
                    display_language=language,
                    url=url,
                ))

        return tracks

    def embed_url(self, payload: Payload) -> Optional[str]:
        """Third-party player page, for providers that only yield embeds."""
        return _first_text(self._data(payload), ("embed_url", "embedUrl", "iframe"))


# Export normalizer
__all__ = ["SourceNormalizer", "SEGMENTED_EXTENSIONS", "is_segmented_url"]
