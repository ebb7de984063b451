"""
Tests for payload normalization (core/normalizer.py)

Coverage:
- Dropping malformed source entries
- Key-name variants and segmented manifest detection
- Idempotence and input immutability
- Headers, subtitles and embed URLs
"""

import copy

import pytest

from anistream.core.models import MediaSource, ProviderPayload
from anistream.core.normalizer import SourceNormalizer, is_segmented_url


@pytest.fixture
def normalizer():
    return SourceNormalizer()


class TestNormalizeSources:
    """Test source extraction."""

    def test_keeps_valid_entries_in_provider_order(self, normalizer, two_quality_payload):
        sources = normalizer.normalize(two_quality_payload)

        assert [s.url for s in sources] == ["https://cdn.example/a.mp4", "https://cdn.example/b.mp4"]
        assert [s.quality for s in sources] == ["480p", "1080p"]

    def test_drops_entries_missing_url_or_quality(self, normalizer):
        payload = {
            "sources": [
                {"url": "https://cdn.example/ok.mp4", "quality": "720p"},
                {"url": "https://cdn.example/no-quality.mp4"},
                {"quality": "1080p"},
                {"url": "", "quality": "360p"},
                {"url": "https://cdn.example/blank.mp4", "quality": "   "},
                "not-an-object",
                None,
            ]
        }

        sources = normalizer.normalize(payload)

        assert sources == [MediaSource(url="https://cdn.example/ok.mp4", quality="720p")]

    def test_accepts_alternate_key_names(self, normalizer):
        payload = {"sources": [{"file": "https://cdn.example/x.mp4", "label": "HD 720"}]}

        source = normalizer.normalize(payload)[0]

        assert source.url == "https://cdn.example/x.mp4"
        assert source.quality == "HD 720"

    def test_numeric_quality_is_kept_as_text(self, normalizer):
        payload = {"sources": [{"url": "https://cdn.example/x.mp4", "quality": 1080}]}
        assert normalizer.normalize(payload)[0].quality == "1080"

    def test_size_hint_carried_through(self, normalizer):
        payload = {"sources": [{"url": "https://cdn.example/x.mp4", "quality": "720p", "size": "350MB"}]}
        assert normalizer.normalize(payload)[0].size_hint == "350MB"

    @pytest.mark.parametrize("payload", [
        {},
        {"sources": None},
        {"sources": "https://cdn.example/x.mp4"},
        {"sources": {"url": "https://cdn.example/x.mp4", "quality": "720p"}},
        {"sources": []},
    ])
    def test_missing_or_invalid_source_list_gives_empty(self, normalizer, payload):
        assert normalizer.normalize(payload) == []

    def test_accepts_provider_payload(self, normalizer, two_quality_payload):
        wrapped = ProviderPayload(provider="consumet", data=two_quality_payload)
        assert normalizer.normalize(wrapped) == normalizer.normalize(two_quality_payload)

    def test_normalizing_twice_is_identical(self, normalizer, hls_payload):
        assert normalizer.normalize(hls_payload) == normalizer.normalize(hls_payload)

    def test_does_not_mutate_input(self, normalizer, hls_payload):
        original = copy.deepcopy(hls_payload)

        normalizer.normalize(hls_payload)
        normalizer.headers(hls_payload)
        normalizer.subtitles(hls_payload)

        assert hls_payload == original


class TestSegmentedDetection:
    """Test HLS manifest detection."""

    @pytest.mark.parametrize("url,expected", [
        ("https://cdn.example/master.m3u8", True),
        ("https://cdn.example/master.M3U8?token=abc", True),
        ("https://cdn.example/video.mp4", False),
        ("https://cdn.example/video.mkv", False),
    ])
    def test_is_segmented_url(self, url, expected):
        assert is_segmented_url(url) is expected

    def test_flag_derived_from_url_not_provider_claim(self, normalizer):
        payload = {"sources": [{"url": "https://cdn.example/file.mp4", "quality": "720p", "isM3U8": True}]}
        assert normalizer.normalize(payload)[0].is_segmented is False


class TestAuxiliaryFields:
    """Test headers, subtitles and embed URLs."""

    def test_headers_as_strings(self, normalizer):
        payload = {"headers": {"Referer": "https://player.example/", "X-Retry": 3, "Skip": None}}
        assert normalizer.headers(payload) == {"Referer": "https://player.example/", "X-Retry": "3"}

    def test_headers_missing(self, normalizer):
        assert normalizer.headers({"headers": ["Referer"]}) == {}

    def test_subtitles_from_subtitles_list(self, normalizer, hls_payload):
        track = normalizer.subtitles(hls_payload)[0]

        assert track.language_code == "en"
        assert track.display_language == "English"
        assert track.url == "https://cdn.example/en.vtt"

    def test_subtitles_from_tracks_skip_thumbnails(self, normalizer):
        payload = {
            "tracks": [
                {"file": "https://cdn.example/thumbs.vtt", "kind": "thumbnails"},
                {"file": "https://cdn.example/pt.vtt", "label": "Portuguese", "kind": "captions"},
                {"file": "https://cdn.example/unknown.vtt"},
            ]
        }

        tracks = normalizer.subtitles(payload)

        assert len(tracks) == 1
        assert tracks[0].display_language == "Portuguese"
        assert tracks[0].language_code == "Portuguese"

    @pytest.mark.parametrize("key", ["embed_url", "embedUrl", "iframe"])
    def test_embed_url_keys(self, normalizer, key):
        assert normalizer.embed_url({key: "https://player.example/e/1"}) == "https://player.example/e/1"

    def test_embed_url_absent(self, normalizer, two_quality_payload):
        assert normalizer.embed_url(two_quality_payload) is None
