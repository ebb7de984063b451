"""
Tests for the command-line interface (cli/main.py)

The pipeline factory is replaced with one built from stub providers so that
no command touches the network.
"""

import json

import pytest
from typer.testing import CliRunner

from anistream import __version__
from anistream.cli import main as cli_module
from anistream.cli.main import app
from anistream.core.exceptions import UpstreamNoDataError
from anistream.core.models import AnimeInfo, EpisodeInfo, ProviderName
from anistream.core.resolver import ResolutionPipeline


runner = CliRunner()


@pytest.fixture
def config_dir(tmp_path):
    return tmp_path / "config"


@pytest.fixture
def use_stub_pipeline(monkeypatch):
    """Install a pipeline factory built from the given stub providers."""
    def _install(*providers):
        monkeypatch.setattr(cli_module, "_create_pipeline", lambda: ResolutionPipeline(list(providers)))
    return _install


def _invoke(config_dir, *args):
    return runner.invoke(app, ["--config-dir", str(config_dir), *args])


class TestGlobalOptions:
    """Test app-level options."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config_directory_created(self, config_dir):
        result = _invoke(config_dir, "providers")

        assert result.exit_code == 0
        assert (config_dir / "settings.json").exists()


class TestProvidersCommand:
    def test_lists_providers_in_priority_order(self, config_dir):
        result = _invoke(config_dir, "providers")

        assert result.exit_code == 0
        positions = [result.output.index(name.value) for name in ProviderName]
        assert positions == sorted(positions)


class TestResolveCommand:
    """Test episode resolution."""

    def test_json_stream(self, config_dir, make_stub, use_stub_pipeline, two_quality_payload):
        use_stub_pipeline(make_stub(ProviderName.CONSUMET, two_quality_payload))

        result = _invoke(config_dir, "resolve", "demo-show-episode-1", "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["type"] == "stream"
        assert [s["quality"] for s in data["sources"]] == ["1080p", "480p"]

    def test_json_fallback(self, config_dir, make_stub, use_stub_pipeline):
        use_stub_pipeline(make_stub(ProviderName.CONSUMET, {}))

        result = _invoke(config_dir, "resolve", "demo-show-episode-2", "--title", "Demo Show", "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["type"] == "fallback"
        assert data["links"][0] == {
            "name": "Gogoanime",
            "url": "https://gogoanime.fi/demo-show-episode-2",
            "type": "site",
        }

    def test_table_output(self, config_dir, make_stub, use_stub_pipeline, two_quality_payload):
        use_stub_pipeline(make_stub(ProviderName.ANIFY, two_quality_payload))

        result = _invoke(config_dir, "resolve", "demo-show-episode-1")

        assert result.exit_code == 0
        assert "1080p" in result.output
        assert "anify" in result.output

    def test_fallback_without_title_suggests_flag(self, config_dir, make_stub, use_stub_pipeline):
        use_stub_pipeline(make_stub(ProviderName.CONSUMET, {}))

        result = _invoke(config_dir, "resolve", "some-id")

        assert result.exit_code == 0
        assert "Nothing Found" in result.output
        assert "--title" in result.output


class TestEpisodesCommand:
    """Test episode listing."""

    def test_json_listing(self, config_dir, make_stub, use_stub_pipeline):
        info = AnimeInfo(
            id="demo-show",
            title="Demo Show",
            episodes=[EpisodeInfo(id="demo-show-episode-1", number=1)],
            total_episodes=1,
        )
        use_stub_pipeline(make_stub(ProviderName.CONSUMET, {}, info=info))

        result = _invoke(config_dir, "episodes", "Demo Show", "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["episodes"] == [{"id": "demo-show-episode-1", "number": 1.0}]

    def test_lookup_failure_exits_with_error(self, config_dir, make_stub, use_stub_pipeline):
        use_stub_pipeline(make_stub(
            ProviderName.CONSUMET, {}, metadata_error=UpstreamNoDataError("No anime found for 'zzz'", provider="consumet")
        ))

        result = _invoke(config_dir, "episodes", "zzz")

        assert result.exit_code == 1
        assert "No anime found" in result.output
