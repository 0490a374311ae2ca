"""Tests for application settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from photoindex.config.settings import IndexSettings, Settings
from photoindex.sources.flickr import FlickrAdapter
from photoindex.sources.instagram import InstagramAdapter
from photoindex.sources.registry import SourceNotFoundError, SourceRegistry


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.index.prefix == "photoindex"
        assert settings.queue.max_tries == 5
        assert settings.index.synonyms_path is None

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PHOTOINDEX_QUEUE__MAX_TRIES", "2")
        monkeypatch.setenv("PHOTOINDEX_SOURCES__FLICKR__API_KEY", "abc")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.queue.max_tries == 2
        assert settings.sources.flickr.api_key == "abc"

    def test_hosts_from_json_string(self) -> None:
        assert IndexSettings(hosts='["http://a:9200", "http://b:9200"]').hosts == ["http://a:9200", "http://b:9200"]
        assert IndexSettings(hosts="http://a:9200").hosts == ["http://a:9200"]

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("index:\n  prefix: staging\nobservability:\n  log_format: console\n", encoding="utf-8")
        settings = Settings.from_yaml(path)
        assert settings.index.prefix == "staging"
        assert settings.observability.log_format == "console"

    def test_from_yaml_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "nope.yaml")


class TestSourceRegistry:
    def test_only_configured_sources(self) -> None:
        settings = Settings(_env_file=None, sources={"flickr": {"api_key": "k"}})  # type: ignore[call-arg]
        registry = SourceRegistry.from_settings(settings.sources)
        assert registry.sources == ["flickr"]
        assert isinstance(registry.get("flickr"), FlickrAdapter)
        with pytest.raises(SourceNotFoundError):
            registry.get("instagram")

    def test_all_sources(self, settings: Settings) -> None:
        registry = SourceRegistry.from_settings(settings.sources)
        assert isinstance(registry.get("instagram"), InstagramAdapter)
        with pytest.raises(SourceNotFoundError):
            registry.get("tumblr")
