"""Tests for configuration loading and validation."""

import json

import pytest

from lestorant.errors import ConfigError
from lestorant.models import LoaderType
from lestorant.utils.config_loader import load_config, parse_config

YAML_CONFIG = """
output_dir: /srv/torrents
http_proxy: http://proxy:8080
retry_count: 5
timeout: 10
sources:
  - name: tracker
    url:
      - https://a.example/rss.xml
      - https://b.example/rss.xml
    loader_type: feedparser
  - name: mirror
    url: https://mirror.example/rss.xml
subscriptions:
  - name: show
    pattern: "Show - \\\\d+"
    exclude_pattern: "720p"
    torrent_dir: /srv/torrents/show
  - name: legacy
    pattern: Movie
    torrent_dl_dir: /srv/legacy
    content_dl_dir: /srv/content
aria2:
  rpc_url: http://localhost:6800/jsonrpc
  secret: s3cret
"""


class TestLoadConfig:
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(YAML_CONFIG, encoding="utf-8")

        config = load_config(path)

        assert config.output_dir == "/srv/torrents"
        assert config.http_proxy == "http://proxy:8080"
        assert config.retry_count == 5
        assert config.timeout == 10.0

        tracker, mirror = config.sources
        assert tracker.urls == ["https://a.example/rss.xml", "https://b.example/rss.xml"]
        assert tracker.loader_type is LoaderType.FEEDPARSER
        assert mirror.url == "https://mirror.example/rss.xml"
        assert mirror.loader_type is LoaderType.BASIC

        show, legacy = config.subscriptions
        assert show.pattern == r"Show - \d+"
        assert show.exclude_pattern == "720p"
        assert legacy.torrent_dir == "/srv/legacy"
        assert legacy.content_dir == "/srv/content"

        assert config.aria2.rpc_url == "http://localhost:6800/jsonrpc"
        assert config.aria2.secret == "s3cret"

    def test_tab_indented_json_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {"sources": [{"name": "t", "url": "https://t.example/rss"}], "subscriptions": []},
                indent="\t",
            ),
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.sources[0].name == "t"
        assert config.aria2 is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.json")

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Failed to parse"):
            load_config(path)

    def test_empty_file_is_empty_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        config = load_config(path)
        assert config.sources == []
        assert config.subscriptions == []


class TestValidation:
    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigError, match="mapping"):
            parse_config([1, 2])

    def test_source_requires_fields(self):
        with pytest.raises(ConfigError, match="Missing required fields"):
            parse_config({"sources": [{"name": "x"}]})

    def test_source_url_must_be_http(self):
        with pytest.raises(ConfigError, match="Invalid URL"):
            parse_config({"sources": [{"name": "x", "url": "ftp://x.example/rss"}]})

    def test_empty_url_list(self):
        with pytest.raises(ConfigError, match="empty URL list"):
            parse_config({"sources": [{"name": "x", "url": []}]})

    def test_unknown_loader_type(self):
        with pytest.raises(ConfigError, match="Invalid loader_type"):
            parse_config({"sources": [{"name": "x", "url": "https://x.example", "loader_type": "magic"}]})

    def test_invalid_pattern(self):
        with pytest.raises(ConfigError, match="Invalid pattern"):
            parse_config({"subscriptions": [{"name": "s", "pattern": "("}]})

    def test_invalid_exclude_pattern(self):
        with pytest.raises(ConfigError, match="Invalid exclude_pattern"):
            parse_config({"subscriptions": [{"name": "s", "pattern": "a", "exclude_pattern": "[z"}]})

    def test_non_numeric_retry_count(self):
        with pytest.raises(ConfigError, match="retry_count"):
            parse_config({"retry_count": "many"})

    def test_aria2_must_be_mapping(self):
        with pytest.raises(ConfigError, match="aria2"):
            parse_config({"aria2": "http://localhost:6800/jsonrpc"})

    @pytest.mark.parametrize("timeout", [0, -5, "0.0"])
    def test_non_positive_timeout(self, timeout):
        with pytest.raises(ConfigError, match="timeout"):
            parse_config({"timeout": timeout})

    def test_positive_timeout(self):
        assert parse_config({"timeout": "2.5"}).timeout == 2.5


class TestSelectSubscriptions:
    def test_filters_by_name_in_configured_order(self):
        config = parse_config(
            {
                "subscriptions": [
                    {"name": "a", "pattern": "a"},
                    {"name": "b", "pattern": "b"},
                    {"name": "c", "pattern": "c"},
                ]
            }
        )
        assert [s.name for s in config.select_subscriptions(["c", "a"])] == ["a", "c"]
        assert [s.name for s in config.select_subscriptions()] == ["a", "b", "c"]
        assert config.select_subscriptions(["missing"]) == []
