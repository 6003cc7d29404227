"""Tests for feed parsing into articles."""

import logging

import pytest

from lestorant.errors import ConfigError, StructuralError
from lestorant.fetchers import load_rss_articles
from lestorant.models import LoaderType


class TestBasicLoader:
    def test_item_missing_guid_is_skipped_with_warning(self, sample_rss, caplog):
        with caplog.at_level(logging.WARNING, logger="lestorant.fetchers.rss"):
            articles = load_rss_articles(sample_rss.encode("utf-8"))

        assert [a.title for a in articles] == ["[Group] Show - 01 [1080p]", "[Other] Movie [720p]"]
        assert "Failed parsing item #2" in caplog.text

    def test_fields_are_extracted(self, sample_rss):
        first, third = load_rss_articles(sample_rss.encode("utf-8"))

        assert first.link == "https://tracker.example/view/1"
        assert first.guid.id == "https://tracker.example/view/1"
        assert first.guid.is_permalink is True
        assert first.enclosure.url == "https://tracker.example/download/1.torrent"
        assert first.enclosure.mimetype == "application/x-bittorrent"

        assert third.guid.id == "item-3"
        assert third.guid.is_permalink is False
        assert third.enclosure.url.startswith("magnet:")

    def test_missing_title_and_link_default_to_unknown(self):
        xml = """<rss><channel><item>
            <guid>g</guid><enclosure url="u" type="t"/>
        </item></channel></rss>"""
        (article,) = load_rss_articles(xml)
        assert article.title == "unknown"
        assert article.link == "unknown"

    def test_missing_enclosure_attributes_default_to_empty(self):
        xml = "<rss><channel><item><title>a</title><guid>g</guid><enclosure/></item></channel></rss>"
        (article,) = load_rss_articles(xml)
        assert article.enclosure.url == ""
        assert article.enclosure.mimetype == ""

    def test_missing_channel_is_structural_error(self):
        with pytest.raises(StructuralError, match="channel"):
            load_rss_articles("<rss><item/></rss>")

    def test_missing_rss_root_is_structural_error(self):
        with pytest.raises(StructuralError, match="rss"):
            load_rss_articles("<feed><entry/></feed>")

    def test_empty_channel_yields_no_articles(self):
        assert load_rss_articles("<rss><channel><title>x</title></channel></rss>") == []


class TestFeedparserLoader:
    def test_entries_become_articles(self, sample_rss, caplog):
        with caplog.at_level(logging.WARNING, logger="lestorant.fetchers.rss"):
            articles = load_rss_articles(sample_rss, LoaderType.FEEDPARSER)

        titles = [a.title for a in articles]
        assert "[Group] Show - 01 [1080p]" in titles
        assert "[Other] Movie [720p]" in titles

        movie = next(a for a in articles if a.title == "[Other] Movie [720p]")
        assert movie.guid.id == "item-3"
        assert movie.enclosure.mimetype == "application/x-bittorrent"

    def test_accepts_loader_name_string(self, sample_rss):
        titles = [a.title for a in load_rss_articles(sample_rss, "feedparser")]
        assert "[Other] Movie [720p]" in titles


class TestLoaderSelection:
    def test_unknown_loader_is_config_error(self, sample_rss):
        with pytest.raises(ConfigError, match="unknown loader type"):
            load_rss_articles(sample_rss, "nonsense")
