"""Tests for the update pass over all sources."""

import logging
from unittest.mock import patch

import requests

from lestorant.errors import FetchError
from lestorant.models import AppConfig, Source, Subscription
from lestorant.orchestrator import Orchestrator, update_source_list

FEED_URL = "https://tracker.example/rss.xml"
DOWN_URL = "https://down.example/rss.xml"
TORRENT_NAME = "[Group] Show - 01 [1080p].torrent"


def _fake_network(sample_rss, make_http_response):
    def fake_get(url, **kwargs):
        if url == FEED_URL:
            return make_http_response(content=sample_rss.encode("utf-8"))
        if url.endswith(".torrent"):
            return make_http_response(content=b"d8:announce")
        raise requests.ConnectionError(f"{url} unreachable")

    return fake_get


def _config(tmp_path) -> AppConfig:
    return AppConfig(
        sources=[Source("down", DOWN_URL), Source("tracker", FEED_URL)],
        subscriptions=[Subscription("show", r"Show - \d+", torrent_dir=str(tmp_path))],
        retry_count=1,
    )


class TestUpdatePass:
    def test_failed_source_reported_once_and_pass_continues(self, tmp_path, sample_rss, make_http_response):
        config = _config(tmp_path)
        results = []
        with patch("lestorant.fetchers.http.requests.get", side_effect=_fake_network(sample_rss, make_http_response)):
            report = update_source_list(
                config.sources,
                config,
                config.subscriptions,
                lambda task, err: results.append((task, err)),
            )

        source_failures = [err for task, err in results if task is None]
        assert len(source_failures) == 1
        assert isinstance(source_failures[0], FetchError)

        task_results = [(task.title, err) for task, err in results if task is not None]
        assert task_results == [("[Group] Show - 01 [1080p]", None)]
        assert (tmp_path / TORRENT_NAME).read_bytes() == b"d8:announce"

        assert report.sources == 2
        assert report.failed_sources == 1
        assert report.articles == 2
        assert report.tasks == 1
        assert report.succeeded == 1
        assert report.failed == 0

    def test_second_run_is_a_no_op(self, tmp_path, sample_rss, make_http_response):
        config = _config(tmp_path)
        orchestrator = Orchestrator(config)
        with patch("lestorant.fetchers.http.requests.get", side_effect=_fake_network(sample_rss, make_http_response)):
            first = orchestrator.run(config.sources, config.subscriptions)
            second = orchestrator.run(config.sources, config.subscriptions)

        assert first.tasks == 1
        assert second.tasks == 0
        assert [p.name for p in tmp_path.iterdir()] == [TORRENT_NAME]

    def test_logs_article_count(self, tmp_path, sample_rss, make_http_response, caplog):
        config = _config(tmp_path)
        with patch("lestorant.fetchers.http.requests.get", side_effect=_fake_network(sample_rss, make_http_response)):
            with caplog.at_level(logging.INFO, logger="lestorant.orchestrator"):
                Orchestrator(config).update_source(config.sources[1], config.subscriptions)

        assert "Source tracker responded with 2 articles" in caplog.text
        assert "Found 1 new torrent" in caplog.text

    def test_unparsable_feed_counts_as_failed_source(self, tmp_path, make_http_response):
        config = AppConfig(sources=[Source("broken", FEED_URL)], subscriptions=[Subscription("all", ".")])
        results = []
        with patch("lestorant.fetchers.http.requests.get", return_value=make_http_response(content=b"<html/>")):
            report = Orchestrator(config).run(config.sources, config.subscriptions, lambda t, e: results.append((t, e)))

        assert report.failed_sources == 1
        ((task, err),) = results
        assert task is None
        assert "cannot find child named rss" in str(err)

    def test_same_magnet_from_two_sources_dispatched_once(self, tmp_path, make_http_response):
        feed = (
            "<rss><channel><item><title>Show - 05</title><guid>g5</guid>"
            '<enclosure url="magnet:?xt=urn:btih:05" type="application/x-bittorrent"/>'
            "</item></channel></rss>"
        )
        config = AppConfig(
            sources=[Source("a", FEED_URL), Source("b", "https://mirror.example/rss.xml")],
            subscriptions=[Subscription("show", r"Show - \d+", torrent_dir=str(tmp_path))],
            retry_count=1,
        )
        results = []
        with patch("lestorant.fetchers.http.requests.get", return_value=make_http_response(content=feed.encode())):
            report = Orchestrator(config).run(config.sources, config.subscriptions, lambda t, e: results.append(t.title))

        assert results == ["Show - 05"]
        assert report.tasks == 1
