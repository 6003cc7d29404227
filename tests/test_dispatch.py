"""Tests for task dispatch to the local filesystem."""

from unittest.mock import patch

import pytest
import requests

from lestorant.errors import FetchError, StorageError
from lestorant.models import FetchOptions, TorrentTask
from lestorant.processors import dispatch, fetch_torrent


def _task(tmp_path, title="Show 01", url="https://t.example/1.torrent"):
    return TorrentTask(
        title=title,
        download_url=url,
        is_magnet_uri=url.startswith("magnet:"),
        output_path=str(tmp_path / f"{title}.torrent"),
        content_dir=str(tmp_path),
    )


class TestFetchTorrent:
    def test_magnet_task_writes_nothing(self, tmp_path):
        task = _task(tmp_path, url="magnet:?xt=urn:btih:abc")
        with patch("lestorant.fetchers.http.requests.get") as get:
            fetch_torrent(task)
        get.assert_not_called()
        assert list(tmp_path.iterdir()) == []

    def test_file_task_writes_body(self, tmp_path, make_http_response):
        task = _task(tmp_path)
        with patch("lestorant.fetchers.http.requests.get", return_value=make_http_response(content=b"d8:announce")):
            fetch_torrent(task)
        assert (tmp_path / "Show 01.torrent").read_bytes() == b"d8:announce"

    def test_existing_file_is_never_overwritten(self, tmp_path):
        task = _task(tmp_path)
        (tmp_path / "Show 01.torrent").write_bytes(b"old")
        with patch("lestorant.fetchers.http.requests.get") as get:
            with pytest.raises(StorageError, match="failed to open torrent file"):
                fetch_torrent(task)
        get.assert_not_called()
        assert (tmp_path / "Show 01.torrent").read_bytes() == b"old"

    def test_missing_directory_is_storage_error(self, tmp_path):
        task = TorrentTask("t", "https://t.example/1.torrent", False, str(tmp_path / "nope" / "t.torrent"), str(tmp_path))
        with pytest.raises(StorageError):
            fetch_torrent(task)

    def test_fetch_failure_propagates(self, tmp_path):
        with patch("lestorant.fetchers.http.requests.get", side_effect=requests.ConnectionError("down")):
            with pytest.raises(FetchError):
                fetch_torrent(_task(tmp_path), FetchOptions(retry_count=1))


class TestDispatch:
    def test_each_task_reported_once(self, tmp_path, make_http_response):
        tasks = [_task(tmp_path, "a"), _task(tmp_path, "b", url="magnet:?xt=urn:btih:b"), _task(tmp_path, "c")]

        def fake_get(url, **kwargs):
            if url.endswith("1.torrent") and fake_get.calls == 0:
                fake_get.calls += 1
                return make_http_response(content=b"a")
            raise requests.ConnectionError("down")

        fake_get.calls = 0
        results = []
        with patch("lestorant.fetchers.http.requests.get", side_effect=fake_get):
            dispatch(tasks, FetchOptions(retry_count=1), lambda task, err: results.append((task.title, err)))

        assert [title for title, _ in results] == ["a", "b", "c"]
        assert results[0][1] is None
        assert results[1][1] is None
        assert isinstance(results[2][1], FetchError)

    def test_without_callback(self, tmp_path):
        dispatch([_task(tmp_path, url="magnet:?xt=urn:btih:abc")])
