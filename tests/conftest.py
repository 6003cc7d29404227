"""Pytest fixtures for lestorant tests."""

from __future__ import annotations

import json
from typing import Any, Callable, Optional
from unittest.mock import MagicMock

import pytest
import requests

from lestorant.models import Article, Enclosure, Guid

TORRENT_MIMETYPE = "application/x-bittorrent"

SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Sample Tracker</title>
    <item>
      <title>[Group] Show - 01 [1080p]</title>
      <link>https://tracker.example/view/1</link>
      <guid isPermaLink="true">https://tracker.example/view/1</guid>
      <enclosure url="https://tracker.example/download/1.torrent" type="application/x-bittorrent" length="1024"/>
    </item>
    <item>
      <title>[Group] Show - 02 [1080p]</title>
      <link>https://tracker.example/view/2</link>
      <enclosure url="https://tracker.example/download/2.torrent" type="application/x-bittorrent" length="1024"/>
    </item>
    <item>
      <title>[Other] Movie [720p]</title>
      <link>https://tracker.example/view/3</link>
      <guid>item-3</guid>
      <enclosure url="magnet:?xt=urn:btih:0123456789abcdef" type="application/x-bittorrent" length="0"/>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def sample_rss() -> str:
    """Three items; the second one has no guid."""
    return SAMPLE_RSS


@pytest.fixture
def make_http_response() -> Callable[..., MagicMock]:
    """Build a fake ``requests.Response``."""

    def _make(status_code: int = 200, content: bytes = b"", reason: str = "OK") -> MagicMock:
        resp = MagicMock()
        resp.status_code = status_code
        resp.reason = reason
        resp.content = content
        resp.text = content.decode("utf-8", errors="replace")
        if status_code >= 400:
            resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} {reason}")
        else:
            resp.raise_for_status.return_value = None
        return resp

    return _make


@pytest.fixture
def make_rpc_response(make_http_response) -> Callable[..., MagicMock]:
    """Build a fake JSON-RPC response for a given result or error object."""

    def _make(result: Any = None, error: Optional[dict] = None, request_id: str = "1") -> MagicMock:
        body: dict = {"jsonrpc": "2.0", "id": request_id}
        if error is not None:
            body["error"] = error
        else:
            body["result"] = result
        return make_http_response(content=json.dumps(body).encode("utf-8"))

    return _make


@pytest.fixture
def make_article() -> Callable[..., Article]:
    def _make(
        title: str,
        url: str = "https://tracker.example/t.torrent",
        mimetype: str = TORRENT_MIMETYPE,
    ) -> Article:
        return Article(
            title=title,
            link="https://tracker.example/view",
            guid=Guid(id=title),
            enclosure=Enclosure(url=url, mimetype=mimetype),
        )

    return _make

