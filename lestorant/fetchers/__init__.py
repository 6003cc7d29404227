"""Content fetching layer: HTTP retrieval and feed article extraction."""

from .http import fetch, fetch_url, pick_proxy
from .rss import load_feed, load_rss_articles

__all__ = ["fetch", "fetch_url", "pick_proxy", "load_feed", "load_rss_articles"]
