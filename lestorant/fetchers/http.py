from __future__ import annotations

import time
from typing import Dict, Optional, Sequence, Union
from urllib.parse import urlparse

import requests

from ..errors import FetchError
from ..models import FetchOptions
from ..models.config import DEFAULT_RETRY_COUNT
from ..utils.logging import get_logger

logger = get_logger("lestorant.fetchers.http")


_DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/127.0.0.0 Safari/537.36"
    )
}


def pick_proxy(target: str, http_proxy: Optional[str], https_proxy: Optional[str]) -> Optional[str]:
    """Return the proxy matching ``target``'s scheme, if any."""
    scheme = urlparse(target).scheme.lower()
    if scheme == "http":
        return http_proxy or None
    if scheme == "https":
        return https_proxy or None
    return None


def _proxies_for(proxy: Optional[str]) -> Optional[Dict[str, str]]:
    if not proxy:
        return None
    return {"http": proxy, "https": proxy}


def fetch_url(target: str, options: Optional[FetchOptions] = None) -> bytes:
    """Fetch ``target`` with up to ``options.retry_count`` attempts.

    Any transport failure or non-2xx status counts as a failed attempt. The
    error of the last attempt is raised as :class:`FetchError`.
    """
    options = options or FetchOptions()
    retry_count = options.retry_count if options.retry_count and options.retry_count > 0 else DEFAULT_RETRY_COUNT

    proxy = pick_proxy(target, options.http_proxy, options.https_proxy)
    if proxy:
        logger.debug("Fetching %s with proxy %s", target, proxy)

    last_error = "request failed"
    for attempt in range(retry_count):
        logger.debug("%s, attempt %d/%d", target, attempt + 1, retry_count)
        try:
            resp = requests.get(
                target,
                headers=_DEFAULT_HEADERS,
                proxies=_proxies_for(proxy),
                timeout=options.timeout,
            )
            resp.raise_for_status()
            return resp.content
        except requests.RequestException as exc:
            last_error = str(exc) or exc.__class__.__name__
            logger.debug("Fetch attempt %d for %s failed: %s", attempt + 1, target, last_error)

        if options.backoff and attempt + 1 < retry_count:
            time.sleep(options.backoff ** attempt)

    raise FetchError(last_error)


def fetch(target: Union[str, Sequence[str]], options: Optional[FetchOptions] = None) -> bytes:
    """Fetch a URL, or the first candidate of a URL list that answers.

    Candidates are tried strictly in order and the first success wins; later
    candidates are never contacted.
    """
    candidates = [target] if isinstance(target, str) else list(target)
    error = FetchError("no URL to fetch")
    for url in candidates:
        logger.debug("Visiting %s", url)
        try:
            return fetch_url(url, options)
        except FetchError as exc:
            error = exc
    raise error
