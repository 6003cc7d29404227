from __future__ import annotations

import os
import re
from typing import Iterable, List, Optional, Set

from ..models import Article, Subscription, TorrentTask
from ..utils.logging import get_logger
from .normalize import torrent_output_path

logger = get_logger("lestorant.processors.matcher")

MIMETYPE_TORRENT = "application/x-bittorrent"
MAGNET_PREFIX = "magnet:"
DEFAULT_OUTPUT_DIR = "."


def is_torrent_article(article: Article) -> bool:
    return article.enclosure.mimetype == MIMETYPE_TORRENT and article.enclosure.url != ""


def subscription_claims(subscription: Subscription, title: str) -> bool:
    """True when the pattern matches ``title`` and the exclude pattern does not."""
    if not re.search(subscription.pattern, title):
        return False
    if subscription.exclude_pattern and re.search(subscription.exclude_pattern, title):
        return False
    return True


def find_subscription(title: str, subscriptions: Iterable[Subscription]) -> Optional[Subscription]:
    """Return the first subscription claiming ``title``."""
    for sub in subscriptions:
        if subscription_claims(sub, title):
            return sub
    return None


def match_and_dedup(
    articles: Iterable[Article],
    subscriptions: Iterable[Subscription],
    default_output_dir: Optional[str] = None,
    emitted: Optional[Set[str]] = None,
) -> List[TorrentTask]:
    """Return a task for every torrent article that is claimed and not yet saved.

    The first claiming subscription wins. When its torrent file already
    exists the article counts as handled: no task is produced and later
    subscriptions never see it. An output path is emitted at most once per
    ``emitted`` set; pass the same set across calls to keep paths unique for
    a whole run.
    """
    sub_list = list(subscriptions)
    emitted = emitted if emitted is not None else set()
    tasks: List[TorrentTask] = []

    for article in articles:
        if not is_torrent_article(article):
            continue

        sub = find_subscription(article.title, sub_list)
        if sub is None:
            continue

        torrent_dir = sub.torrent_dir or default_output_dir or DEFAULT_OUTPUT_DIR
        output_path = torrent_output_path(torrent_dir, article.title)
        if os.path.exists(output_path):
            logger.debug("Already saved, skipping: %s", output_path)
            continue
        if output_path in emitted:
            logger.debug("Already queued in this run, skipping: %s", output_path)
            continue
        emitted.add(output_path)

        url = article.enclosure.url
        tasks.append(
            TorrentTask(
                title=article.title,
                download_url=url,
                is_magnet_uri=url.startswith(MAGNET_PREFIX),
                output_path=output_path,
                content_dir=sub.content_dir or torrent_dir,
            )
        )
        logger.debug("Subscription '%s' claimed '%s'", sub.name, article.title)

    return tasks
