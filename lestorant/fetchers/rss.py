from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import feedparser
from bs4 import BeautifulSoup
from bs4.element import Tag

from ..errors import ConfigError, StructuralError
from ..models import Article, DEFAULT_LOADER_TYPE, Enclosure, Guid, LoaderType
from ..utils.logging import get_logger

logger = get_logger("lestorant.fetchers.rss")

UNKNOWN = "unknown"


def _child(node: Tag, name: str) -> Optional[Tag]:
    return node.find(name, recursive=False)


def _get_node(root: Tag, *path: str) -> Tag:
    node = root
    for name in path:
        child = _child(node, name)
        if child is None:
            raise StructuralError(f"cannot find child named {name}")
        node = child
    return node


def _text(node: Optional[Tag], default: str) -> str:
    if node is None:
        return default
    text = node.get_text(strip=True)
    return text or default


def _is_true(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _parse_item_basic(item: Tag) -> Article:
    guid = _child(item, "guid")
    if guid is None:
        raise StructuralError("cannot find child named guid")

    enclosure = _child(item, "enclosure")
    if enclosure is None:
        raise StructuralError("cannot find child named enclosure")

    return Article(
        title=_text(_child(item, "title"), UNKNOWN),
        link=_text(_child(item, "link"), UNKNOWN),
        guid=Guid(
            id=guid.get_text(strip=True),
            is_permalink=_is_true(guid.get("isPermaLink", False)),
        ),
        enclosure=Enclosure(
            url=enclosure.get("url", ""),
            mimetype=enclosure.get("type", ""),
        ),
    )


def _load_basic(root: BeautifulSoup) -> List[Article]:
    channel = _get_node(root, "rss", "channel")

    articles: List[Article] = []
    for idx, item in enumerate(channel.find_all("item", recursive=False), start=1):
        try:
            articles.append(_parse_item_basic(item))
        except StructuralError as exc:
            logger.warning("Failed parsing item #%d: %s", idx, exc)
    return articles


def _parse_entry_feedparser(entry: Dict[str, Any]) -> Article:
    guid_id = entry.get("id")
    if not guid_id:
        raise StructuralError("entry has no id")

    enclosures = entry.get("enclosures") or []
    if not enclosures:
        raise StructuralError("entry has no enclosure")
    first = enclosures[0]

    return Article(
        title=entry.get("title") or UNKNOWN,
        link=entry.get("link") or UNKNOWN,
        guid=Guid(id=str(guid_id), is_permalink=bool(entry.get("guidislink", False))),
        enclosure=Enclosure(url=first.get("href") or first.get("url") or "", mimetype=first.get("type") or ""),
    )


def _load_feedparser(root: Any) -> List[Article]:
    entries = getattr(root, "entries", None) or []
    if getattr(root, "bozo", False):
        # feedparser sets bozo when it encounters a feed error but may still parse entries
        if not entries and not getattr(root, "feed", None):
            raise StructuralError(f"unreadable feed: {getattr(root, 'bozo_exception', 'unknown error')}")
        logger.debug("Feed 'bozo' flagged: %s", getattr(root, "bozo_exception", None))

    articles: List[Article] = []
    for idx, entry in enumerate(entries, start=1):
        try:
            articles.append(_parse_entry_feedparser(entry))
        except StructuralError as exc:
            logger.warning("Failed parsing entry #%d: %s", idx, exc)
    return articles


def _parse_basic(content: Union[bytes, str]) -> BeautifulSoup:
    try:
        return BeautifulSoup(content, "xml")
    except (ValueError, TypeError, UnicodeError) as exc:
        raise StructuralError("failed to parse XML content") from exc


def _parse_feedparser(content: Union[bytes, str]) -> Any:
    return feedparser.parse(content)


_LOADERS: Dict[LoaderType, Tuple[Callable[[Union[bytes, str]], Any], Callable[[Any], List[Article]]]] = {
    LoaderType.BASIC: (_parse_basic, _load_basic),
    LoaderType.FEEDPARSER: (_parse_feedparser, _load_feedparser),
}


def _resolve_loader(loader_type: Union[LoaderType, str]):
    try:
        return _LOADERS[LoaderType(loader_type)]
    except (KeyError, ValueError):
        raise ConfigError(f"unknown loader type: {loader_type}") from None


def load_feed(loader_type: Union[LoaderType, str], root: Any) -> List[Article]:
    """Extract articles from an already parsed feed tree.

    Items missing a required child are skipped with a warning; a tree
    without the required channel structure raises :class:`StructuralError`.
    """
    _, loader = _resolve_loader(loader_type)
    return loader(root)


def load_rss_articles(
    content: Union[bytes, str],
    loader_type: Union[LoaderType, str] = DEFAULT_LOADER_TYPE,
) -> List[Article]:
    """Parse a feed document and extract its articles."""
    parser, loader = _resolve_loader(loader_type)
    return loader(parser(content))
