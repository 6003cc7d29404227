from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union


class LoaderType(str, Enum):
    """Feed loaders able to turn a feed document into articles."""

    BASIC = "basic"
    FEEDPARSER = "feedparser"


DEFAULT_LOADER_TYPE = LoaderType.BASIC


@dataclass(slots=True)
class Source:
    """A feed endpoint to poll.

    ``url`` is either a single URL or a list of candidates tried in order
    until one of them answers.
    """

    name: str
    url: Union[str, List[str]]
    loader_type: LoaderType = DEFAULT_LOADER_TYPE

    @property
    def urls(self) -> List[str]:
        return [self.url] if isinstance(self.url, str) else list(self.url)


@dataclass(slots=True)
class Subscription:
    """A title pattern plus the directories its torrents go to."""

    name: str
    pattern: str
    exclude_pattern: Optional[str] = None
    torrent_dir: Optional[str] = None
    # Falls back to the resolved torrent directory when unset.
    content_dir: Optional[str] = None
