from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Guid:
    id: str
    is_permalink: bool = False


@dataclass(slots=True)
class Enclosure:
    url: str = ""
    mimetype: str = ""


@dataclass(slots=True)
class Article:
    title: str
    link: str
    guid: Guid
    enclosure: Enclosure
