"""Typed models used across the application."""

from .source import Source, Subscription, LoaderType, DEFAULT_LOADER_TYPE
from .article import Article, Enclosure, Guid
from .task import TorrentTask
from .config import AppConfig, Aria2Config, FetchOptions

__all__ = [
    "Source",
    "Subscription",
    "LoaderType",
    "DEFAULT_LOADER_TYPE",
    "Article",
    "Enclosure",
    "Guid",
    "TorrentTask",
    "AppConfig",
    "Aria2Config",
    "FetchOptions",
]
