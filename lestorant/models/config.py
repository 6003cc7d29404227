from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .source import Source, Subscription

DEFAULT_RETRY_COUNT = 3
DEFAULT_TIMEOUT = 30.0


@dataclass(slots=True)
class FetchOptions:
    """Knobs for a single HTTP fetch."""

    retry_count: int = DEFAULT_RETRY_COUNT
    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    # Seconds; 0 retries immediately, otherwise sleeps backoff ** attempt.
    backoff: float = 0.0


@dataclass(slots=True)
class Aria2Config:
    rpc_url: Optional[str] = None
    secret: Optional[str] = None
    rpc_method: Optional[str] = None
    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None


@dataclass(slots=True)
class AppConfig:
    """Parsed configuration file."""

    sources: List[Source] = field(default_factory=list)
    subscriptions: List[Subscription] = field(default_factory=list)
    output_dir: Optional[str] = None
    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None
    retry_count: int = DEFAULT_RETRY_COUNT
    timeout: float = DEFAULT_TIMEOUT
    aria2: Optional[Aria2Config] = None

    def fetch_options(self) -> FetchOptions:
        return FetchOptions(
            retry_count=self.retry_count,
            http_proxy=self.http_proxy,
            https_proxy=self.https_proxy,
            timeout=self.timeout,
        )

    def select_subscriptions(self, names: Optional[List[str]] = None) -> List[Subscription]:
        """Return subscriptions in configured order, optionally filtered by name."""
        if not names:
            return list(self.subscriptions)
        wanted = set(names)
        return [sub for sub in self.subscriptions if sub.name in wanted]
