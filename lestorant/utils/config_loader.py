from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

import yaml

from ..errors import ConfigError
from ..models import AppConfig, Aria2Config, LoaderType, Source, Subscription
from ..models.config import DEFAULT_RETRY_COUNT, DEFAULT_TIMEOUT

SOURCE_REQUIRED_FIELDS = {"name", "url"}
SUBSCRIPTION_REQUIRED_FIELDS = {"name", "pattern"}

# Older configs spell the directory keys with a "_dl_" infix.
_SUBSCRIPTION_ALIASES = {
    "torrent_dl_dir": "torrent_dir",
    "content_dl_dir": "content_dir",
}


def _check_url(url: Any) -> str:
    url_str = str(url).strip()
    parsed = urlparse(url_str)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid URL '{url_str}'. Must be absolute http(s) URL.")
    return url_str


def _check_pattern(pattern: Any, field_name: str, sub_name: str) -> str:
    if not isinstance(pattern, str) or not pattern:
        raise ConfigError(f"'{field_name}' of subscription '{sub_name}' must be a non-empty string")
    try:
        re.compile(pattern)
    except re.error as exc:
        raise ConfigError(f"Invalid {field_name} '{pattern}' in subscription '{sub_name}': {exc}") from exc
    return pattern


def _optional_str(entry: Dict[str, Any], key: str) -> Optional[str]:
    value = entry.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string if provided")
    return value.strip() or None


def _validate_source_dict(entry: dict) -> Source:
    """Validate a single source mapping.

    Required fields: name (str), url (http/https URL or a list of them).
    Optional fields:
      - loader_type: 'basic' | 'feedparser'
    """
    missing = SOURCE_REQUIRED_FIELDS - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields: {sorted(missing)} in {entry}")

    raw_url = entry["url"]
    if isinstance(raw_url, list):
        if not raw_url:
            raise ConfigError(f"Source '{entry['name']}' has an empty URL list")
        url: str | List[str] = [_check_url(u) for u in raw_url]
    else:
        url = _check_url(raw_url)

    loader_raw = entry.get("loader_type") or LoaderType.BASIC.value
    try:
        loader_type = LoaderType(str(loader_raw).strip())
    except ValueError:
        allowed = sorted(t.value for t in LoaderType)
        raise ConfigError(f"Invalid loader_type '{loader_raw}'. Allowed: {allowed}") from None

    return Source(name=str(entry["name"]).strip(), url=url, loader_type=loader_type)


def _validate_subscription_dict(entry: dict) -> Subscription:
    entry = {_SUBSCRIPTION_ALIASES.get(k, k): v for k, v in entry.items()}
    missing = SUBSCRIPTION_REQUIRED_FIELDS - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields: {sorted(missing)} in {entry}")

    name = str(entry["name"]).strip()
    exclude = entry.get("exclude_pattern")
    return Subscription(
        name=name,
        pattern=_check_pattern(entry["pattern"], "pattern", name),
        exclude_pattern=_check_pattern(exclude, "exclude_pattern", name) if exclude else None,
        torrent_dir=_optional_str(entry, "torrent_dir"),
        content_dir=_optional_str(entry, "content_dir"),
    )


def _validate_aria2_dict(entry: Any) -> Aria2Config:
    if not isinstance(entry, dict):
        raise ConfigError("'aria2' must be a mapping if provided")
    rpc_url = _optional_str(entry, "rpc_url")
    return Aria2Config(
        rpc_url=_check_url(rpc_url) if rpc_url else None,
        secret=_optional_str(entry, "secret"),
        rpc_method=_optional_str(entry, "rpc_method"),
        http_proxy=_optional_str(entry, "http_proxy"),
        https_proxy=_optional_str(entry, "https_proxy"),
    )


def _mapping_list(data: dict, key: str) -> Iterable[dict]:
    raw = data.get(key) or []
    if not isinstance(raw, list):
        raise ConfigError(f"'{key}' must be a list in the configuration")
    for item in raw:
        if not isinstance(item, dict):
            raise ConfigError(f"Each entry of '{key}' must be a mapping, got: {type(item)}")
        yield item


def _number(data: dict, key: str, default: float, cast: type) -> Any:
    value = data.get(key)
    if value is None:
        return default
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be a number, got: {value!r}") from None


def _positive_timeout(data: dict) -> float:
    timeout = _number(data, "timeout", DEFAULT_TIMEOUT, float)
    if timeout <= 0:
        raise ConfigError(f"'timeout' must be greater than 0, got: {timeout!r}")
    return timeout


def parse_config(data: Any) -> AppConfig:
    """Build an :class:`AppConfig` from an already parsed mapping.

    Unknown top-level keys are ignored for forward compatibility.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    aria2 = data.get("aria2")
    return AppConfig(
        sources=[_validate_source_dict(item) for item in _mapping_list(data, "sources")],
        subscriptions=[_validate_subscription_dict(item) for item in _mapping_list(data, "subscriptions")],
        output_dir=_optional_str(data, "output_dir"),
        http_proxy=_optional_str(data, "http_proxy"),
        https_proxy=_optional_str(data, "https_proxy"),
        retry_count=_number(data, "retry_count", DEFAULT_RETRY_COUNT, int),
        timeout=_positive_timeout(data),
        aria2=_validate_aria2_dict(aria2) if aria2 is not None else None,
    )


def load_config(path: Path | str) -> AppConfig:
    """Load a YAML or JSON configuration file (chosen by the ``.json`` suffix).

    Structure:
      - sources: list of {name, url (string or list), loader_type?}
      - subscriptions: list of {name, pattern, exclude_pattern?, torrent_dir?, content_dir?}
      - output_dir, http_proxy, https_proxy, retry_count, timeout (optional)
      - aria2: {rpc_url?, secret?, rpc_method?, http_proxy?, https_proxy?} (optional)
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            # PyYAML rejects tab indentation, which JSON files often use
            data = json.load(f) if config_path.suffix.lower() == ".json" else yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Failed to parse config file {config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {config_path}: {exc}") from exc

    return parse_config(data)
