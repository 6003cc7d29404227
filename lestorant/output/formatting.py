from __future__ import annotations

import math
import os
from typing import Any, List, Mapping

from ..models import Source, Subscription
from ..processors.matcher import DEFAULT_OUTPUT_DIR
from ..processors.normalize import collapse_whitespace
from ..rpc.methods import TaskStatus

_SIZE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")
_SIZE_STEP = 1024

MAX_NAME_LEN = 50
ELLIPSIS = "..."
INDENT = "  "
BIG_INDENT = "    "


def file_size_abbr(value: float, threshold: float = 1.0) -> str:
    """Format a byte count with the largest unit keeping the value >= ``threshold``."""
    result = float(value)
    unit = _SIZE_UNITS[0]
    for idx, unit in enumerate(_SIZE_UNITS):
        result = value
        value = value / _SIZE_STEP
        if value < threshold or idx == len(_SIZE_UNITS) - 1:
            break
    if float(result).is_integer():
        return f"{int(result)}{unit}"
    return f"{result:.2f}{unit}"


def to_hhmmss(seconds: float) -> str:
    """Format a duration as ``HH:MM:SS``, prefixed with days when needed."""
    total = int(math.ceil(max(seconds, 0)))
    days, rem = divmod(total, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, secs = divmod(rem, 60)
    clock = f"{hours:02d}:{minutes:02d}:{secs:02d}"
    if days <= 0:
        return clock
    return f"{days} {'day' if days == 1 else 'days'} {clock}"


def compute_eta(download_speed: float, remaining_length: float) -> str:
    if download_speed <= 0:
        return "N/A"
    return to_hhmmss(remaining_length / download_speed)


def _to_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def task_name(task: Mapping[str, Any]) -> str:
    """Best display name for an aria2 status struct."""
    name = ((task.get("bittorrent") or {}).get("info") or {}).get("name")
    if not name:
        files = task.get("files") or []
        path = files[0].get("path") if files else None
        name = os.path.basename(path) if path else None
    name = collapse_whitespace(name or task.get("gid") or "unknown")
    if len(name) > MAX_NAME_LEN:
        name = name[: MAX_NAME_LEN - len(ELLIPSIS)] + ELLIPSIS
    return name


def task_status(task: Mapping[str, Any]) -> str:
    try:
        return TaskStatus(task.get("status")).value
    except ValueError:
        return "unknown"


def format_task_line(task: Mapping[str, Any]) -> str:
    completed = _to_number(task.get("completedLength"))
    total = _to_number(task.get("totalLength"))
    speed = _to_number(task.get("downloadSpeed"))
    percent = 100.0 * completed / total if total > 0 else 100.0

    return (
        f"{task.get('gid', '?')}  {task_status(task):<8} {percent:6.2f}%  "
        f"{file_size_abbr(completed)}/{file_size_abbr(total)}  "
        f"{file_size_abbr(speed)}/s  ETA {compute_eta(speed, total - completed)}  "
        f"{task_name(task)}"
    )


def format_source(source: Source) -> str:
    lines = [f"Name: {source.name}", f"{INDENT}URL:"]
    urls = source.urls
    if urls:
        lines.extend(f"{BIG_INDENT}{url}" for url in urls)
    else:
        lines.append(f"{BIG_INDENT}no valid URL found")
    lines.append(f"{INDENT}Loader: {source.loader_type.value}")
    return "\n".join(lines)


def format_subscription(sub: Subscription, default_output_dir: str | None = None) -> str:
    torrent_dir = sub.torrent_dir or default_output_dir or DEFAULT_OUTPUT_DIR
    lines: List[str] = [
        f"Name: {sub.name}",
        f"{INDENT}Pattern:",
        f"{BIG_INDENT}{sub.pattern}",
        f"{INDENT}Exclude Pattern:",
        f"{BIG_INDENT}{sub.exclude_pattern or '-'}",
        f"{INDENT}Torrent directory:",
        f"{BIG_INDENT}{torrent_dir}",
        f"{INDENT}Content directory:",
        f"{BIG_INDENT}{sub.content_dir or torrent_dir}",
    ]
    return "\n".join(lines)


def format_version(info: Mapping[str, Any]) -> str:
    lines = [f"Version: {info.get('version') or 'unknown'}"]
    features = info.get("enabledFeatures")
    if isinstance(features, list):
        lines.append("Enabled Features:")
        if features:
            lines.extend(f"{BIG_INDENT}{feature}" for feature in features)
        else:
            lines.append(f"{BIG_INDENT}None")
    return "\n".join(lines)
