"""Processing pipeline: subscription matching, dedup and task dispatch."""

from .normalize import sanitize_filename, torrent_output_path
from .matcher import match_and_dedup, find_subscription, MIMETYPE_TORRENT, DEFAULT_OUTPUT_DIR
from .dispatch import dispatch, fetch_torrent, TaskResultCallback

__all__ = [
    "sanitize_filename",
    "torrent_output_path",
    "match_and_dedup",
    "find_subscription",
    "MIMETYPE_TORRENT",
    "DEFAULT_OUTPUT_DIR",
    "dispatch",
    "fetch_torrent",
    "TaskResultCallback",
]
