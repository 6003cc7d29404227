from __future__ import annotations

from typing import Callable, Iterable, Optional

from ..errors import LestorantError, StorageError
from ..fetchers.http import fetch_url
from ..models import FetchOptions, TorrentTask
from ..utils.logging import get_logger

logger = get_logger("lestorant.processors.dispatch")

TaskResultCallback = Callable[[Optional[TorrentTask], Optional[LestorantError]], None]


def fetch_torrent(task: TorrentTask, options: Optional[FetchOptions] = None) -> None:
    """Save the torrent file of ``task``; magnet tasks need no download.

    The destination is created before the download starts and is left in
    place if the download or the write fails.
    """
    if task.is_magnet_uri:
        return

    try:
        fh = open(task.output_path, "xb")
    except OSError as exc:
        raise StorageError(f"failed to open torrent file {task.output_path}: {exc}") from exc

    with fh:
        data = fetch_url(task.download_url, options)
        try:
            fh.write(data)
        except OSError as exc:
            raise StorageError(f"failed to write torrent file {task.output_path}: {exc}") from exc


def dispatch(
    tasks: Iterable[TorrentTask],
    options: Optional[FetchOptions] = None,
    on_result: Optional[TaskResultCallback] = None,
) -> None:
    """Dispatch tasks one after another, reporting each outcome exactly once."""
    for task in tasks:
        error: Optional[LestorantError] = None
        try:
            fetch_torrent(task, options)
        except LestorantError as exc:
            error = exc
            logger.debug("Task '%s' failed: %s", task.title, exc)
        if on_result is not None:
            on_result(task, error)
