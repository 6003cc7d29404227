from __future__ import annotations

import os
import re

_whitespace_re = re.compile(r"\s+")

# Characters that are forbidden in file names on at least one common
# filesystem, mapped to full-width lookalikes.
_FORBIDDEN_CHAR_TRANSLATION = {
    ord("<"): "〈",  # 〈
    ord(">"): "〉",  # 〉
    ord(":"): "：",  # ：
    ord('"'): "“",  # “
    ord("/"): "／",  # ／
    ord("\\"): "＼",  # ＼
    ord("|"): "｜",  # ｜
    ord("?"): "？",  # ？
    ord("*"): "＊",  # ＊
}

TORRENT_SUFFIX = ".torrent"


def sanitize_filename(name: str) -> str:
    """Replace every forbidden path character with its full-width version."""
    return name.translate(_FORBIDDEN_CHAR_TRANSLATION)


def torrent_output_path(directory: str, title: str) -> str:
    """Return where the torrent file for ``title`` is saved inside ``directory``."""
    return os.path.join(directory, sanitize_filename(title) + TORRENT_SUFFIX)


def collapse_whitespace(text: str | None) -> str:
    if not text:
        return ""
    return _whitespace_re.sub(" ", text).strip()
