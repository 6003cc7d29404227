from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TorrentTask:
    """One dispatch decision produced by subscription matching."""

    title: str
    download_url: str
    is_magnet_uri: bool
    # Where the .torrent file is (or would be) saved.
    output_path: str
    # Where the torrent's content should be downloaded to.
    content_dir: str

    @property
    def remote_target(self) -> str:
        """What to hand to aria2: the magnet URI itself or the saved file."""
        return self.download_url if self.is_magnet_uri else self.output_path
