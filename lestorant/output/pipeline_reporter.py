from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class UpdateReport:
    sources: int = 0
    failed_sources: int = 0
    articles: int = 0
    tasks: int = 0
    succeeded: int = 0
    failed: int = 0

    def to_text(self) -> str:
        return (
            f"sources={self.sources} failed_sources={self.failed_sources} "
            f"articles={self.articles} tasks={self.tasks} "
            f"succeeded={self.succeeded} failed={self.failed}"
        )
