from __future__ import annotations

from typing import Iterable, List, Optional, Set

from .errors import LestorantError
from .fetchers import fetch, load_rss_articles
from .models import AppConfig, Article, Source, Subscription, TorrentTask
from .output.pipeline_reporter import UpdateReport
from .processors import TaskResultCallback, dispatch, match_and_dedup
from .utils.logging import get_logger

logger = get_logger("lestorant.orchestrator")


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class Orchestrator:
    """Drives one update pass over configured feed sources.

    Sources are handled one after another. A source that cannot be fetched
    or parsed is reported once through ``on_result(None, error)`` and the
    pass moves on; every dispatched task is reported through
    ``on_result(task, error_or_none)``.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.fetch_options = config.fetch_options()

    def _load_source(self, source: Source) -> List[Article]:
        content = fetch(source.url, self.fetch_options)
        logger.debug("Fetched %s", source.name)
        return load_rss_articles(content, source.loader_type)

    def update_source(
        self,
        source: Source,
        subscriptions: List[Subscription],
        on_result: Optional[TaskResultCallback] = None,
        report: Optional[UpdateReport] = None,
        emitted: Optional[Set[str]] = None,
    ) -> None:
        report = report if report is not None else UpdateReport()
        report.sources += 1
        logger.debug("Updating %s", source.name)

        try:
            articles = self._load_source(source)
        except LestorantError as exc:
            report.failed_sources += 1
            logger.debug("Source %s failed: %s", source.name, exc)
            if on_result is not None:
                on_result(None, exc)
            return

        report.articles += len(articles)
        logger.info("Source %s responded with %s", source.name, _plural(len(articles), "article"))

        tasks = match_and_dedup(articles, subscriptions, self.config.output_dir, emitted)
        if not tasks:
            return

        logger.info("Found %s", _plural(len(tasks), "new torrent"))
        report.tasks += len(tasks)

        def _on_task(task: Optional[TorrentTask], error: Optional[LestorantError]) -> None:
            if error is None:
                report.succeeded += 1
            else:
                report.failed += 1
            if on_result is not None:
                on_result(task, error)

        dispatch(tasks, self.fetch_options, _on_task)

    def run(
        self,
        sources: Iterable[Source],
        subscriptions: Iterable[Subscription],
        on_result: Optional[TaskResultCallback] = None,
    ) -> UpdateReport:
        sub_list = list(subscriptions)
        report = UpdateReport()
        emitted: Set[str] = set()
        for source in sources:
            self.update_source(source, sub_list, on_result, report, emitted)
        logger.info("Update finished: %s", report.to_text())
        return report


def update_source_list(
    sources: Iterable[Source],
    config: AppConfig,
    subscriptions: Iterable[Subscription],
    on_result: Optional[TaskResultCallback] = None,
) -> UpdateReport:
    return Orchestrator(config).run(sources, subscriptions, on_result)
