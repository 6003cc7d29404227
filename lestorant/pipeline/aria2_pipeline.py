from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from ..errors import LestorantError
from ..models import AppConfig, Subscription, TorrentTask
from ..orchestrator import Orchestrator
from ..output.pipeline_reporter import UpdateReport
from ..rpc import RpcClient, UriOption
from ..utils.logging import get_logger

logger = get_logger("lestorant.pipeline.aria2")

SubmitCallback = Callable[[TorrentTask, object, Optional[LestorantError]], None]


@dataclass(slots=True)
class Aria2UpdateResult:
    report: UpdateReport
    submitted: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)


def run_aria2_update(
    config: AppConfig,
    subscriptions: Iterable[Subscription],
    client: RpcClient,
    *,
    on_submitted: Optional[SubmitCallback] = None,
) -> Aria2UpdateResult:
    """Update all sources and add every new torrent as an aria2 task.

    Magnet tasks are sent as URIs, other tasks as their saved .torrent file.
    Each new download goes to the task's content directory. A failed fetch or
    a failed RPC call is logged and counted; the pass always continues.
    """
    outcome = Aria2UpdateResult(report=UpdateReport())

    def _submit(task: Optional[TorrentTask], error: Optional[LestorantError]) -> None:
        if task is None:
            logger.warning("%s", error)
            return
        if error is not None:
            logger.warning("Torrent download failed: %s - %s", task.title, error)
            return

        def _on_added(result: object, rpc_error: Optional[LestorantError]) -> None:
            if rpc_error is not None:
                outcome.rejected.append(task.title)
                logger.warning("Failed to add aria2 task %s: %s", task.title, rpc_error)
            else:
                outcome.submitted.append(task.title)
                logger.info("New aria2 task added: %s (gid %s)", task.title, result)
            if on_submitted is not None:
                on_submitted(task, result, rpc_error)

        client.add_task(task.remote_target, {UriOption.DIR: task.content_dir}, None, _on_added)

    outcome.report = Orchestrator(config).run(config.sources, subscriptions, _submit)
    return outcome
