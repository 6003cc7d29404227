"""Command line entrypoint for lestorant.

Two command groups are available:
1) ``rss``: list configured feeds/subscriptions and run update passes
2) ``aria2rpc``: manage a running aria2 instance over JSON-RPC
"""

from __future__ import annotations

import argparse
import json
from typing import Any, Callable, Dict, List, Optional, Sequence

from dotenv import load_dotenv

from .errors import ConfigError, LestorantError
from .models import AppConfig, TorrentTask
from .orchestrator import update_source_list
from .output.formatting import format_source, format_subscription, format_task_line, format_version
from .pipeline.aria2_pipeline import run_aria2_update
from .rpc import ChangePosHow, RpcClient, UriOption, build_rpc_client
from .utils.config_loader import load_config
from .utils.logging import configure_logging, get_logger
from .utils.rpc_env import RpcEnv

logger = get_logger("lestorant.cli")

DEFAULT_CONFIG_PATH = "./config.json"
LIST_PAGE_SIZE = 1000
SEPARATOR = "-" * 20

TASK_STATES = ("active", "waiting", "stopped")


# ---------------- Argument parsing -----------------
def _parse_key_values(pairs: Optional[Sequence[str]]) -> Dict[str, str]:
    options: Dict[str, str] = {}
    for pair in pairs or ():
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{pair}'")
        options[key.strip()] = value
    return options


def _positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got '{raw}'") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a value greater than 0, got {raw}")
    return value


def _add_rss_commands(subparsers: argparse._SubParsersAction) -> None:
    rss = subparsers.add_parser("rss", help="RSS subscription update and management")
    rss_sub = rss.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-c", "--config", default=DEFAULT_CONFIG_PATH, help="Path to config file (YAML or JSON)")

    p = rss_sub.add_parser("list-source", parents=[common], help="List all sources in config file")
    p.set_defaults(handler=cmd_list_source)

    p = rss_sub.add_parser("list-subs", parents=[common], help="List all subscriptions in config file")
    p.set_defaults(handler=cmd_list_subs)

    p = rss_sub.add_parser("update", parents=[common], help="Update specified or all subscriptions")
    p.add_argument("name", nargs="*", help="Subscription names to update (default: all)")
    p.set_defaults(handler=cmd_update)

    p = rss_sub.add_parser(
        "aria2-update",
        parents=[common],
        help="Update RSS subscriptions and add newly found torrents as aria2 tasks",
    )
    p.add_argument("name", nargs="*", help="Subscription names to update (default: all)")
    p.set_defaults(handler=cmd_aria2_update)


def _add_rpc_commands(subparsers: argparse._SubParsersAction) -> None:
    rpc = subparsers.add_parser("aria2rpc", help="aria2 RPC client")
    rpc.add_argument("--rpc-url", help="RPC endpoint (default: $LESTORANT_RPC_URL)")
    rpc.add_argument("--secret", help="RPC secret (default: $LESTORANT_RPC_SECRET)")
    rpc.add_argument("--proxy", help="Proxy used for RPC requests")
    rpc.add_argument("--method", help="HTTP method used for RPC requests (default: POST)")
    rpc.add_argument("--timeout", type=_positive_float, help="Request timeout in seconds")
    rpc_sub = rpc.add_subparsers(dest="command", required=True)

    def add(name: str, help_text: str, handler: Callable[[RpcClient, argparse.Namespace], int]) -> argparse.ArgumentParser:
        p = rpc_sub.add_parser(name, help=help_text)
        p.set_defaults(handler=_rpc_handler(handler))
        return p

    p = add("add-task", "Add URIs, magnet links or local .torrent/.metalink files", rpc_add_task)
    p.add_argument("items", nargs="+")
    p.add_argument("--dir", help="Download directory")
    p.add_argument("-o", "--option", action="append", metavar="KEY=VALUE", help="aria2 download option")

    p = add("remove", "Remove a task", rpc_remove)
    p.add_argument("gid")
    p.add_argument("--force", action="store_true")

    p = add("pause", "Pause a task, or all tasks", rpc_pause)
    p.add_argument("gid", nargs="?")
    p.add_argument("--all", action="store_true")
    p.add_argument("--force", action="store_true")

    p = add("unpause", "Resume a task, or all tasks", rpc_unpause)
    p.add_argument("gid", nargs="?")
    p.add_argument("--all", action="store_true")

    p = add("list", "List tasks of a certain state", rpc_list)
    p.add_argument("task_type", nargs="?", default="active", choices=TASK_STATES)
    p.add_argument("--offset", type=int, default=0)
    p.add_argument("--num", type=int, default=LIST_PAGE_SIZE)

    for name, help_text, handler in (
        ("status", "Show the status of a task", rpc_status),
        ("uris", "Show the URIs of a task", rpc_uris),
        ("files", "Show the files of a task", rpc_files),
        ("peers", "Show the peers of a task", rpc_peers),
        ("servers", "Show the servers of a task", rpc_servers),
        ("get-option", "Show the options of a task", rpc_get_option),
        ("remove-result", "Remove a completed/error/removed task from memory", rpc_remove_result),
    ):
        add(name, help_text, handler).add_argument("gid")

    p = add("move", "Change the position of a task in the queue", rpc_move)
    p.add_argument("gid")
    p.add_argument("pos", type=int)
    p.add_argument("--how", default=ChangePosHow.POS_SET.value, choices=[h.value for h in ChangePosHow])

    p = add("set-option", "Change options of a task", rpc_set_option)
    p.add_argument("gid")
    p.add_argument("options", nargs="+", metavar="KEY=VALUE")

    p = add("set-global-option", "Change global options", rpc_set_global_option)
    p.add_argument("options", nargs="+", metavar="KEY=VALUE")

    p = add("shutdown", "Shut aria2 down", rpc_shutdown)
    p.add_argument("--force", action="store_true")

    for name, help_text, handler in (
        ("get-global-option", "Show global options", rpc_get_global_option),
        ("stat", "Show global statistics", rpc_stat),
        ("purge", "Purge completed/error/removed downloads from memory", rpc_purge),
        ("version", "Show aria2 version and enabled features", rpc_version),
        ("session", "Show session information", rpc_session),
        ("save-session", "Save the current session to file", rpc_save_session),
        ("list-methods", "List available RPC methods", rpc_list_methods),
        ("list-notifications", "List available RPC notifications", rpc_list_notifications),
    ):
        add(name, help_text, handler)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="lestorant", description="A tool for managing torrent RSS subscriptions")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: $LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="group", required=True)
    _add_rss_commands(subparsers)
    _add_rpc_commands(subparsers)
    return parser.parse_args(argv)


# ---------------- rss commands -----------------
def _load(args: argparse.Namespace) -> AppConfig:
    logger.debug("Loading configuration from %s", args.config)
    return load_config(args.config)


def cmd_list_source(args: argparse.Namespace) -> int:
    config = _load(args)
    if not config.sources:
        logger.warning("No source found in config file")
        return 0
    print("\n\n".join(format_source(src) for src in config.sources))
    return 0


def cmd_list_subs(args: argparse.Namespace) -> int:
    config = _load(args)
    if not config.subscriptions:
        logger.warning("No subscription found in config file")
        return 0
    print("\n\n".join(format_subscription(sub, config.output_dir) for sub in config.subscriptions))
    return 0


def _log_task_result(task: Optional[TorrentTask], error: Optional[LestorantError]) -> None:
    if task is None:
        logger.warning("%s", error)
    elif error is not None:
        logger.warning("Torrent download failed: %s - %s", task.output_path, error)
    elif task.is_magnet_uri:
        logger.info("Magnet link found: %s", task.title)
    else:
        logger.info("Torrent downloaded: %s", task.output_path)


def cmd_update(args: argparse.Namespace) -> int:
    config = _load(args)
    subscriptions = config.select_subscriptions(args.name)
    update_source_list(config.sources, config, subscriptions, _log_task_result)
    logger.info("%s RSS update completed %s", SEPARATOR, SEPARATOR)
    return 0


def cmd_aria2_update(args: argparse.Namespace) -> int:
    config = _load(args)
    client = build_rpc_client(config)
    subscriptions = config.select_subscriptions(args.name)
    outcome = run_aria2_update(config, subscriptions, client)
    logger.info(
        "%s RSS update completed: %d added, %d rejected %s",
        SEPARATOR,
        len(outcome.submitted),
        len(outcome.rejected),
        SEPARATOR,
    )
    return 1 if outcome.rejected else 0


# ---------------- aria2rpc commands -----------------
def _client_from_args(args: argparse.Namespace) -> RpcClient:
    env = RpcEnv()
    if args.rpc_url:
        env.rpc_url = args.rpc_url
    if args.secret:
        env.secret = args.secret
    if args.proxy:
        env.http_proxy = env.https_proxy = args.proxy
    if args.method:
        env.method = args.method
    if args.timeout:
        env.timeout = args.timeout
    if not env.rpc_url:
        raise ConfigError("no RPC URL given (use --rpc-url or LESTORANT_RPC_URL)")
    return RpcClient.from_env(env)


def _rpc_handler(fn: Callable[[RpcClient, argparse.Namespace], int]) -> Callable[[argparse.Namespace], int]:
    def handler(args: argparse.Namespace) -> int:
        return fn(_client_from_args(args), args)

    return handler


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False))


def rpc_add_task(client: RpcClient, args: argparse.Namespace) -> int:
    options: Dict[str, Any] = _parse_key_values(args.option)
    if args.dir:
        options[UriOption.DIR.value] = args.dir

    failures = 0
    for item in args.items:
        outcome: List[Any] = []
        client.add_task(item, options, None, lambda result, err: outcome.append((result, err)))
        if not outcome:
            logger.warning("Unrecognized item skipped: %s", item)
            failures += 1
            continue
        gid, err = outcome[0]
        if err is not None:
            logger.warning("Failed to add item %s: %s", item, err)
            failures += 1
        else:
            print(gid)
    return 1 if failures else 0


def rpc_remove(client: RpcClient, args: argparse.Namespace) -> int:
    print(client.force_remove(args.gid) if args.force else client.remove(args.gid))
    return 0


def _require_gid_or_all(args: argparse.Namespace) -> None:
    if not args.all and not args.gid:
        raise ConfigError("either a GID or --all is required")


def rpc_pause(client: RpcClient, args: argparse.Namespace) -> int:
    _require_gid_or_all(args)
    if args.all:
        print(client.force_pause_all() if args.force else client.pause_all())
    else:
        print(client.force_pause(args.gid) if args.force else client.pause(args.gid))
    return 0


def rpc_unpause(client: RpcClient, args: argparse.Namespace) -> int:
    _require_gid_or_all(args)
    print(client.unpause_all() if args.all else client.unpause(args.gid))
    return 0


def rpc_list(client: RpcClient, args: argparse.Namespace) -> int:
    if args.task_type == "active":
        tasks = client.tell_active()
    elif args.task_type == "waiting":
        tasks = client.tell_waiting(args.offset, args.num)
    else:
        tasks = client.tell_stopped(args.offset, args.num)

    if not isinstance(tasks, list):
        logger.error("Failed to find task list in response data")
        return 1
    for task in tasks:
        print(format_task_line(task))
    return 0


def rpc_status(client: RpcClient, args: argparse.Namespace) -> int:
    _print_json(client.tell_status(args.gid))
    return 0


def rpc_uris(client: RpcClient, args: argparse.Namespace) -> int:
    _print_json(client.get_uris(args.gid))
    return 0


def rpc_files(client: RpcClient, args: argparse.Namespace) -> int:
    _print_json(client.get_files(args.gid))
    return 0


def rpc_peers(client: RpcClient, args: argparse.Namespace) -> int:
    _print_json(client.get_peers(args.gid))
    return 0


def rpc_servers(client: RpcClient, args: argparse.Namespace) -> int:
    _print_json(client.get_servers(args.gid))
    return 0


def rpc_get_option(client: RpcClient, args: argparse.Namespace) -> int:
    _print_json(client.get_option(args.gid))
    return 0


def rpc_remove_result(client: RpcClient, args: argparse.Namespace) -> int:
    print(client.remove_download_result(args.gid))
    return 0


def rpc_move(client: RpcClient, args: argparse.Namespace) -> int:
    print(client.change_position(args.gid, args.pos, args.how))
    return 0


def rpc_set_option(client: RpcClient, args: argparse.Namespace) -> int:
    print(client.change_option(args.gid, _parse_key_values(args.options)))
    return 0


def rpc_get_global_option(client: RpcClient, args: argparse.Namespace) -> int:
    _print_json(client.get_global_option())
    return 0


def rpc_set_global_option(client: RpcClient, args: argparse.Namespace) -> int:
    print(client.change_global_option(_parse_key_values(args.options)))
    return 0


def rpc_stat(client: RpcClient, args: argparse.Namespace) -> int:
    _print_json(client.get_global_stat())
    return 0


def rpc_purge(client: RpcClient, args: argparse.Namespace) -> int:
    print(client.purge_download_result())
    return 0


def rpc_version(client: RpcClient, args: argparse.Namespace) -> int:
    print(format_version(client.get_version() or {}))
    return 0


def rpc_session(client: RpcClient, args: argparse.Namespace) -> int:
    _print_json(client.get_session_info())
    return 0


def rpc_shutdown(client: RpcClient, args: argparse.Namespace) -> int:
    print(client.force_shutdown() if args.force else client.shutdown())
    return 0


def rpc_save_session(client: RpcClient, args: argparse.Namespace) -> int:
    print(client.save_session())
    return 0


def rpc_list_methods(client: RpcClient, args: argparse.Namespace) -> int:
    print("\n".join(client.list_methods() or []))
    return 0


def rpc_list_notifications(client: RpcClient, args: argparse.Namespace) -> int:
    print("\n".join(client.list_notifications() or []))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)

    try:
        return args.handler(args)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 1
    except (LestorantError, ValueError, argparse.ArgumentTypeError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
