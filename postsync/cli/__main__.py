"""
postsync CLI - Command-line interface for the offline record cache.

Usage:
    postsync list [--json] [--refresh] [--limit N]
    postsync refresh
    postsync show ID [--json]
    postsync create --title T --summary S --body B
    postsync edit ID [--title T] [--summary S] [--body B]
    postsync delete ID [--yes]
    postsync drain [--json]
    postsync status [--json] [--no-probe]
    postsync clear-cache [--yes]
    postsync dead-letters [--requeue]
    postsync watch [--interval SECONDS]
"""

import argparse
import asyncio
import logging
import sys

from postsync.cli.commands import (
    cmd_clear_cache,
    cmd_create,
    cmd_dead_letters,
    cmd_delete,
    cmd_drain,
    cmd_edit,
    cmd_list,
    cmd_refresh,
    cmd_show,
    cmd_status,
    cmd_watch,
)
from postsync.config import Settings
from postsync.core import SyncCore
from postsync.protocols import PostSyncError
from postsync.sync import ConnectivityMonitor

logger = logging.getLogger(__name__)

COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "create": cmd_create,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "refresh": cmd_refresh,
    "drain": cmd_drain,
    "status": cmd_status,
    "clear-cache": cmd_clear_cache,
    "dead-letters": cmd_dead_letters,
    "watch": cmd_watch,
}


def print_alert(title: str, message: str) -> None:
    print(f"[{title}] {message}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="postsync",
        description="Offline-first record cache with queued local edits",
    )
    parser.add_argument("--db", help="Cache database path (default: ~/.postsync/cache.db)")
    parser.add_argument("--api-url", dest="api_url", help="Remote API base URL")
    parser.add_argument("--offline", action="store_true",
                        help="Start in offline mode (no remote requests)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # list
    p_list = subparsers.add_parser("list", help="List cached records, newest first")
    p_list.add_argument("--json", "-j", action="store_true")
    p_list.add_argument("--refresh", "-r", action="store_true",
                        help="Reconcile with the remote source before listing")
    p_list.add_argument("--limit", "-l", type=int, default=0)

    # show
    p_show = subparsers.add_parser("show", help="Show one record with its body")
    p_show.add_argument("id", help="Record ID")
    p_show.add_argument("--json", "-j", action="store_true")

    # create
    p_create = subparsers.add_parser("create", help="Create a local record")
    p_create.add_argument("--title", "-t", required=True)
    p_create.add_argument("--summary", "-s", required=True)
    p_create.add_argument("--body", "-b", required=True)

    # edit
    p_edit = subparsers.add_parser("edit", help="Edit a cached record")
    p_edit.add_argument("id", help="Record ID")
    p_edit.add_argument("--title", "-t")
    p_edit.add_argument("--summary", "-s")
    p_edit.add_argument("--body", "-b")

    # delete
    p_delete = subparsers.add_parser("delete", help="Delete a cached record")
    p_delete.add_argument("id", help="Record ID")
    p_delete.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    # refresh
    subparsers.add_parser("refresh", help="Fetch the remote list and reconcile")

    # drain
    p_drain = subparsers.add_parser("drain", help="Replay pending changes now")
    p_drain.add_argument("--json", "-j", action="store_true")

    # status
    p_status = subparsers.add_parser("status", help="Show cache and queue status")
    p_status.add_argument("--json", "-j", action="store_true")
    p_status.add_argument("--no-probe", dest="no_probe", action="store_true",
                          help="Do not check connectivity")

    # clear-cache
    p_clear = subparsers.add_parser("clear-cache", help="Delete cached records and the queue")
    p_clear.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    # dead-letters
    p_dead = subparsers.add_parser("dead-letters", help="Show or requeue failed changes")
    p_dead.add_argument("--requeue", action="store_true", help="Move them back to the queue")

    # watch
    p_watch = subparsers.add_parser("watch", help="Drain and refresh on every reconnect")
    p_watch.add_argument("--interval", "-i", type=float, default=None,
                         help="Seconds between connectivity probes")

    return parser


def build_settings(args) -> Settings:
    overrides = {}
    if args.db:
        overrides["db_path"] = args.db
    if args.api_url:
        overrides["api_base_url"] = args.api_url
    return Settings(**overrides)


def build_core(args, settings: Settings) -> SyncCore:
    monitor = ConnectivityMonitor(
        online=not args.offline,
        probe_url=None if args.offline else settings.resolved_probe_url(),
        cache_ttl=settings.connectivity_cache_ttl,
    )
    return SyncCore(settings=settings, monitor=monitor, alert=print_alert)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = build_settings(args)
    level = getattr(logging, settings.log_level.upper(), logging.WARNING)
    if args.verbose:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        core = build_core(args, settings)
    except PostSyncError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "watch" and args.interval is None:
        args.interval = core.settings.probe_interval

    handler = COMMANDS[args.command]
    try:
        asyncio.run(handler(args, core))
    except PostSyncError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nStopped")
    finally:
        core.close()


if __name__ == "__main__":
    main()
