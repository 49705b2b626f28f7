"""Sync commands for the postsync CLI: refresh, drain, status, watch."""

import asyncio
import json
import logging
from typing import TYPE_CHECKING

from .records import _prompt_confirm, print_records

if TYPE_CHECKING:
    from postsync import SyncCore

logger = logging.getLogger(__name__)


async def cmd_refresh(args, core: "SyncCore"):
    """Manual refresh: errors are reported, not swallowed."""
    records = await core.refresh(manual=True)
    print(f"✓ {len(records)} records after refresh")


async def cmd_drain(args, core: "SyncCore"):
    result = await core.drain()
    if args.json:
        print(
            json.dumps(
                {
                    "processed": result.processed,
                    "applied": result.applied,
                    "skipped": result.skipped,
                    "acknowledged": result.acknowledged,
                    "requeued": result.requeued,
                    "dead_lettered": result.dead_lettered,
                    "errors": result.errors,
                    "success": result.success,
                },
                indent=2,
            )
        )
        return
    if result.processed == 0:
        print("✓ No pending changes")
    elif result.success:
        print(f"✓ Synced {result.acknowledged} changes ({result.skipped} had no matching record)")
    else:
        print(f"✗ Sync incomplete: {result.requeued} still pending")
        for error in result.errors[:5]:
            print(f"  - {error}")


async def cmd_status(args, core: "SyncCore"):
    if not args.no_probe:
        await core.monitor.check(force=True)
    status = core.status()
    if args.json:
        print(json.dumps(status, indent=2))
        return
    print(f"Cache:        {core.cache.db_path}")
    print(f"Connection:   {'offline' if status['offline'] else 'online'}")
    print(f"Records:      {status['records']}")
    print(f"Pending:      {status['pending']}")
    print(f"Dead letters: {status['dead_letters']}")
    print(f"Last refresh: {status['last_refresh_at'] or 'never'}")
    print(f"Last drain:   {status['last_drain_at'] or 'never'}")


async def cmd_clear_cache(args, core: "SyncCore"):
    confirm = None if args.yes else _prompt_confirm
    if not await core.clear_cache(confirm=confirm):
        print("Cancelled")
        return
    print("✓ Cache cleared")


async def cmd_dead_letters(args, core: "SyncCore"):
    if args.requeue:
        moved = await core.requeue_dead_letters()
        print(f"✓ Requeued {moved} changes")
        return
    dead = core.cache.queue.load_dead_letters()
    if not dead:
        print("✓ No dead-lettered changes")
        return
    for intent in dead:
        print(
            f"{intent.kind.value:<7} {intent.record_id:<24} attempts={intent.attempts} "
            f"error={intent.last_error or '-'}"
        )


async def cmd_watch(args, core: "SyncCore"):
    """Probe connectivity forever; each reconnect drains the queue and refreshes."""

    async def refresh_after_reconnect():
        records = await core.refresh(manual=False)
        print_records(records[:10])

    core.monitor.on_reconnect(refresh_after_reconnect)
    core.add_offline_listener(
        lambda offline: print("⚠ Offline: changes will sync when the connection returns")
        if offline
        else print("✓ Back online")
    )
    stop = asyncio.Event()
    try:
        await core.monitor.watch(args.interval, stop)
    finally:
        stop.set()
        await core.monitor.wait_idle()
