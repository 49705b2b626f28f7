"""Record commands for the postsync CLI: list, show, create, edit, delete."""

import json
import logging
from typing import TYPE_CHECKING, List

from postsync.types import Record, SyncStatus

if TYPE_CHECKING:
    from postsync import SyncCore

logger = logging.getLogger(__name__)


def format_tags(record: Record) -> str:
    tags = []
    if record.is_local:
        tags.append("[LOCAL]")
    if record.sync_status is SyncStatus.PENDING:
        tags.append("[pending]")
    elif record.sync_status is SyncStatus.SYNCED:
        tags.append("[synced]")
    return " ".join(tags)


def format_record_line(record: Record) -> str:
    date = (record.date or "")[:10]
    tags = format_tags(record)
    line = f"{record.id:<24} {date:<10}  {record.title}"
    if record.author_name:
        line += f"  by {record.author_name}"
    if tags:
        line += f"  {tags}"
    return line


def print_records(records: List[Record], as_json: bool = False) -> None:
    if as_json:
        print(json.dumps([r.to_dict() for r in records], indent=2))
        return
    if not records:
        print("No records cached. Run `postsync refresh` while online.")
        return
    for record in records:
        print(format_record_line(record))


async def cmd_list(args, core: "SyncCore"):
    """Show the cached list, optionally refreshing in the background first."""
    if getattr(args, "refresh", False):
        records = await core.refresh(manual=False)
    else:
        records = core.get_merged()
    if args.limit:
        records = records[: args.limit]
    print_records(records, as_json=args.json)


async def cmd_show(args, core: "SyncCore"):
    """Show one record, downloading its body if needed."""
    record = await core.get_detail(args.id)
    if args.json:
        print(json.dumps(record.to_dict(), indent=2))
        return
    title = f"Local: {record.title}" if record.is_local else record.title
    print(title)
    print("=" * min(len(title), 80))
    print(f"Author: {record.author_name}   Date: {record.date or '-'}   {format_tags(record)}")
    print()
    print(record.body or "Content not available.")


async def cmd_create(args, core: "SyncCore"):
    record = await core.create_local(
        {"title": args.title, "summary": args.summary, "body": args.body}
    )
    print(f"✓ Created {record.id} (pending sync)")


async def cmd_edit(args, core: "SyncCore"):
    fields = {
        name: getattr(args, name)
        for name in ("title", "summary", "body")
        if getattr(args, name) is not None
    }
    if not fields:
        print("Nothing to change. Pass --title, --summary or --body.")
        return
    record = await core.update_existing(args.id, fields)
    print(f"✓ Updated {record.id} (pending sync)")


async def cmd_delete(args, core: "SyncCore"):
    confirm = None if args.yes else _prompt_confirm
    if await core.delete_record(args.id, confirm=confirm):
        print(f"✓ Deleted {args.id} (queued for sync)")
    else:
        print("Cancelled")


def _prompt_confirm(title: str, message: str) -> bool:
    try:
        answer = input(f"{title}: {message} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")
