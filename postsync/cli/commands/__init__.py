"""CLI command handlers. Each takes (args, core) and is awaited by main()."""

from .records import cmd_create, cmd_delete, cmd_edit, cmd_list, cmd_show
from .sync import (
    cmd_clear_cache,
    cmd_dead_letters,
    cmd_drain,
    cmd_refresh,
    cmd_status,
    cmd_watch,
)

__all__ = [
    "cmd_list",
    "cmd_show",
    "cmd_create",
    "cmd_edit",
    "cmd_delete",
    "cmd_refresh",
    "cmd_drain",
    "cmd_status",
    "cmd_clear_cache",
    "cmd_dead_letters",
    "cmd_watch",
]
