"""Tests for the postsync command-line interface."""

import argparse
import json
from unittest.mock import patch

import pytest

from postsync.cli.__main__ import build_parser, main
from postsync.cli.commands import cmd_dead_letters, cmd_drain, cmd_list
from postsync.cli.commands.records import format_record_line
from postsync.types import MutationIntent, SyncStatus


def _run(db_path, *argv):
    main(["--db", str(db_path), "--offline", *argv])


def _args(**kwargs):
    """Build an argparse.Namespace with defaults shared by the commands."""
    defaults = {"json": False, "limit": 0, "refresh": False, "requeue": False}
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_create_requires_all_fields(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["create", "--title", "T"])

    def test_global_flags(self):
        args = build_parser().parse_args(["--offline", "--db", "x.db", "status", "--no-probe"])
        assert args.offline
        assert args.db == "x.db"
        assert args.no_probe


class TestMainOffline:
    def test_create_then_list(self, db_path, capsys):
        _run(db_path, "create", "-t", "Offline note", "-s", "Written on a plane", "-b", "Body")
        out = capsys.readouterr().out
        assert "✓ Created local_" in out

        _run(db_path, "list", "--json")
        records = json.loads(capsys.readouterr().out)
        assert len(records) == 1
        assert records[0]["title"] == "Offline note"
        assert records[0]["sync_status"] == "pending"
        assert records[0]["is_local"] is True

    def test_drain_after_create(self, db_path, capsys):
        _run(db_path, "create", "-t", "T", "-s", "S", "-b", "B")
        capsys.readouterr()

        _run(db_path, "drain", "--json")
        result = json.loads(capsys.readouterr().out)

        assert result["success"] is True
        assert result["applied"] == 1
        assert result["acknowledged"] == 1

        _run(db_path, "drain")
        assert "No pending changes" in capsys.readouterr().out

    def test_status_json(self, db_path, capsys):
        _run(db_path, "create", "-t", "T", "-s", "S", "-b", "B")
        capsys.readouterr()

        _run(db_path, "status", "--json", "--no-probe")
        status = json.loads(capsys.readouterr().out)

        assert status["offline"] is True
        assert status["records"] == 1
        assert status["pending"] == 1

    def test_manual_refresh_offline_fails(self, db_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(db_path, "refresh")
        assert exc_info.value.code == 1
        assert "✗" in capsys.readouterr().err

    def test_show_unknown_record_fails(self, db_path, capsys):
        with pytest.raises(SystemExit):
            _run(db_path, "show", "nope")
        assert "not found" in capsys.readouterr().err

    def test_edit_and_delete(self, db_path, capsys):
        _run(db_path, "create", "-t", "T", "-s", "S", "-b", "B")
        record_id = capsys.readouterr().out.split()[2]

        _run(db_path, "edit", record_id, "--title", "Renamed")
        assert "✓ Updated" in capsys.readouterr().out

        _run(db_path, "delete", record_id, "--yes")
        assert "✓ Deleted" in capsys.readouterr().out

        _run(db_path, "list")
        assert "No records cached" in capsys.readouterr().out

    def test_edit_without_fields(self, db_path, capsys):
        _run(db_path, "edit", "anything")
        assert "Nothing to change" in capsys.readouterr().out

    def test_delete_prompt_declined(self, db_path, capsys):
        _run(db_path, "create", "-t", "T", "-s", "S", "-b", "B")
        record_id = capsys.readouterr().out.split()[2]

        with patch("builtins.input", return_value="n"):
            _run(db_path, "delete", record_id)

        assert "Cancelled" in capsys.readouterr().out

    def test_clear_cache(self, db_path, capsys):
        _run(db_path, "create", "-t", "T", "-s", "S", "-b", "B")
        _run(db_path, "clear-cache", "--yes")
        assert "✓ Cache cleared" in capsys.readouterr().out


class TestCommands:
    @pytest.mark.asyncio
    async def test_drain_reports_acknowledged(self, core, capsys):
        await core.create_local({"title": "T", "summary": "S", "body": "B"})

        await cmd_drain(_args(), core)

        assert "✓ Synced 1 changes (0 had no matching record)" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_list_refresh_uses_remote(self, core, fetcher, record_factory, capsys):
        fetcher.records = [record_factory("1"), record_factory("2", date="2024-03-01T00:00:00Z")]

        await cmd_list(_args(refresh=True, limit=1), core)

        out = capsys.readouterr().out
        assert "Title 2" in out
        assert "Title 1" not in out

    @pytest.mark.asyncio
    async def test_drain_reports_failures(self, core, sink, capsys):
        record = await core.create_local({"title": "T", "summary": "S", "body": "B"})
        sink.reject_ids.add(record.id)

        await cmd_drain(_args(), core)

        out = capsys.readouterr().out
        assert "✗ Sync incomplete: 1 still pending" in out

    @pytest.mark.asyncio
    async def test_dead_letters_listing_and_requeue(self, core, capsys):
        dead = MutationIntent.delete("42")
        dead.attempts = 3
        dead.last_error = "HTTP 503"
        core.cache.commit(dead_letters=[dead])

        await cmd_dead_letters(_args(), core)
        assert "attempts=3" in capsys.readouterr().out

        await cmd_dead_letters(_args(requeue=True), core)
        assert "✓ Requeued 1 changes" in capsys.readouterr().out
        assert [i.record_id for i in core.cache.queue.load()] == ["42"]


class TestFormatting:
    def test_record_line_tags(self, record_factory):
        record = record_factory("local_1", is_local=True, sync_status=SyncStatus.PENDING)
        line = format_record_line(record)
        assert "[LOCAL]" in line
        assert "[pending]" in line
        assert "2024-01-01" in line
