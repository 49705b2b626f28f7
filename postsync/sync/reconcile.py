"""Reconciliation of a remote snapshot with the local record collection.

Per-id resolution:
- no local counterpart: the remote record is taken as-is
- local is pending, or strictly newer: local wins, unchanged
- otherwise remote wins, keeping the local body, is_local flag and a
  SYNCED status (any other status is cleared)

Local records absent from the snapshot are always retained. Reconciliation
never deletes.
"""

import logging
from typing import Dict, List, Optional

from postsync.storage import RecordStore
from postsync.types import MergeOutcome, Record, SyncStatus, sort_newest_first

logger = logging.getLogger(__name__)


def _local_wins(local: Record, remote: Record) -> bool:
    if local.sync_status is SyncStatus.PENDING:
        return True
    local_date = local.parsed_date
    remote_date = remote.parsed_date
    if local_date is None or remote_date is None:
        return False
    return local_date > remote_date


def _remote_wins(local: Record, remote: Record) -> Record:
    """Take remote content while keeping state the list endpoint lacks."""
    return Record(
        id=remote.id,
        title=remote.title,
        summary=remote.summary,
        body=local.body or remote.body,
        author_name=remote.author_name,
        date=remote.date,
        is_local=local.is_local,
        sync_status=(
            SyncStatus.SYNCED if local.sync_status is SyncStatus.SYNCED else SyncStatus.NONE
        ),
    )


def merge_snapshots(remote: List[Record], local: List[Record]) -> MergeOutcome:
    """Merge a remote snapshot into the local collection. Pure function.

    Args:
        remote: Records just fetched from the remote source.
        local: The current local collection.

    Returns:
        MergeOutcome whose records are sorted newest first.
    """
    outcome = MergeOutcome()
    pending: Dict[str, Record] = {}
    for record in local:
        pending[record.id] = record

    merged: List[Record] = []
    seen_remote = set()
    for remote_record in remote:
        if remote_record.id in seen_remote:
            logger.debug(f"Duplicate remote id {remote_record.id} in snapshot, ignoring")
            continue
        seen_remote.add(remote_record.id)

        local_record = pending.pop(remote_record.id, None)
        if local_record is None:
            merged.append(remote_record)
            outcome.added += 1
        elif _local_wins(local_record, remote_record):
            merged.append(local_record)
            outcome.local_wins += 1
        else:
            merged.append(_remote_wins(local_record, remote_record))
            outcome.remote_wins += 1

    merged.extend(pending.values())
    outcome.local_only = len(pending)
    outcome.records = sort_newest_first(merged)
    return outcome


class ReconciliationEngine:
    """Merges remote snapshots into the record store.

    Args:
        records: The record store to read from and write back to.
    """

    def __init__(self, records: RecordStore):
        self._records = records

    def reconcile(
        self, remote: List[Record], local: Optional[List[Record]] = None
    ) -> List[Record]:
        """Merge, persist with replace_all, and return the merged list.

        The caller must hold the core's lock so that the local read and the
        write-back are not interleaved with other writers.
        """
        if local is None:
            local = self._records.load()

        outcome = merge_snapshots(remote, local)
        self._records.replace_all(outcome.records)

        logger.info(
            f"Reconcile complete: added={outcome.added}, local_wins={outcome.local_wins}, "
            f"remote_wins={outcome.remote_wins}, local_only={outcome.local_only}"
        )
        return outcome.records
