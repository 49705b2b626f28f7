"""Queue processor: replays pending mutations once connectivity returns.

Every intent is offered to a MutationSink before it touches the record
store. Acknowledged intents are applied and dropped from the queue. The
first intent the sink rejects stops the replay: it and every later intent
stay queued in their original order, so a record never sees its mutations
applied out of order. An intent rejected max_attempts times is moved to
the dead-letter list. Records with an intent left behind stay PENDING.
"""

import logging
from typing import Dict, List

from postsync.protocols import MutationSink, NetworkError
from postsync.storage import LocalCache
from postsync.types import DrainResult, MutationIntent, MutationKind, Record, SyncStatus

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


class QueueProcessor:
    """Drains the PendingQueue against the RecordStore.

    Args:
        cache: Local cache holding the record store and the queue.
        sink: Collaborator that acknowledges each replayed intent.
        max_attempts: Rejections after which an intent is dead-lettered.
    """

    def __init__(self, cache: LocalCache, sink: MutationSink, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        self._cache = cache
        self._sink = sink
        self.max_attempts = max(1, max_attempts)

    async def drain(self) -> DrainResult:
        """Replay the queue FIFO and persist the outcome in one commit.

        The caller must hold the core's lock for the whole drain.
        """
        result = DrainResult()
        queue = self._cache.queue.load()
        if not queue:
            logger.debug("Sync queue empty, nothing to drain")
            return result

        records = self._cache.records.load()
        index: Dict[str, int] = {r.id: i for i, r in enumerate(records)}
        records_changed = False
        remaining: List[MutationIntent] = []
        dead_letters: List[MutationIntent] = []

        logger.info(f"Draining {len(queue)} queued changes")
        for position, intent in enumerate(queue):
            try:
                await self._sink.submit(intent)
            except NetworkError as e:
                error_msg = str(e)[:500]
                intent.attempts += 1
                intent.last_error = error_msg
                if intent.attempts >= self.max_attempts:
                    logger.warning(
                        f"{intent.kind.value} {intent.record_id} exceeded max attempts "
                        f"({intent.attempts}/{self.max_attempts}), moving to dead letters"
                    )
                    dead_letters.append(intent)
                    result.dead_lettered += 1
                else:
                    remaining.append(intent)
                remaining.extend(queue[position + 1 :])
                result.requeued = len(remaining)
                result.processed = position + 1
                result.errors.append(
                    f"Failed to submit {intent.kind.value} {intent.record_id} "
                    f"(attempt {intent.attempts}/{self.max_attempts}): {error_msg}"
                )
                break

            result.processed = position + 1
            if intent.kind is MutationKind.DELETE:
                if intent.record_id in index:
                    records = [r for r in records if r.id != intent.record_id]
                    index = {r.id: i for i, r in enumerate(records)}
                    records_changed = True
                result.applied += 1
                continue

            pos = index.get(intent.record_id)
            if pos is None:
                logger.info(
                    f"No record {intent.record_id} for {intent.kind.value}, intent dropped"
                )
                result.skipped += 1
                continue
            records[pos] = self._mark_synced(records[pos])
            records_changed = True
            result.applied += 1

        # A record with an intent still queued or dead-lettered keeps PENDING,
        # even if an earlier intent for it was acknowledged in this drain.
        unreplayed = {i.record_id for i in remaining} | {i.record_id for i in dead_letters}
        for pos, record in enumerate(records):
            if record.id in unreplayed and record.sync_status is not SyncStatus.PENDING:
                records[pos] = record.with_changes(sync_status=SyncStatus.PENDING)
                records_changed = True

        commit_kwargs = {"intents": remaining}
        if records_changed:
            commit_kwargs["records"] = records
        if dead_letters:
            commit_kwargs["dead_letters"] = self._cache.queue.load_dead_letters() + dead_letters
        self._cache.commit(**commit_kwargs)

        logger.info(
            f"Drain complete: applied={result.applied}, skipped={result.skipped}, "
            f"requeued={result.requeued}, dead_lettered={result.dead_lettered}"
        )
        return result

    @staticmethod
    def _mark_synced(record: Record) -> Record:
        return record.with_changes(sync_status=SyncStatus.SYNCED)
