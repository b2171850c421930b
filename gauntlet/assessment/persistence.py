"""Single-writer synchronization of a live gauntlet to its candidate record.

Each candidate session owns one `PersistenceGateway`. Mutations are enqueued
in the order they happen and a single worker task drains them, so writes land
in mutation order. Pending snapshots coalesce (only the newest whole snapshot
is worth writing) while log entries accumulate and are appended by id, which
makes every write safe to replay.
"""

from __future__ import annotations

import asyncio
import enum
import typing as t

from gauntlet.core import di, get_logger
from gauntlet.lib import NotSet
from gauntlet.model import CandidateID, GauntletState, LogEntry
from gauntlet.storage import candidate as candidate_storage
from gauntlet.storage import Session

logger = get_logger()


class WriteOutcome(enum.Enum):
    Written = "written"
    Missing = "missing"
    Failed = "failed"


class RecordBatch(object):
    """Changes waiting to be written to one candidate record."""

    def __init__(
        self,
        *,
        state: GauntletState | None | NotSet = NotSet(),
        log: t.Iterable[LogEntry] = (),
        archived: bool | NotSet = NotSet(),
        communication_sent: bool | NotSet = NotSet(),
    ) -> None:
        self.state = state
        self.log: list[LogEntry] = list(log)
        self.archived = archived
        self.communication_sent = communication_sent

    @property
    def empty(self) -> bool:
        return (
            isinstance(self.state, NotSet)
            and not self.log
            and isinstance(self.archived, NotSet)
            and isinstance(self.communication_sent, NotSet)
        )

    def merge(self, newer: RecordBatch) -> None:
        """Fold a later batch into this one; the later batch wins field by field."""
        if not isinstance(newer.state, NotSet):
            self.state = newer.state.model_copy(deep=True) if newer.state is not None else None
        seen = {e.entry_id for e in self.log}
        self.log.extend(e for e in newer.log if e.entry_id not in seen)
        if not isinstance(newer.archived, NotSet):
            self.archived = newer.archived
        if not isinstance(newer.communication_sent, NotSet):
            self.communication_sent = newer.communication_sent


class RecordWriter(t.Protocol):
    def write(self, candidate_id: CandidateID, batch: RecordBatch) -> WriteOutcome: ...


@di.inject
def write_record(
    candidate_id: CandidateID,
    batch: RecordBatch,
    session: Session = di.Manage["storage.persistent.session"],
) -> WriteOutcome:
    """Apply one batch in one transaction.

    A record that no longer exists yields `WriteOutcome.Missing` and nothing is
    written.
    """
    with session.begin():
        if not isinstance(batch.state, NotSet):
            if not candidate_storage.write_gauntlet_state(candidate_id, batch.state, session=session):
                return WriteOutcome.Missing
        if batch.log:
            if not candidate_storage.append_log(candidate_id, batch.log, session=session):
                return WriteOutcome.Missing

        flags: dict[str, t.Any] = {}
        if not isinstance(batch.archived, NotSet):
            flags["archived"] = batch.archived
        if not isinstance(batch.communication_sent, NotSet):
            flags["communication_sent"] = batch.communication_sent
        if flags:
            try:
                candidate_storage.update(candidate_id, **flags, session=session)
            except KeyError:
                return WriteOutcome.Missing
    return WriteOutcome.Written


class StorageRecordWriter(object):
    def write(self, candidate_id: CandidateID, batch: RecordBatch) -> WriteOutcome:
        return write_record(candidate_id, batch)


class PersistenceGateway(object):
    def __init__(self, candidate_id: CandidateID, writer: RecordWriter, *, debounce: float = 0.0) -> None:
        self.candidate_id = candidate_id
        self.writer = writer
        self.debounce = debounce
        self.last_error: Exception | None = None
        self.last_outcome: WriteOutcome | None = None
        self.ghost = False
        self._pending = RecordBatch()
        self._worker: asyncio.Task[None] | None = None

    @property
    def has_backlog(self) -> bool:
        return not self._pending.empty

    def enqueue(
        self,
        *,
        state: GauntletState | None | NotSet = NotSet(),
        log: t.Iterable[LogEntry] = (),
        archived: bool | NotSet = NotSet(),
        communication_sent: bool | NotSet = NotSet(),
    ) -> None:
        """Queue a mutation for writing. Must be called from a running event loop."""
        if self.ghost:
            logger.debug("dropping write for deleted candidate", extra={"candidate_id": str(self.candidate_id)})
            return

        self._pending.merge(
            RecordBatch(state=state, log=log, archived=archived, communication_sent=communication_sent)
        )
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._drain())

    async def flush(self) -> WriteOutcome | None:
        """Wait until everything queued so far has been attempted."""
        while self._worker is not None and not self._worker.done():
            await asyncio.shield(self._worker)
        return self.last_outcome

    async def close(self) -> None:
        await self.flush()
        if self.has_backlog:
            logger.warning(
                "closing gateway with unwritten changes",
                extra={"candidate_id": str(self.candidate_id), "error": repr(self.last_error)},
            )

    async def _drain(self) -> None:
        while not self._pending.empty:
            if self.debounce > 0:
                await asyncio.sleep(self.debounce)

            batch, self._pending = self._pending, RecordBatch()
            try:
                outcome = self.writer.write(self.candidate_id, batch)
            except Exception as e:
                # keep the backlog; whatever is enqueued next carries it forward
                batch.merge(self._pending)
                self._pending = batch
                self.last_error = e
                self.last_outcome = WriteOutcome.Failed
                logger.error(
                    "failed to persist gauntlet state",
                    exc_info=True,
                    extra={"candidate_id": str(self.candidate_id)},
                )
                return

            self.last_outcome = outcome
            match outcome:
                case WriteOutcome.Written:
                    self.last_error = None
                    logger.debug(
                        "persisted gauntlet state",
                        extra={"candidate_id": str(self.candidate_id), "log_entries": len(batch.log)},
                    )
                case WriteOutcome.Missing:
                    self.ghost = True
                    self._pending = RecordBatch()
                    logger.info(
                        "candidate record is gone, discarding writes",
                        extra={"candidate_id": str(self.candidate_id)},
                    )
                    return
                case WriteOutcome.Failed:
                    batch.merge(self._pending)
                    self._pending = batch
                    return
