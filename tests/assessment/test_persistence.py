"""Tests for gauntlet.assessment.persistence module."""

from __future__ import annotations

import asyncio
import datetime

from gauntlet.assessment import events
from gauntlet.assessment.persistence import PersistenceGateway, RecordBatch, WriteOutcome
from gauntlet.lib import NotSet
from gauntlet.model import CandidateID, GauntletState, LogEntry, Phase

from .conftest import MemoryWriter, START


def _entry(details: str, at: datetime.datetime = START) -> LogEntry:
    return events.entry(events.PhaseChanged, details, timestamp=at)


class TestRecordBatch(object):
    def test_newer_fields_win(self) -> None:
        batch = RecordBatch(state=GauntletState(), archived=False)
        batch.merge(RecordBatch(state=GauntletState(phase=Phase.Technical), archived=True))

        assert isinstance(batch.state, GauntletState)
        assert batch.state.phase is Phase.Technical
        assert batch.archived is True
        assert isinstance(batch.communication_sent, NotSet)

    def test_unset_fields_do_not_clobber(self) -> None:
        batch = RecordBatch(state=GauntletState(phase=Phase.Technical), communication_sent=True)
        batch.merge(RecordBatch(log=[_entry("a")]))

        assert isinstance(batch.state, GauntletState)
        assert batch.state.phase is Phase.Technical
        assert batch.communication_sent is True

    def test_log_entries_merge_by_id(self) -> None:
        first, second = _entry("a"), _entry("b")
        batch = RecordBatch(log=[first])
        batch.merge(RecordBatch(log=[first, second]))

        assert [e.entry_id for e in batch.log] == [first.entry_id, second.entry_id]

    def test_empty(self) -> None:
        assert RecordBatch().empty
        assert not RecordBatch(state=None).empty
        assert not RecordBatch(log=[_entry("a")]).empty


class TestPersistenceGateway(object):
    def test_pending_changes_coalesce(self, writer: MemoryWriter) -> None:
        """Mutations queued before the worker runs go out as one write."""
        first, second = _entry("a"), _entry("b")

        async def run() -> WriteOutcome | None:
            gateway = PersistenceGateway(CandidateID(), writer)
            gateway.enqueue(state=GauntletState(), log=[first])
            gateway.enqueue(state=GauntletState(phase=Phase.Technical), log=[second])
            return await gateway.flush()

        assert asyncio.run(run()) is WriteOutcome.Written
        assert len(writer.batches) == 1
        assert writer.state is not None and writer.state.phase is Phase.Technical
        assert [e.details for e in writer.log] == ["a", "b"]

    def test_snapshot_is_taken_at_enqueue(self, writer: MemoryWriter) -> None:
        """Later mutation of the live state does not leak into an already queued write."""

        async def run() -> None:
            gateway = PersistenceGateway(CandidateID(), writer)
            state = GauntletState()
            gateway.enqueue(state=state)
            state.phase = Phase.Technical
            await gateway.flush()

        asyncio.run(run())

        assert writer.state is not None and writer.state.phase is Phase.Locked

    def test_debounced_writes(self, writer: MemoryWriter) -> None:
        async def run() -> None:
            gateway = PersistenceGateway(CandidateID(), writer, debounce=0.01)
            gateway.enqueue(log=[_entry("a")])
            await asyncio.sleep(0)
            gateway.enqueue(log=[_entry("b")])
            await gateway.flush()

        asyncio.run(run())

        assert len(writer.batches) == 1
        assert [e.details for e in writer.log] == ["a", "b"]

    def test_failed_write_is_retried_with_the_next_change(self, writer: MemoryWriter) -> None:
        writer.error = RuntimeError("database unavailable")

        async def run() -> PersistenceGateway:
            gateway = PersistenceGateway(CandidateID(), writer)
            gateway.enqueue(state=GauntletState(phase=Phase.Technical), log=[_entry("a")])
            assert await gateway.flush() is WriteOutcome.Failed
            assert gateway.has_backlog
            assert isinstance(gateway.last_error, RuntimeError)

            writer.error = None
            gateway.enqueue(log=[_entry("b")])
            assert await gateway.flush() is WriteOutcome.Written
            return gateway

        gateway = asyncio.run(run())

        assert not gateway.has_backlog
        assert gateway.last_error is None
        assert [e.details for e in writer.log] == ["a", "b"]
        assert writer.state is not None and writer.state.phase is Phase.Technical

    def test_missing_record_turns_gateway_into_ghost(self, writer: MemoryWriter) -> None:
        """Once the record is gone, nothing more is written or kept."""
        writer.missing = True

        async def run() -> PersistenceGateway:
            gateway = PersistenceGateway(CandidateID(), writer)
            gateway.enqueue(log=[_entry("a")])
            assert await gateway.flush() is WriteOutcome.Missing

            writer.missing = False
            gateway.enqueue(log=[_entry("b")])
            await gateway.flush()
            return gateway

        gateway = asyncio.run(run())

        assert gateway.ghost
        assert not gateway.has_backlog
        assert writer.batches == []

    def test_flush_without_writes(self, writer: MemoryWriter) -> None:
        async def run() -> WriteOutcome | None:
            gateway = PersistenceGateway(CandidateID(), writer)
            await gateway.close()
            return await gateway.flush()

        assert asyncio.run(run()) is None
