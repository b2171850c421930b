"""Tests for gauntlet.storage.candidate module."""

from __future__ import annotations

import datetime
import typing as t

import pytest
from sqlalchemy.orm import Session

from gauntlet.assessment import events
from gauntlet.assessment.persistence import RecordBatch, write_record, WriteOutcome
from gauntlet.model import Candidate, CandidateID, GauntletState, LogAuthor, Phase
from gauntlet.storage import candidate as candidate_storage

AT = datetime.datetime(2026, 3, 2, 9, 0, tzinfo=datetime.UTC)


class TestCreateAndGet(object):
    def test_create(self, db_session: Session) -> None:
        with db_session.begin():
            obj = candidate_storage.create(
                name="Grace Hopper",
                role="Staff Engineer",
                skills=["COBOL", "Compilers"],
                ai_initial_score=92,
                session=db_session,
            )

        assert obj.name == "Grace Hopper"
        assert obj.skills == ["COBOL", "Compilers"]
        assert obj.gauntlet_state is None
        assert obj.gauntlet_start_date is None
        assert obj.log == []
        assert not obj.archived

    def test_get_missing(self, db_session: Session) -> None:
        with db_session.begin():
            assert candidate_storage.get(CandidateID(), session=db_session) is None

    def test_start_date_round_trips_as_utc(
        self, db_session: Session, candidate_factory: t.Callable[..., Candidate]
    ) -> None:
        obj = candidate_factory(started_at=AT)

        assert obj.gauntlet_start_date == AT
        assert obj.gauntlet_start_date is not None and obj.gauntlet_start_date.tzinfo is not None


class TestFind(object):
    def test_filters(self, db_session: Session, candidate_factory: t.Callable[..., Candidate]) -> None:
        strong = candidate_factory(name="Strong", ai_initial_score=90)
        candidate_factory(name="Weak", ai_initial_score=40)
        candidate_factory(name="Unscored", ai_initial_score=None)
        candidate_factory(name="Archived", ai_initial_score=95, archived=True)

        with db_session.begin():
            monitored = candidate_storage.find(archived=False, min_score=70, session=db_session)
            everyone = candidate_storage.find(session=db_session)

        assert [c.candidate_id for c in monitored] == [strong.candidate_id]
        assert len(everyone) == 4


class TestUpdate(object):
    def test_update_fields(self, db_session: Session, candidate_factory: t.Callable[..., Candidate]) -> None:
        obj = candidate_factory()

        with db_session.begin():
            updated = candidate_storage.update(
                obj.candidate_id, archived=True, communication_sent=True, session=db_session
            )

        assert updated.archived
        assert updated.communication_sent
        assert updated.name == obj.name

    def test_update_missing(self, db_session: Session) -> None:
        with db_session.begin():
            with pytest.raises(KeyError):
                candidate_storage.update(CandidateID(), archived=True, session=db_session)


class TestGauntletState(object):
    def test_snapshot_round_trip(self, db_session: Session, candidate_factory: t.Callable[..., Candidate]) -> None:
        obj = candidate_factory()
        state = GauntletState(
            phase=Phase.SystemDesign,
            technical_questions=["One?"],
            technical_report="report",
            system_design_question="Design a cache.",
        )

        with db_session.begin():
            assert candidate_storage.write_gauntlet_state(obj.candidate_id, state, session=db_session)
            loaded = candidate_storage.get(obj.candidate_id, session=db_session)

        assert loaded is not None
        assert loaded.gauntlet_state == state

    def test_write_to_missing_record(self, db_session: Session) -> None:
        with db_session.begin():
            assert not candidate_storage.write_gauntlet_state(CandidateID(), GauntletState(), session=db_session)


class TestAppendLog(object):
    def test_replay_is_idempotent(self, db_session: Session, candidate_factory: t.Callable[..., Candidate]) -> None:
        """Entries already in the log are skipped, so a batch can be written twice."""
        obj = candidate_factory()
        first = events.entry(events.GauntletStarted, "Gauntlet opened.", timestamp=AT, author=LogAuthor.Admin)
        second = events.entry(events.PhaseChanged, "locked -> technical", timestamp=AT)

        with db_session.begin():
            assert candidate_storage.append_log(obj.candidate_id, [first], session=db_session)
            assert candidate_storage.append_log(obj.candidate_id, [first, second], session=db_session)
            assert candidate_storage.append_log(obj.candidate_id, [second], session=db_session)
            loaded = candidate_storage.get(obj.candidate_id, session=db_session)

        assert loaded is not None
        assert [e.entry_id for e in loaded.log] == [first.entry_id, second.entry_id]
        assert loaded.log[0].author is LogAuthor.Admin

    def test_missing_record(self, db_session: Session) -> None:
        entry = events.entry(events.PhaseChanged, "x", timestamp=AT)
        with db_session.begin():
            assert not candidate_storage.append_log(CandidateID(), [entry], session=db_session)


class TestDelete(object):
    def test_delete(self, db_session: Session, candidate_factory: t.Callable[..., Candidate]) -> None:
        obj = candidate_factory()

        with db_session.begin():
            assert candidate_storage.delete(obj.candidate_id, session=db_session)
            assert not candidate_storage.delete(obj.candidate_id, session=db_session)
            assert candidate_storage.get(obj.candidate_id, session=db_session) is None


class TestWriteRecord(object):
    """The gateway's writer applies a whole batch in one transaction."""

    def test_batch_is_applied(self, db_session: Session, candidate_factory: t.Callable[..., Candidate]) -> None:
        obj = candidate_factory(started_at=AT)
        entry = events.entry(events.CandidateArchived, "Archived.", timestamp=AT)
        batch = RecordBatch(
            state=GauntletState(phase=Phase.Failed, failed_stage=Phase.Technical),
            log=[entry],
            archived=True,
            communication_sent=True,
        )

        assert write_record(obj.candidate_id, batch, session=db_session) is WriteOutcome.Written
        with db_session.begin():
            loaded = candidate_storage.get(obj.candidate_id, session=db_session)

        assert loaded is not None
        assert loaded.gauntlet_state is not None and loaded.gauntlet_state.phase is Phase.Failed
        assert loaded.archived and loaded.communication_sent
        assert [e.entry_id for e in loaded.log] == [entry.entry_id]

    def test_replaying_a_batch_changes_nothing(
        self, db_session: Session, candidate_factory: t.Callable[..., Candidate]
    ) -> None:
        obj = candidate_factory(started_at=AT)
        batch = RecordBatch(
            state=GauntletState(
                phase=Phase.Technical,
                technical_questions=["Q1?", "Q2?", "Q3?"],
                question_index=1,
            ),
            log=[
                events.entry(events.PhaseChanged, "Locked -> Technical", timestamp=AT),
                events.entry(events.ProctorVerdict, "Question 1: 90/100 (pass).", timestamp=AT, author=LogAuthor.AI),
            ],
            archived=False,
            communication_sent=False,
        )

        def observed() -> tuple[t.Any, ...]:
            with db_session.begin():
                loaded = candidate_storage.get(obj.candidate_id, session=db_session)
            assert loaded is not None
            return loaded.gauntlet_state, loaded.log, loaded.archived, loaded.communication_sent

        assert write_record(obj.candidate_id, batch, session=db_session) is WriteOutcome.Written
        once = observed()
        assert write_record(obj.candidate_id, batch, session=db_session) is WriteOutcome.Written
        twice = observed()

        assert twice == once
        assert len(twice[1]) == 2

    def test_missing_record(self, db_session: Session) -> None:
        batch = RecordBatch(state=GauntletState(phase=Phase.Technical))

        assert write_record(CandidateID(), batch, session=db_session) is WriteOutcome.Missing
