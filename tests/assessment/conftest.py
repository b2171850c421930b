"""Fixtures for assessment tests.

Controllers here run against an in-memory record writer, so the state machine
can be exercised without a database.
"""

from __future__ import annotations

import datetime
import typing as t
from unittest.mock import AsyncMock

import pytest

from gauntlet.assessment.controller import PhaseController
from gauntlet.assessment.failure import FailureHandler
from gauntlet.assessment.persistence import PersistenceGateway, RecordBatch, WriteOutcome
from gauntlet.core import TimestampProvider
from gauntlet.lib import NotSet
from gauntlet.model import CandidateID, CandidateProfile, GauntletState, LogEntry

START = datetime.datetime(2026, 3, 2, 9, 0, tzinfo=datetime.UTC)


class Clock(object):
    """A manually advanced clock."""

    def __init__(self, now: datetime.datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += datetime.timedelta(**kwargs)


class MemoryWriter(object):
    """Record writer that keeps every batch it is given.

    Set `missing` to simulate a deleted record, or `error` to make writes raise.
    """

    def __init__(self) -> None:
        self.batches: list[RecordBatch] = []
        self.missing = False
        self.error: Exception | None = None

    def write(self, candidate_id: CandidateID, batch: RecordBatch) -> WriteOutcome:
        if self.error is not None:
            raise self.error
        if self.missing:
            return WriteOutcome.Missing
        self.batches.append(batch)
        return WriteOutcome.Written

    @property
    def state(self) -> GauntletState | None:
        for batch in reversed(self.batches):
            if not isinstance(batch.state, NotSet):
                return batch.state
        return None

    @property
    def log(self) -> list[LogEntry]:
        return [e for batch in self.batches for e in batch.log]

    def events(self) -> list[str]:
        return [e.event for e in self.log]

    def flag(self, name: str) -> t.Any:
        for batch in reversed(self.batches):
            value = getattr(batch, name)
            if not isinstance(value, NotSet):
                return value
        return None


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def writer() -> MemoryWriter:
    return MemoryWriter()


@pytest.fixture
def profile() -> CandidateProfile:
    return CandidateProfile(
        candidate_id=CandidateID(),
        name="Ada Lovelace",
        role="Senior Backend Engineer",
        role_description="Builds and operates the payments platform.",
        skills=["Python", "PostgreSQL"],
        narrative="Ten years of backend work.",
    )


@pytest.fixture
def make_controller(
    profile: CandidateProfile,
    writer: MemoryWriter,
    evaluator: AsyncMock,
    collaborators: AsyncMock,
    clock: Clock,
) -> t.Callable[..., PhaseController]:
    """Build a controller; must be called inside a running event loop."""

    def build(
        state: GauntletState | None = None,
        *,
        technical_question_count: int = 3,
        require_media_permission: bool = True,
        capture_supported: bool = True,
        now: TimestampProvider | None = None,
    ) -> PhaseController:
        now = now or clock
        return PhaseController(
            profile,
            state or GauntletState(),
            evaluator=evaluator,
            collaborators=collaborators,
            gateway=PersistenceGateway(profile.candidate_id, writer),
            failure=FailureHandler(collaborators, now=now, company_name="Acme", recruiter_name="Jordan Reyes"),
            now=now,
            technical_question_count=technical_question_count,
            final_interview_prompt="Tell us about a hard trade-off.",
            require_media_permission=require_media_permission,
            capture_supported=capture_supported,
        )

    return build
