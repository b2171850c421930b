"""View models for the admin monitor."""

from __future__ import annotations

import datetime
import typing as t

import annotated_types as ant

from gauntlet.assessment.status import GauntletStatus
from gauntlet.model import BaseModel, Candidate, CandidateID, LogEntry


class CandidateCreateRequest(BaseModel):
    name: t.Annotated[str, ant.MinLen(1)]
    role: t.Annotated[str, ant.MinLen(1)]
    role_description: str = ""
    skills: list[str] = []
    narrative: str = ""
    ai_initial_score: t.Annotated[int, ant.Ge(0), ant.Le(100)] | None = None


class CandidateResponse(BaseModel):
    candidate_id: CandidateID
    name: str
    role: str
    ai_initial_score: int | None = None
    archived: bool
    communication_sent: bool
    gauntlet_start_date: datetime.datetime | None = None
    status: GauntletStatus | None = None

    @classmethod
    def from_candidate(cls, candidate: Candidate, status: GauntletStatus | None = None) -> CandidateResponse:
        return cls(
            candidate_id=candidate.candidate_id,
            name=candidate.name,
            role=candidate.role,
            ai_initial_score=candidate.ai_initial_score,
            archived=candidate.archived,
            communication_sent=candidate.communication_sent,
            gauntlet_start_date=candidate.gauntlet_start_date,
            status=status,
        )


class CandidateListResponse(BaseModel):
    candidates: list[CandidateResponse]
    total: int


class CandidateLogResponse(BaseModel):
    candidate_id: CandidateID
    entries: list[LogEntry]


class CommunicationsResponse(BaseModel):
    offers: list[CandidateID]
    rejections: list[CandidateID]
    failed: list[CandidateID]
    sent: int
