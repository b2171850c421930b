import datetime

from .base import BaseModel, WithTimestamps
from .enum import LogAuthor
from .gauntlet import GauntletState
from .id import CandidateID, LogEntryID


class LogEntry(BaseModel):  # embedded in Candidate.log
    entry_id: LogEntryID
    timestamp: datetime.datetime
    event: str
    details: str
    author: LogAuthor = LogAuthor.System


class CandidateProfile(BaseModel):
    """The slice of a candidate record the assessment reads."""

    candidate_id: CandidateID
    name: str
    role: str
    role_description: str = ""
    skills: list[str] = []
    narrative: str = ""


class Candidate(CandidateProfile, WithTimestamps):
    ai_initial_score: int | None = None
    archived: bool = False
    communication_sent: bool = False

    gauntlet_state: GauntletState | None = None
    gauntlet_start_date: datetime.datetime | None = None
    log: list[LogEntry] = []

    def profile(self) -> CandidateProfile:
        return CandidateProfile(
            candidate_id=self.candidate_id,
            name=self.name,
            role=self.role,
            role_description=self.role_description,
            skills=list(self.skills),
            narrative=self.narrative,
        )
