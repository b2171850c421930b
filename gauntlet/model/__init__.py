__all__ = [
    # Base
    "BaseModel",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    "LogAuthor",
    "Phase",
    "Recommendation",
    # ID Types
    "CandidateID",
    "LogEntryID",
    # Candidates
    "Candidate",
    "CandidateProfile",
    "LogEntry",
    # Gauntlet
    "DeadlineStatus",
    "EvidenceEntry",
    "GauntletState",
    "JudgmentResult",
    "ProctoringEvidence",
    "ProctorResult",
    "TechnicalAnswer",
]

from .base import BaseModel, WithTimestamps
from .candidate import Candidate, CandidateProfile, LogEntry
from .enum import DeploymentEnvironment, LogAuthor, Phase, Recommendation
from .gauntlet import DeadlineStatus, EvidenceEntry, GauntletState, JudgmentResult, ProctoringEvidence, \
    ProctorResult, TechnicalAnswer
from .id import CandidateID, LogEntryID
