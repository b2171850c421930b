"""Candidate log events written by the gauntlet."""

from __future__ import annotations

import datetime
import typing as t

from gauntlet.model import LogAuthor, LogEntry, LogEntryID

PhaseChanged: t.Final = "Gauntlet Phase Changed"
ProctorVerdict: t.Final = "AI Proctor Verdict"
PhaseReview: t.Final = "AI Phase Review"
JudgeUnavailable: t.Final = "AI Review Failed"
RejectionDrafted: t.Final = "Rejection Email Drafted"
SkillGapAnalysis: t.Final = "Skill Gap Analysis"
CollaboratorFailed: t.Final = "AI Collaborator Failed"
CandidateArchived: t.Final = "Candidate Archived"
GauntletStarted: t.Final = "Gauntlet Started"
EmailDrafted: t.Final = "AI Email Drafted"


def entry(
    event: str,
    details: str,
    *,
    timestamp: datetime.datetime,
    author: LogAuthor = LogAuthor.System,
) -> LogEntry:
    return LogEntry(entry_id=LogEntryID(), timestamp=timestamp, event=event, details=details, author=author)
