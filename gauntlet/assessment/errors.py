"""Exceptions for gauntlet operations."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:
    from gauntlet.model import CandidateID, Phase


class GauntletError(Exception):
    """Error during a gauntlet operation."""

    pass


class IllegalTransition(GauntletError):
    """The requested phase change is not in the transition table."""

    def __init__(self, source: Phase, target: Phase):
        super().__init__(f"illegal transition {source.value} -> {target.value}")
        self.source = source
        self.target = target


class InvalidOperation(GauntletError):
    """The operation is not valid in the current phase."""

    pass


class GateInFlight(GauntletError):
    """A gate evaluation for this candidate is already outstanding."""

    pass


class PermissionRequired(GauntletError):
    """Camera/microphone permission has not been granted."""

    pass


class CandidateNotFound(GauntletError):
    def __init__(self, candidate_id: CandidateID):
        super().__init__(f"candidate {candidate_id} not found")
        self.candidate_id = candidate_id


class JudgeError(GauntletError):
    """A judgment call failed; the candidate may resubmit."""

    pass


class MalformedJudgment(JudgeError):
    """The judge answered, but not with a usable verdict."""

    pass


class CollaboratorError(GauntletError):
    """An external collaborator (question generator, drafter, analyzer) failed."""

    pass
