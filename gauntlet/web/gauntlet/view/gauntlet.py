"""View models for the candidate portal."""

from __future__ import annotations

from gauntlet.assessment.controller import PhaseController
from gauntlet.assessment.persistence import WriteOutcome
from gauntlet.assessment.proctoring import VisibilityState
from gauntlet.model import BaseModel, CandidateID, DeadlineStatus, JudgmentResult, Phase, ProctorResult


class AnswerRequest(BaseModel):
    answer: str


class VisibilityRequest(BaseModel):
    state: VisibilityState


class TranscriptRequest(BaseModel):
    text: str
    final: bool = True


class PermissionRequest(BaseModel):
    granted: bool


class GauntletResponse(BaseModel):
    """What the candidate portal renders.

    `persistence_error` is set when the latest changes could not be saved;
    they are kept and retried with the next change.
    """

    candidate_id: CandidateID
    name: str
    role: str
    phase: Phase
    progress: int
    deadline: DeadlineStatus
    question: str | None = None
    question_number: int | None = None
    question_count: int | None = None
    last_result: ProctorResult | None = None
    last_review: JudgmentResult | None = None
    permission_granted: bool | None = None
    gate_in_flight: bool = False
    saved: bool = True
    persistence_error: str | None = None

    @classmethod
    def from_controller(
        cls, controller: PhaseController, *, progress: int, deadline: DeadlineStatus
    ) -> GauntletResponse:
        state = controller.state
        gateway = controller.gateway
        is_technical = state.phase is Phase.Technical
        return cls(
            candidate_id=controller.candidate_id,
            name=controller.profile.name,
            role=controller.profile.role,
            phase=state.phase,
            progress=progress,
            deadline=deadline,
            question=state.current_question,
            question_number=state.question_index + 1 if is_technical and state.technical_questions else None,
            question_count=len(state.technical_questions) if is_technical and state.technical_questions else None,
            last_result=state.technical_answers[-1].result if state.technical_answers else None,
            last_review=state.last_review,
            permission_granted=controller.channel.permission,
            gate_in_flight=controller.gate_in_flight,
            saved=gateway.last_outcome is not WriteOutcome.Failed and not gateway.has_backlog,
            persistence_error=str(gateway.last_error) if gateway.last_error else None,
        )


class EvidenceAcceptedResponse(BaseModel):
    recording: bool
