from __future__ import annotations

import datetime
import typing as t

import annotated_types as ant
import pydantic as p

from .base import BaseModel
from .enum import Phase, Recommendation


class JudgmentResult(BaseModel):
    recommendation: Recommendation
    assessment: str
    strengths: list[str] = []
    concerns: list[str] = []

    @property
    def is_passing(self) -> bool:
        return self.recommendation.is_passing


class ProctorResult(BaseModel):
    evaluation: str
    score: t.Annotated[int, ant.Ge(0), ant.Le(100)]
    proctoring_summary: str
    is_pass: bool


class EvidenceEntry(BaseModel):
    timestamp: datetime.datetime
    description: str

    def __str__(self) -> str:
        return f"[{self.timestamp.isoformat()}] {self.description}"


class ProctoringEvidence(BaseModel):
    """Integrity evidence sealed at the end of one stage attempt.

    `ambient_transcript` is None when nothing was captured, either because
    capture is unsupported on the client or because no final segment arrived.
    """

    entries: list[EvidenceEntry] = []
    ambient_transcript: str | None = None


class TechnicalAnswer(BaseModel):
    question: str
    answer: str
    result: ProctorResult
    evidence: ProctoringEvidence


class GauntletState(BaseModel):
    """Snapshot of one candidate's progress through the gauntlet.

    Reports and reviews fill in strictly in stage order; a snapshot that
    skips ahead fails validation.
    """

    model_config = p.ConfigDict(validate_assignment=True)

    phase: Phase = Phase.Locked

    technical_questions: list[str] = []
    question_index: int = 0
    technical_answers: list[TechnicalAnswer] = []
    system_design_question: str | None = None
    system_design_answer: str | None = None
    final_interview_question: str | None = None
    final_interview_answer: str | None = None

    technical_report: str | None = None
    system_design_report: str | None = None
    final_interview_report: str | None = None

    tech_review: JudgmentResult | None = None
    design_review: JudgmentResult | None = None
    final_review: JudgmentResult | None = None

    failed_stage: Phase | None = None
    failure_reason: str | None = None
    failure_handled: bool = False

    @p.model_validator(mode="after")
    def check_stage_order(self) -> t.Self:
        chain = [
            ("technical_report", self.technical_report),
            ("tech_review", self.tech_review),
            ("system_design_report", self.system_design_report),
            ("design_review", self.design_review),
            ("final_interview_report", self.final_interview_report),
            ("final_review", self.final_review),
        ]
        for i, (name, value) in enumerate(chain):
            if value is None:
                continue
            missing = [n for n, v in chain[:i] if v is None]
            if missing:
                raise ValueError(f"{name} is set but {', '.join(missing)} is not")
        return self

    @property
    def current_question(self) -> str | None:
        match self.phase:
            case Phase.Technical:
                if self.question_index < len(self.technical_questions):
                    return self.technical_questions[self.question_index]
                return None
            case Phase.SystemDesign:
                return self.system_design_question
            case Phase.FinalInterview:
                return self.final_interview_question
            case _:
                return None

    @property
    def last_review(self) -> JudgmentResult | None:
        return self.final_review or self.design_review or self.tech_review


class DeadlineStatus(BaseModel):
    label: str
    is_urgent: bool = False
    is_expired: bool = False
