"""The gauntlet state machine for one candidate session.

A `PhaseController` owns the live `GauntletState` of one candidate. It is the
only thing that mutates it: every change goes through `_transition` (which
consults the transition table) and is handed to the `PersistenceGateway`.

Judgment calls are awaited while holding the gate lock, so at most one gate
evaluation per candidate is ever outstanding; a second submission while one
is in flight is refused with `GateInFlight` rather than queued.
"""

from __future__ import annotations

import asyncio
import typing as t

from gauntlet.core import get_logger, TimestampProvider
from gauntlet.model import CandidateID, CandidateProfile, GauntletState, LogAuthor, LogEntry, Phase, TechnicalAnswer

from . import events
from .errors import GateInFlight, InvalidOperation, JudgeError
from .failure import FailureHandler
from .persistence import PersistenceGateway
from .phase import check_transition, GATES, is_pending, is_terminal, ReviewGate, STAGE_NAMES, STAGES
from .proctoring import EvidenceChannel, ProctoringMonitor, VisibilityState
from .report import stage_report, technical_report

if t.TYPE_CHECKING:
    from gauntlet.llm import Collaborators, EvaluatorClient

logger = get_logger()


class PhaseController(object):
    def __init__(
        self,
        profile: CandidateProfile,
        state: GauntletState,
        *,
        evaluator: EvaluatorClient,
        collaborators: Collaborators,
        gateway: PersistenceGateway,
        failure: FailureHandler,
        now: TimestampProvider,
        technical_question_count: int = 3,
        final_interview_prompt: str,
        require_media_permission: bool = True,
        capture_supported: bool = True,
    ) -> None:
        self.profile = profile
        self.state = state
        self.evaluator = evaluator
        self.collaborators = collaborators
        self.gateway = gateway
        self.failure = failure
        self.now = now
        self.technical_question_count = technical_question_count
        self.final_interview_prompt = final_interview_prompt
        self.require_media_permission = require_media_permission
        self.capture_supported = capture_supported

        self.channel = EvidenceChannel()
        self.monitor: ProctoringMonitor | None = None
        self._gate_lock = asyncio.Lock()

    @property
    def candidate_id(self) -> CandidateID:
        return self.profile.candidate_id

    @property
    def gate_in_flight(self) -> bool:
        return self._gate_lock.locked()

    # evidence relayed from the client

    def report_visibility(self, state: VisibilityState) -> None:
        self.channel.report_visibility(state)

    def report_transcript(self, text: str, *, final: bool) -> None:
        self.channel.report_transcript(text, final=final)

    def report_permission(self, granted: bool) -> None:
        self.channel.report_permission(granted)

    # phase operations

    async def start_phase(self, phase: Phase) -> GauntletState:
        """Enter (or re-enter) an answer-taking stage and present its question.

        A stage can be started from the phase immediately before it, or again
        from itself after a reload. Questions are fetched only once; a
        collaborator failure leaves the state untouched.

        Raises:
            InvalidOperation: `phase` does not take answers, or a review is pending
            IllegalTransition: the stage would be skipped into
            GateInFlight: another operation is evaluating
            CollaboratorError: question generation failed
        """
        if phase not in STAGES:
            raise InvalidOperation(f"{phase.value} is not a stage that can be started")

        current = self.state.phase
        if current is not phase:
            if is_pending(current):
                raise InvalidOperation(f"a review is pending in {current.value}")
            check_transition(current, phase)

        if self._gate_lock.locked():
            raise GateInFlight("an evaluation is already in progress")
        async with self._gate_lock:
            await self._ensure_question(phase)
            if current is not phase:
                self._transition(phase)
            else:
                self._persist()
            self._open_monitor()
        return self.state

    async def submit_answer(self, text: str) -> GauntletState:
        """Submit the candidate's answer to the current question.

        Raises:
            GateInFlight: a previous submission is still being judged
            InvalidOperation: the current phase does not take answers, or it has not been started
            PermissionRequired: camera/microphone access has not been granted
            JudgeError: a judgment call failed; the state is back where it was before this call
        """
        if self._gate_lock.locked():
            raise GateInFlight("an evaluation is already in progress")

        async with self._gate_lock:
            phase = self.state.phase
            if phase not in STAGES:
                raise InvalidOperation(f"cannot submit an answer in {phase.value}")
            if self.monitor is None or self.monitor.closed or self.state.current_question is None:
                raise InvalidOperation(f"{phase.value} has not been started")
            if self.require_media_permission:
                self.monitor.require_permission()
            if not text.strip():
                raise InvalidOperation("answer is empty")

            snapshot = self.state.model_copy(deep=True)
            try:
                match phase:
                    case Phase.Technical:
                        await self._submit_technical(text)
                    case Phase.SystemDesign:
                        self.monitor.seal()
                        self.state.system_design_answer = text
                        self.state.system_design_report = stage_report(
                            STAGE_NAMES[phase], self.state.system_design_question, text
                        )
                        await self._enter_gate(STAGES[phase])
                    case Phase.FinalInterview:
                        self.monitor.seal()
                        self.state.final_interview_answer = text
                        self.state.final_interview_report = stage_report(
                            STAGE_NAMES[phase], self.state.final_interview_question, text
                        )
                        await self._enter_gate(STAGES[phase])
            except JudgeError as e:
                self._roll_back(snapshot, e)
                raise

            if is_terminal(self.state.phase):
                self._close_monitor()
        return self.state

    async def resume(self) -> GauntletState:
        """Continue a snapshot loaded from the candidate record.

        A pending review re-runs its gate, an unhandled failure runs failure
        handling, and a started stage gets a fresh evidence buffer.
        """
        if self._gate_lock.locked():
            raise GateInFlight("an evaluation is already in progress")

        async with self._gate_lock:
            phase = self.state.phase
            if is_pending(phase):
                gate = GATES[phase]
                try:
                    await self._run_gate(gate)
                except JudgeError as e:
                    self._unwind_gate(gate, e)
                    raise
            elif phase is Phase.Failed and not self.state.failure_handled:
                await self._handle_failure()
            elif phase in STAGES and self.state.current_question is not None:
                self._open_monitor()
        return self.state

    async def close(self) -> None:
        self._close_monitor()
        await self.gateway.close()

    # stages

    async def _submit_technical(self, text: str) -> None:
        question = self.state.current_question
        if self.monitor is None or question is None:
            raise InvalidOperation(f"{Phase.Technical.value} has not been started")

        evidence = self.monitor.seal()
        result = await self.evaluator.proctor_answer(question, text, evidence)
        answers = [
            *self.state.technical_answers,
            TechnicalAnswer(question=question, answer=text, result=result, evidence=evidence),
        ]
        self.state.technical_answers = answers
        verdict = self._entry(
            events.ProctorVerdict,
            f"Question {self.state.question_index + 1}: {result.score}/100 "
            f"({'pass' if result.is_pass else 'fail'}). {result.proctoring_summary}".strip(),
            author=LogAuthor.AI,
        )

        if not result.is_pass:
            self.state.technical_report = technical_report(answers)
            await self._fail(
                Phase.Technical,
                f"Technical answer {self.state.question_index + 1} scored {result.score}/100.",
                log=[verdict],
            )
            return

        if self.state.question_index + 1 < len(self.state.technical_questions):
            check_transition(Phase.Technical, Phase.Technical)
            self.state.question_index += 1
            self._persist(log=[verdict])
            self._open_monitor()
            return

        self.state.technical_report = technical_report(answers)
        await self._enter_gate(Phase.PendingTechReview, log=[verdict])

    async def _ensure_question(self, phase: Phase) -> None:
        match phase:
            case Phase.Technical if not self.state.technical_questions:
                self.state.technical_questions = await self.collaborators.generate_technical_questions(
                    role=self.profile.role,
                    role_description=self.profile.role_description,
                    narrative=self.profile.narrative,
                    count=self.technical_question_count,
                )
                self.state.question_index = 0
            case Phase.SystemDesign if self.state.system_design_question is None:
                self.state.system_design_question = await self.collaborators.generate_system_design_question(
                    role=self.profile.role
                )
            case Phase.FinalInterview if self.state.final_interview_question is None:
                self.state.final_interview_question = self.final_interview_prompt
            case _:
                pass

    # gates

    async def _enter_gate(self, pending: Phase, log: t.Sequence[LogEntry] = ()) -> None:
        self._transition(pending, log=log)
        await self._run_gate(GATES[pending])

    async def _run_gate(self, gate: ReviewGate) -> None:
        report = getattr(self.state, gate.report_field)
        if report is None:
            raise InvalidOperation(f"no {gate.report_field} to review")

        review = await self.evaluator.review_stage(report, stage=gate.stage)
        setattr(self.state, gate.review_field, review)
        entry = self._entry(
            events.PhaseReview,
            f"{STAGE_NAMES[gate.stage]}: {review.recommendation.label}. {review.assessment}",
            author=LogAuthor.AI,
        )
        logger.info(
            "gate evaluated",
            extra={
                "candidate_id": str(self.candidate_id),
                "stage": gate.stage.value,
                "recommendation": review.recommendation.value,
            },
        )

        if review.is_passing:
            self._transition(gate.advance_to, log=[entry])
            if gate.advance_to is Phase.Complete:
                self._close_monitor()
            return

        await self._fail(
            gate.stage,
            f"Phase review recommended {review.recommendation.label}: {review.assessment}",
            log=[entry],
        )

    def _roll_back(self, snapshot: GauntletState, error: JudgeError) -> None:
        """Return to the state before the failed submission so it can be resubmitted."""
        if self.state.phase is not snapshot.phase:
            check_transition(self.state.phase, snapshot.phase)
        logger.warning(
            "judgment failed, rolling back",
            extra={
                "candidate_id": str(self.candidate_id),
                "phase": self.state.phase.value,
                "restored": snapshot.phase.value,
                "error": str(error),
            },
        )
        self.state = snapshot
        self._persist(log=[self._entry(events.JudgeUnavailable, f"{error} The candidate may resubmit.")])
        self._open_monitor()

    def _unwind_gate(self, gate: ReviewGate, error: JudgeError) -> None:
        """Leave a pending review whose gate could not be evaluated on resume.

        The stage answer is discarded so the candidate can submit again.
        """
        pending = self.state.phase
        check_transition(pending, gate.stage)
        match gate.stage:
            case Phase.Technical:
                self.state.technical_report = None
                self.state.technical_answers = self.state.technical_answers[:-1]
            case Phase.SystemDesign:
                self.state.system_design_report = None
                self.state.system_design_answer = None
            case Phase.FinalInterview:
                self.state.final_interview_report = None
                self.state.final_interview_answer = None
        logger.warning(
            "judgment failed on resume, unwinding",
            extra={"candidate_id": str(self.candidate_id), "phase": pending.value, "error": str(error)},
        )
        self._transition(
            gate.stage, log=[self._entry(events.JudgeUnavailable, f"{error} The candidate may resubmit.")]
        )
        self._open_monitor()

    # failure

    async def _fail(self, stage: Phase, reason: str, log: t.Sequence[LogEntry] = ()) -> None:
        self.state.failed_stage = stage
        self.state.failure_reason = reason
        self._transition(Phase.Failed, log=log)
        self._close_monitor()
        await self._handle_failure()

    async def _handle_failure(self) -> None:
        outcome = await self.failure.handle(self.profile, self.state)
        if outcome is None:
            return
        if outcome.communication_sent:
            self._persist(log=outcome.log, archived=True, communication_sent=True)
        else:
            self._persist(log=outcome.log, archived=True)

    # plumbing

    def _transition(self, target: Phase, log: t.Sequence[LogEntry] = ()) -> None:
        source = self.state.phase
        check_transition(source, target)
        self.state.phase = target
        logger.info(
            "phase changed",
            extra={"candidate_id": str(self.candidate_id), "from": source.value, "to": target.value},
        )
        self._persist(log=[*log, self._entry(events.PhaseChanged, f"{source.value} -> {target.value}")])

    def _persist(self, log: t.Sequence[LogEntry] = (), **flags: t.Any) -> None:
        self.gateway.enqueue(state=self.state, log=log, **flags)

    def _open_monitor(self) -> None:
        self._close_monitor()
        self.monitor = ProctoringMonitor(self.channel, now=self.now, capture_supported=self.capture_supported)
        self.monitor.present_question()

    def _close_monitor(self) -> None:
        if self.monitor is not None:
            self.monitor.close()

    def _entry(self, event: str, details: str, author: LogAuthor = LogAuthor.System) -> LogEntry:
        return events.entry(event, details, timestamp=self.now(), author=author)
