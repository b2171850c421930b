from __future__ import annotations

import typing as t

from gauntlet.core import get_logger, TimestampProvider
from gauntlet.model import CandidateProfile, GauntletState, LogAuthor, LogEntry, Phase

from . import events
from .errors import CollaboratorError
from .phase import STAGE_NAMES

if t.TYPE_CHECKING:
    from gauntlet.llm import Collaborators, EmailDraft, SkillGap

logger = get_logger()


class FailureOutcome(t.NamedTuple):
    log: list[LogEntry]
    rejection: EmailDraft | None
    skill_gaps: list[SkillGap] | None

    @property
    def communication_sent(self) -> bool:
        return self.rejection is not None


def rejection_rationale(state: GauntletState) -> str:
    """The failure reason followed by the report of the stage that failed."""
    stage = state.failed_stage
    stage_name = STAGE_NAMES.get(stage, "the assessment") if stage else "the assessment"
    report = {
        Phase.Technical: state.technical_report,
        Phase.SystemDesign: state.system_design_report,
        Phase.FinalInterview: state.final_interview_report,
    }.get(stage) if stage else None
    rationale = f"The candidate did not pass the {stage_name}. {state.failure_reason or ''}".strip()
    if report:
        rationale = f"{rationale}\n\nStage report:\n{report}"
    return rationale


class FailureHandler(object):
    """Side effects of a terminal failure.

    Runs once per snapshot: `failure_handled` is set on the state before any
    collaborator is called, so a reload or a repeated call is a no-op.
    Collaborator failures are logged and recorded, never raised; the candidate
    has failed either way.
    """

    def __init__(
        self,
        collaborators: Collaborators,
        *,
        now: TimestampProvider,
        company_name: str,
        recruiter_name: str,
    ) -> None:
        self.collaborators = collaborators
        self.now = now
        self.company_name = company_name
        self.recruiter_name = recruiter_name

    async def handle(self, profile: CandidateProfile, state: GauntletState) -> FailureOutcome | None:
        if state.phase is not Phase.Failed:
            raise ValueError(f"cannot run failure handling in phase {state.phase.value}")
        if state.failure_handled:
            return None
        state.failure_handled = True

        stage = state.failed_stage
        rationale = rejection_rationale(state)
        log: list[LogEntry] = []

        rejection: EmailDraft | None = None
        try:
            rejection = await self.collaborators.draft_rejection(
                candidate_name=profile.name,
                stage=STAGE_NAMES.get(stage, "Assessment") if stage else "Assessment",
                role=profile.role,
                skills=profile.skills,
                rationale=rationale,
                company_name=self.company_name,
                recruiter_name=self.recruiter_name,
            )
        except CollaboratorError as e:
            logger.warning(
                "rejection draft failed",
                extra={"candidate_id": str(profile.candidate_id), "error": str(e)},
            )
            log.append(self._entry(events.CollaboratorFailed, f"Rejection draft could not be generated: {e}"))
        else:
            log.append(
                self._entry(
                    events.RejectionDrafted,
                    f"Subject: {rejection['subject']}\n\n{rejection['body']}",
                    author=LogAuthor.AI,
                )
            )

        stage_value = stage.value if stage else "unknown"
        log.append(self._entry(events.CandidateArchived, f"Archived after failing the {stage_value} stage."))

        skill_gaps: list[SkillGap] | None = None
        if stage is Phase.FinalInterview:
            try:
                skill_gaps = await self.collaborators.analyze_skill_gaps(
                    skills=profile.skills,
                    role_description=profile.role_description or profile.role,
                )
            except CollaboratorError as e:
                logger.warning(
                    "skill gap analysis failed",
                    extra={"candidate_id": str(profile.candidate_id), "error": str(e)},
                )
                log.append(self._entry(events.CollaboratorFailed, f"Skill gap analysis could not be generated: {e}"))
            else:
                details = "\n".join(f"- {g['skill']}: {g['suggestion']}" for g in skill_gaps) or "No gaps identified."
                log.append(self._entry(events.SkillGapAnalysis, details, author=LogAuthor.AI))

        logger.info(
            "failure handled",
            extra={
                "candidate_id": str(profile.candidate_id),
                "stage": stage.value if stage else None,
                "rejection_drafted": rejection is not None,
                "skill_gaps": len(skill_gaps) if skill_gaps is not None else None,
            },
        )
        return FailureOutcome(log=log, rejection=rejection, skill_gaps=skill_gaps)

    def _entry(self, event: str, details: str, author: LogAuthor = LogAuthor.System) -> LogEntry:
        return events.entry(event, details, timestamp=self.now(), author=author)
