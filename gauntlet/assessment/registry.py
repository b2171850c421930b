from __future__ import annotations

import datetime
import typing as t

from gauntlet.core import di, get_logger, TimestampProvider
from gauntlet.core.config import GauntletSettings
from gauntlet.model import Candidate, CandidateID, GauntletState, Phase
from gauntlet.storage import candidate as candidate_storage
from gauntlet.storage import Session

from .controller import PhaseController
from .errors import CandidateNotFound
from .failure import FailureHandler
from .persistence import PersistenceGateway, RecordWriter
from .phase import is_terminal

if t.TYPE_CHECKING:
    from gauntlet.llm import Collaborators, EvaluatorClient

logger = get_logger()


class LiveSession(t.NamedTuple):
    candidate: Candidate
    controller: PhaseController


@di.inject
def load_candidate(
    candidate_id: CandidateID,
    session: Session = di.Manage["storage.persistent.session"],
) -> Candidate | None:
    with session.begin():
        return candidate_storage.get(candidate_id, session=session)


class SessionRegistry(object):
    """Live controllers of the web process, one per candidate.

    The candidate record is re-read on every checkout; a record that has
    disappeared ends its session. Only gauntlets still in play are kept:
    a settled one is served from a throwaway controller, and a session that
    has not been checked out for `session_idle_seconds` is flushed and
    dropped. An evicted session resumes from its record like any other.
    """

    def __init__(
        self,
        *,
        evaluator: EvaluatorClient,
        collaborators: Collaborators,
        writer: RecordWriter,
        settings: GauntletSettings,
        now: TimestampProvider,
    ) -> None:
        self.evaluator = evaluator
        self.collaborators = collaborators
        self.writer = writer
        self.settings = settings
        self.now = now
        self._sessions: dict[CandidateID, PhaseController] = {}
        self._last_seen: dict[CandidateID, datetime.datetime] = {}

    def __contains__(self, candidate_id: CandidateID) -> bool:
        return candidate_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    async def checkout(self, candidate_id: CandidateID) -> LiveSession:
        """
        Raises:
            CandidateNotFound: the record does not exist (anymore)
        """
        await self.evict_idle(keep=candidate_id)

        candidate = load_candidate(candidate_id)
        controller = self._sessions.get(candidate_id)
        if candidate is None or (controller is not None and controller.gateway.ghost):
            await self.drop(candidate_id)
            raise CandidateNotFound(candidate_id)

        if controller is None:
            controller = self.create(candidate)
            if is_settled(controller.state):
                return LiveSession(candidate, controller)
            self._sessions[candidate_id] = controller
            logger.debug(
                "loaded gauntlet session",
                extra={"candidate_id": str(candidate_id), "phase": controller.state.phase.value},
            )
        self._last_seen[candidate_id] = self.now()
        return LiveSession(candidate, controller)

    async def get_or_load(self, candidate_id: CandidateID) -> PhaseController:
        return (await self.checkout(candidate_id)).controller

    def create(self, candidate: Candidate) -> PhaseController:
        state = candidate.gauntlet_state.model_copy(deep=True) if candidate.gauntlet_state else GauntletState()
        gateway = PersistenceGateway(
            candidate.candidate_id, self.writer, debounce=self.settings.persistence_debounce_seconds
        )
        failure = FailureHandler(
            self.collaborators,
            now=self.now,
            company_name=self.settings.company_name,
            recruiter_name=self.settings.recruiter_name,
        )
        return PhaseController(
            candidate.profile(),
            state,
            evaluator=self.evaluator,
            collaborators=self.collaborators,
            gateway=gateway,
            failure=failure,
            now=self.now,
            technical_question_count=self.settings.technical_question_count,
            final_interview_prompt=self.settings.final_interview_prompt,
            require_media_permission=self.settings.require_media_permission,
        )

    async def release(self, candidate_id: CandidateID) -> bool:
        """Drop a session whose gauntlet is over once its writes are out."""
        controller = self._sessions.get(candidate_id)
        if controller is None or not is_terminal(controller.state.phase):
            return False
        await controller.gateway.flush()
        if controller.gateway.has_backlog:
            return False
        await self.drop(candidate_id)
        return True

    async def drop(self, candidate_id: CandidateID) -> None:
        self._last_seen.pop(candidate_id, None)
        controller = self._sessions.pop(candidate_id, None)
        if controller is not None:
            await controller.close()
            logger.debug("dropped gauntlet session", extra={"candidate_id": str(candidate_id)})

    async def evict_idle(self, *, keep: CandidateID | None = None) -> list[CandidateID]:
        """Drop sessions not checked out within the idle timeout.

        A session with a review in flight is left alone until it settles.
        """
        cutoff = self.now() - datetime.timedelta(seconds=self.settings.session_idle_seconds)
        idle = [
            candidate_id
            for candidate_id, seen in self._last_seen.items()
            if seen < cutoff and candidate_id != keep and not self._sessions[candidate_id].gate_in_flight
        ]
        for candidate_id in idle:
            await self.drop(candidate_id)
        if idle:
            logger.info("evicted idle gauntlet sessions", extra={"count": len(idle), "remaining": len(self)})
        return idle


def is_settled(state: GauntletState) -> bool:
    """Whether nothing more can happen to a gauntlet in this state."""
    return is_terminal(state.phase) and (state.phase is not Phase.Failed or state.failure_handled)
