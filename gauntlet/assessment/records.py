"""Administrative changes to a candidate record.

Both the admin API and the command line go through here so that every change
leaves the same trail in the candidate log.
"""

from __future__ import annotations

import datetime
import typing as t

from gauntlet.core import get_logger
from gauntlet.model import Candidate, CandidateID, GauntletState, LogAuthor, Phase, Recommendation
from gauntlet.storage import candidate as candidate_storage
from gauntlet.storage import Session

from . import events
from .errors import CandidateNotFound, CollaboratorError, InvalidOperation
from .phase import STAGE_NAMES

if t.TYPE_CHECKING:
    from gauntlet.llm import Collaborators, EmailDraft

logger = get_logger()

OfferExtended: t.Final = "Offer Extended"
Rejected: t.Final = "Rejected"
NoFinalReview: t.Final = (
    "After careful consideration of the final interview, we have decided to move forward with other candidates."
)


def open_gauntlet(
    candidate_id: CandidateID,
    now: datetime.datetime,
    *,
    author: LogAuthor = LogAuthor.Admin,
    session: Session,
) -> Candidate:
    """Hand the candidate a fresh, locked gauntlet; the window starts at `now`.

    Raises:
        CandidateNotFound: no such candidate
        InvalidOperation: the gauntlet has already been opened
    """
    candidate = candidate_storage.get(candidate_id, session=session)
    if candidate is None:
        raise CandidateNotFound(candidate_id)
    if candidate.gauntlet_start_date is not None:
        raise InvalidOperation("The gauntlet is already open")

    candidate_storage.write_gauntlet_state(candidate_id, GauntletState(), session=session)
    candidate_storage.append_log(
        candidate_id,
        [events.entry(events.GauntletStarted, "Gauntlet opened.", timestamp=now, author=author)],
        session=session,
    )
    return candidate_storage.update(candidate_id, gauntlet_start_date=now, session=session)


def archive(
    candidate_id: CandidateID,
    now: datetime.datetime,
    *,
    author: LogAuthor = LogAuthor.Admin,
    session: Session,
) -> Candidate:
    """
    Raises:
        CandidateNotFound: no such candidate
    """
    try:
        candidate = candidate_storage.update(candidate_id, archived=True, session=session)
    except KeyError:
        raise CandidateNotFound(candidate_id) from None
    candidate_storage.append_log(
        candidate_id,
        [events.entry(events.CandidateArchived, "Archived by an administrator.", timestamp=now, author=author)],
        session=session,
    )
    return candidate


class CommunicationsOutcome(t.NamedTuple):
    offers: list[CandidateID]
    rejections: list[CandidateID]
    failed: list[CandidateID]

    @property
    def sent(self) -> int:
        return len(self.offers) + len(self.rejections)


def awaiting_communication(*, session: Session) -> list[Candidate]:
    """Candidates who completed the gauntlet and have not been written to yet."""
    return [
        c
        for c in candidate_storage.find(session=session)
        if c.gauntlet_state is not None and c.gauntlet_state.phase is Phase.Complete and not c.communication_sent
    ]


async def send_communications(
    collaborators: Collaborators,
    now: datetime.datetime,
    *,
    company_name: str,
    recruiter_name: str,
    session: Session,
) -> CommunicationsOutcome:
    """Draft the closing email for every candidate who completed the gauntlet.

    A Strong Hire from the final review earns an offer, any other outcome a
    rejection. The draft goes into the candidate log and the record is marked
    as written to, so a second run only picks up newcomers. A draft that cannot
    be generated is logged and left for the next run.

    Runs its own transactions: one to find the candidates and one for each
    candidate written to. With nobody waiting, nothing is called or written.
    """
    with session.begin():
        pending = awaiting_communication(session=session)

    outcome = CommunicationsOutcome(offers=[], rejections=[], failed=[])
    if not pending:
        logger.info("no candidates awaiting communication")
        return outcome

    for candidate in pending:
        state = candidate.gauntlet_state or GauntletState()
        review = state.final_review
        offer = review if review is not None and review.recommendation is Recommendation.StrongHire else None
        try:
            if offer is not None:
                draft = await collaborators.draft_offer(
                    candidate_name=candidate.name,
                    role=candidate.role,
                    skills=candidate.skills,
                    assessment=offer.assessment,
                    company_name=company_name,
                    recruiter_name=recruiter_name,
                )
            else:
                draft = await collaborators.draft_rejection(
                    candidate_name=candidate.name,
                    stage=STAGE_NAMES[Phase.FinalInterview],
                    role=candidate.role,
                    skills=candidate.skills,
                    rationale=_closing_rationale(state),
                    company_name=company_name,
                    recruiter_name=recruiter_name,
                )
        except CollaboratorError as e:
            logger.warning(
                "closing email draft failed",
                extra={"candidate_id": str(candidate.candidate_id), "error": str(e)},
            )
            outcome.failed.append(candidate.candidate_id)
            continue

        stage = OfferExtended if offer is not None else Rejected
        if not _record_communication(candidate.candidate_id, stage, draft, now, session):
            logger.info(
                "candidate deleted before communication",
                extra={"candidate_id": str(candidate.candidate_id)},
            )
            continue
        (outcome.offers if offer is not None else outcome.rejections).append(candidate.candidate_id)

    logger.info(
        "drafted closing emails",
        extra={"offers": len(outcome.offers), "rejections": len(outcome.rejections), "failed": len(outcome.failed)},
    )
    return outcome


def _closing_rationale(state: GauntletState) -> str:
    review = state.final_review
    if review is None:
        return NoFinalReview
    concerns = "".join(f"\n- {c}" for c in review.concerns)
    return f"The final review recommended {review.recommendation.label}. {review.assessment}{concerns}"


def _record_communication(
    candidate_id: CandidateID,
    stage: str,
    draft: EmailDraft,
    now: datetime.datetime,
    session: Session,
) -> bool:
    with session.begin():
        try:
            candidate_storage.update(candidate_id, communication_sent=True, session=session)
        except KeyError:
            return False
        candidate_storage.append_log(
            candidate_id,
            [
                events.entry(
                    f"{events.EmailDrafted}: {stage}",
                    f"Subject: {draft['subject']}\n\n{draft['body']}",
                    timestamp=now,
                    author=LogAuthor.AI,
                )
            ],
            session=session,
        )
    return True
