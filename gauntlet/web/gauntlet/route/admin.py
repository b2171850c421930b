"""Admin monitor routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from gauntlet.assessment import records
from gauntlet.assessment.phase import is_terminal
from gauntlet.assessment.registry import SessionRegistry
from gauntlet.assessment.report import compile_grand_report, report_filename
from gauntlet.assessment.status import status_of
from gauntlet.auth import AuthContext, require_admin
from gauntlet.core import di, get_logger, TimestampProvider
from gauntlet.core.config import GauntletSettings
from gauntlet.llm import Collaborators
from gauntlet.model import CandidateID, Phase
from gauntlet.storage import candidate as candidate_storage

from ..view.admin import (
    CandidateCreateRequest,
    CandidateListResponse,
    CandidateLogResponse,
    CandidateResponse,
    CommunicationsResponse,
)

router = APIRouter(prefix="/api/admin/candidates", tags=["admin"])
communications_router = APIRouter(prefix="/api/admin/communications", tags=["admin"])
logger = get_logger()


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Candidate not found")


@router.get("", operation_id="list_candidates")
@di.inject
def list_candidates(
    include_all: bool = Query(False, alias="all", description="List every candidate, not just the monitored ones"),
    auth: AuthContext = Depends(require_admin),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    settings: GauntletSettings = Depends(di.Provide["config.gauntlet", di.as_(GauntletSettings)]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> CandidateListResponse:
    """The gauntlet monitor: active candidates above the screening threshold."""
    with session.begin():
        if include_all:
            candidates = candidate_storage.find(session=session)
        else:
            candidates = candidate_storage.find(
                archived=False, min_score=settings.monitor_min_score, session=session
            )

    now = utcnow()
    return CandidateListResponse(
        candidates=[
            CandidateResponse.from_candidate(
                c,
                status_of(c, now, window_days=settings.window_days, urgent_days=settings.urgent_days),
            )
            for c in candidates
        ],
        total=len(candidates),
    )


@router.post("", operation_id="create_candidate", status_code=status.HTTP_201_CREATED)
@di.inject
def create_candidate(
    request: CandidateCreateRequest,
    auth: AuthContext = Depends(require_admin),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> CandidateResponse:
    with session.begin():
        candidate = candidate_storage.create(
            name=request.name,
            role=request.role,
            role_description=request.role_description,
            skills=request.skills,
            narrative=request.narrative,
            ai_initial_score=request.ai_initial_score,
            session=session,
        )
    logger.info("created candidate", extra={"candidate_id": str(candidate.candidate_id)})
    return CandidateResponse.from_candidate(candidate)


@router.post("/{candidate_id}/gauntlet", operation_id="open_gauntlet")
@di.inject
def open_gauntlet(
    candidate_id: CandidateID,
    auth: AuthContext = Depends(require_admin),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> CandidateResponse:
    """Open the gauntlet for a candidate; the assessment window starts now."""
    with session.begin():
        candidate = records.open_gauntlet(candidate_id, utcnow(), session=session)

    logger.info("opened gauntlet", extra={"candidate_id": str(candidate_id)})
    return CandidateResponse.from_candidate(candidate)


@router.post("/{candidate_id}/archive", operation_id="archive_candidate")
@di.inject
def archive_candidate(
    candidate_id: CandidateID,
    auth: AuthContext = Depends(require_admin),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> CandidateResponse:
    with session.begin():
        candidate = records.archive(candidate_id, utcnow(), session=session)
    return CandidateResponse.from_candidate(candidate)


@router.delete("/{candidate_id}", operation_id="delete_candidate", status_code=status.HTTP_204_NO_CONTENT)
@di.inject
async def delete_candidate(
    candidate_id: CandidateID,
    auth: AuthContext = Depends(require_admin),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    registry: SessionRegistry = Depends(di.Provide["assessment.registry"]),
) -> None:
    """Delete a candidate record.

    A candidate session still running elsewhere finds the record gone on its
    next write or read and ends quietly.
    """
    with session.begin():
        deleted = candidate_storage.delete(candidate_id, session=session)
    if not deleted:
        raise _not_found()
    await registry.drop(candidate_id)
    logger.info("deleted candidate", extra={"candidate_id": str(candidate_id)})


@router.get("/{candidate_id}/log", operation_id="get_candidate_log")
@di.inject
def get_candidate_log(
    candidate_id: CandidateID,
    auth: AuthContext = Depends(require_admin),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> CandidateLogResponse:
    with session.begin():
        candidate = candidate_storage.get(candidate_id, session=session)
    if candidate is None:
        raise _not_found()
    return CandidateLogResponse(candidate_id=candidate_id, entries=candidate.log)


@router.get("/{candidate_id}/report", operation_id="download_report", response_class=PlainTextResponse)
@di.inject
def download_report(
    candidate_id: CandidateID,
    auth: AuthContext = Depends(require_admin),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> PlainTextResponse:
    """The grand report as a text file, once the candidate has finished or failed."""
    with session.begin():
        candidate = candidate_storage.get(candidate_id, session=session)
    if candidate is None:
        raise _not_found()

    phase = candidate.gauntlet_state.phase if candidate.gauntlet_state else Phase.Locked
    if not is_terminal(phase):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"The report is available once the gauntlet is over (currently {phase.value})",
        )

    return PlainTextResponse(
        compile_grand_report(candidate.name, candidate.gauntlet_state),
        headers={"Content-Disposition": f'attachment; filename="{report_filename(candidate.name)}"'},
    )


@communications_router.post("", operation_id="send_communications")
@di.inject
async def send_communications(
    auth: AuthContext = Depends(require_admin),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    collaborators: Collaborators = Depends(di.Provide["assessment.collaborators"]),
    settings: GauntletSettings = Depends(di.Provide["config.gauntlet", di.as_(GauntletSettings)]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> CommunicationsResponse:
    """Draft closing emails for every candidate who completed the gauntlet and has not heard back."""
    outcome = await records.send_communications(
        collaborators,
        utcnow(),
        company_name=settings.company_name,
        recruiter_name=settings.recruiter_name,
        session=session,
    )
    return CommunicationsResponse(
        offers=outcome.offers,
        rejections=outcome.rejections,
        failed=outcome.failed,
        sent=outcome.sent,
    )
