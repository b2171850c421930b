"""Candidate portal routes.

Every route acts on the live session held by the `SessionRegistry` and waits
for the resulting writes before answering, so the response reflects what was
saved.
"""

from __future__ import annotations

import typing as t

from fastapi import APIRouter, Depends

from gauntlet.assessment.controller import PhaseController
from gauntlet.assessment.deadline import compute_deadline
from gauntlet.assessment.registry import LiveSession, SessionRegistry
from gauntlet.assessment.status import progress_for
from gauntlet.auth import AuthContext, require_candidate
from gauntlet.core import di, TimestampProvider
from gauntlet.core.config import GauntletSettings
from gauntlet.model import CandidateID, Phase

from ..view.gauntlet import AnswerRequest, EvidenceAcceptedResponse, GauntletResponse, PermissionRequest, \
    TranscriptRequest, VisibilityRequest

router = APIRouter(prefix="/api/gauntlet", tags=["gauntlet"])


@di.inject
def _respond(
    live: LiveSession,
    settings: GauntletSettings = di.Provide["config.gauntlet", di.as_(GauntletSettings)],
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> GauntletResponse:
    phase = live.controller.state.phase
    deadline = compute_deadline(
        live.candidate.gauntlet_start_date,
        utcnow(),
        phase,
        window_days=settings.window_days,
        urgent_days=settings.urgent_days,
    )
    return GauntletResponse.from_controller(live.controller, progress=progress_for(phase), deadline=deadline)


async def _settle(registry: SessionRegistry, live: LiveSession, operation: t.Awaitable[t.Any]) -> GauntletResponse:
    """Run a controller operation and wait for its writes, whether or not it succeeds."""
    try:
        await operation
    finally:
        await live.controller.gateway.flush()
    response = _respond(live)
    await registry.release(live.candidate.candidate_id)
    return response


@router.get("/{candidate_id}", operation_id="get_gauntlet")
@di.inject
async def get_gauntlet(
    candidate_id: CandidateID,
    auth: AuthContext = Depends(require_candidate),
    registry: SessionRegistry = Depends(di.Provide["assessment.registry"]),
) -> GauntletResponse:
    live = await registry.checkout(candidate_id)
    return _respond(live)


@router.post("/{candidate_id}/phases/{phase}/start", operation_id="start_phase")
@di.inject
async def start_phase(
    candidate_id: CandidateID,
    phase: Phase,
    auth: AuthContext = Depends(require_candidate),
    registry: SessionRegistry = Depends(di.Provide["assessment.registry"]),
) -> GauntletResponse:
    live = await registry.checkout(candidate_id)
    return await _settle(registry, live, live.controller.start_phase(phase))


@router.post("/{candidate_id}/answers", operation_id="submit_answer")
@di.inject
async def submit_answer(
    candidate_id: CandidateID,
    request: AnswerRequest,
    auth: AuthContext = Depends(require_candidate),
    registry: SessionRegistry = Depends(di.Provide["assessment.registry"]),
) -> GauntletResponse:
    live = await registry.checkout(candidate_id)
    return await _settle(registry, live, live.controller.submit_answer(request.answer))


@router.post("/{candidate_id}/resume", operation_id="resume_gauntlet")
@di.inject
async def resume(
    candidate_id: CandidateID,
    auth: AuthContext = Depends(require_candidate),
    registry: SessionRegistry = Depends(di.Provide["assessment.registry"]),
) -> GauntletResponse:
    live = await registry.checkout(candidate_id)
    return await _settle(registry, live, live.controller.resume())


@router.post("/{candidate_id}/evidence/visibility", operation_id="report_visibility")
@di.inject
async def report_visibility(
    candidate_id: CandidateID,
    request: VisibilityRequest,
    auth: AuthContext = Depends(require_candidate),
    registry: SessionRegistry = Depends(di.Provide["assessment.registry"]),
) -> EvidenceAcceptedResponse:
    controller = await registry.get_or_load(candidate_id)
    controller.report_visibility(request.state)
    return EvidenceAcceptedResponse(recording=_recording(controller))


@router.post("/{candidate_id}/evidence/transcript", operation_id="report_transcript")
@di.inject
async def report_transcript(
    candidate_id: CandidateID,
    request: TranscriptRequest,
    auth: AuthContext = Depends(require_candidate),
    registry: SessionRegistry = Depends(di.Provide["assessment.registry"]),
) -> EvidenceAcceptedResponse:
    controller = await registry.get_or_load(candidate_id)
    controller.report_transcript(request.text, final=request.final)
    return EvidenceAcceptedResponse(recording=_recording(controller))


@router.post("/{candidate_id}/evidence/permission", operation_id="report_permission")
@di.inject
async def report_permission(
    candidate_id: CandidateID,
    request: PermissionRequest,
    auth: AuthContext = Depends(require_candidate),
    registry: SessionRegistry = Depends(di.Provide["assessment.registry"]),
) -> EvidenceAcceptedResponse:
    controller = await registry.get_or_load(candidate_id)
    controller.report_permission(request.granted)
    return EvidenceAcceptedResponse(recording=_recording(controller))


def _recording(controller: PhaseController) -> bool:
    monitor = controller.monitor
    return monitor is not None and not monitor.closed
