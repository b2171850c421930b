from __future__ import annotations

import datetime
import typing as t

from gauntlet.model import BaseModel, Candidate, DeadlineStatus, GauntletState, Phase, Recommendation

from .deadline import compute_deadline

PROGRESS: t.Final[dict[Phase, int]] = {
    Phase.Complete: 100,
    Phase.Failed: 0,
    Phase.FinalInterview: 75,
    Phase.PendingFinalReview: 75,
    Phase.SystemDesign: 50,
    Phase.PendingDesignReview: 50,
    Phase.Technical: 10,
    Phase.PendingTechReview: 10,
}


def progress_for(phase: Phase) -> int:
    return PROGRESS.get(phase, 0)


class GauntletStatus(BaseModel):
    """Monitor summary for one candidate."""

    phase: Phase
    progress: int
    deadline: DeadlineStatus
    recommendation: Recommendation | None = None


def status_of(
    candidate: Candidate,
    now: datetime.datetime,
    *,
    state: GauntletState | None = None,
    window_days: int = 7,
    urgent_days: int = 3,
) -> GauntletStatus:
    """`state` overrides the stored snapshot, for candidates with a live session."""
    state = state or candidate.gauntlet_state or GauntletState()
    review = state.last_review
    return GauntletStatus(
        phase=state.phase,
        progress=progress_for(state.phase),
        deadline=compute_deadline(
            candidate.gauntlet_start_date, now, state.phase, window_days=window_days, urgent_days=urgent_days
        ),
        recommendation=review.recommendation if review else None,
    )
