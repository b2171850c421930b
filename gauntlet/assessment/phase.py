"""Phase ordering and the transition table.

Forward order is Locked → Technical → PendingTechReview → SystemDesign →
PendingDesignReview → FinalInterview → PendingFinalReview → Complete. Failed
is reachable from every non-terminal phase. A pending-review phase may also
fall back to the stage it shadows when its gate call fails, so the candidate
can resubmit.

The table is checked against those rules when this module is imported.
"""

from __future__ import annotations

import typing as t

from gauntlet.model import Phase

from .errors import IllegalTransition

FORWARD_ORDER: t.Final[tuple[Phase, ...]] = (
    Phase.Locked,
    Phase.Technical,
    Phase.PendingTechReview,
    Phase.SystemDesign,
    Phase.PendingDesignReview,
    Phase.FinalInterview,
    Phase.PendingFinalReview,
    Phase.Complete,
)

TERMINAL: t.Final[frozenset[Phase]] = frozenset({Phase.Complete, Phase.Failed})

# stages that take answers, and the pending-review phase each one feeds
STAGES: t.Final[dict[Phase, Phase]] = {
    Phase.Technical: Phase.PendingTechReview,
    Phase.SystemDesign: Phase.PendingDesignReview,
    Phase.FinalInterview: Phase.PendingFinalReview,
}

TRANSITIONS: t.Final[dict[Phase, frozenset[Phase]]] = {
    Phase.Locked: frozenset({Phase.Technical, Phase.Failed}),
    # Technical → Technical is the move to the next question
    Phase.Technical: frozenset({Phase.Technical, Phase.PendingTechReview, Phase.Failed}),
    Phase.PendingTechReview: frozenset({Phase.SystemDesign, Phase.Technical, Phase.Failed}),
    Phase.SystemDesign: frozenset({Phase.PendingDesignReview, Phase.Failed}),
    Phase.PendingDesignReview: frozenset({Phase.FinalInterview, Phase.SystemDesign, Phase.Failed}),
    Phase.FinalInterview: frozenset({Phase.PendingFinalReview, Phase.Failed}),
    Phase.PendingFinalReview: frozenset({Phase.Complete, Phase.FinalInterview, Phase.Failed}),
    Phase.Complete: frozenset(),
    Phase.Failed: frozenset(),
}


class ReviewGate(t.NamedTuple):
    """What a pending-review phase reads, writes, and where it goes."""

    stage: Phase
    report_field: str
    review_field: str
    advance_to: Phase


GATES: t.Final[dict[Phase, ReviewGate]] = {
    Phase.PendingTechReview: ReviewGate(Phase.Technical, "technical_report", "tech_review", Phase.SystemDesign),
    Phase.PendingDesignReview: ReviewGate(
        Phase.SystemDesign, "system_design_report", "design_review", Phase.FinalInterview
    ),
    Phase.PendingFinalReview: ReviewGate(
        Phase.FinalInterview, "final_interview_report", "final_review", Phase.Complete
    ),
}

STAGE_NAMES: t.Final[dict[Phase, str]] = {
    Phase.Technical: "Technical Gauntlet",
    Phase.SystemDesign: "System Design Challenge",
    Phase.FinalInterview: "Final Interview",
}


def predecessor(phase: Phase) -> Phase | None:
    """The phase immediately before `phase` in forward order."""
    if phase not in FORWARD_ORDER:
        return None
    i = FORWARD_ORDER.index(phase)
    return FORWARD_ORDER[i - 1] if i > 0 else None


def successor(phase: Phase) -> Phase | None:
    if phase not in FORWARD_ORDER:
        return None
    i = FORWARD_ORDER.index(phase)
    return FORWARD_ORDER[i + 1] if i + 1 < len(FORWARD_ORDER) else None


def is_terminal(phase: Phase) -> bool:
    return phase in TERMINAL


def is_pending(phase: Phase) -> bool:
    return phase in GATES


def stage_of(phase: Phase) -> Phase | None:
    """The answer-taking stage a phase belongs to (a pending phase maps to the stage it reviews)."""
    if phase in STAGES:
        return phase
    if phase in GATES:
        return GATES[phase].stage
    return None


def can_transition(source: Phase, target: Phase) -> bool:
    return target in TRANSITIONS[source]


def check_transition(source: Phase, target: Phase) -> None:
    """
    Raises:
        IllegalTransition: if the table does not allow source → target
    """
    if not can_transition(source, target):
        raise IllegalTransition(source, target)


def _validate_table() -> None:
    assert set(TRANSITIONS) == set(Phase), "every phase needs a row"
    for source, targets in TRANSITIONS.items():
        if source in TERMINAL:
            assert not targets, f"{source} is terminal"
            continue
        assert Phase.Failed in targets, f"{source} must be able to fail"
        for target in targets - {Phase.Failed}:
            if target == successor(source):
                continue
            if target == source and source in STAGES:
                continue
            if source in GATES and target == GATES[source].stage:
                continue
            raise AssertionError(f"{source} -> {target} skips or reverses the forward order")
    for pending, gate in GATES.items():
        assert STAGES[gate.stage] == pending
        assert gate.advance_to == successor(pending)


_validate_table()
