"""Plain-text stage reports and the exportable grand report.

Stage reports are what the Phase-Judge reads; once stored in the snapshot
they are never rewritten. The grand report is assembled on demand from
whatever the snapshot holds, with a placeholder in every slot that has not
been filled yet.
"""

from __future__ import annotations

import typing as t

from gauntlet.lib.util import safe_filename_part
from gauntlet.model import GauntletState, JudgmentResult, TechnicalAnswer

NO_DATA = "No data."
NOT_COMPLETED = "Phase not completed."
NONE_MARKER = "None"

SECTIONS: t.Final[tuple[tuple[str, str, str, str, str], ...]] = (
    # heading, report field, review heading, review field, placeholder
    (
        "--- PHASE 1: TECHNICAL GAUNTLET ---",
        "technical_report",
        "--- BOSS AI VALIDATION (TECHNICAL) ---",
        "tech_review",
        NO_DATA,
    ),
    (
        "--- PHASE 2: SYSTEM DESIGN CHALLENGE ---",
        "system_design_report",
        "--- BOSS AI VALIDATION (SYSTEM DESIGN) ---",
        "design_review",
        NOT_COMPLETED,
    ),
    (
        "--- PHASE 3: FINAL INTERVIEW ---",
        "final_interview_report",
        "--- BOSS AI VALIDATION (FINAL INTERVIEW) ---",
        "final_review",
        NOT_COMPLETED,
    ),
)

END_OF_REPORT = "--- END OF REPORT ---"


def technical_report(answers: t.Sequence[TechnicalAnswer]) -> str:
    """One block per question, in the order they were asked."""
    blocks: list[str] = []
    for i, a in enumerate(answers, start=1):
        events = "\n".join(f"  {e}" for e in a.evidence.entries) or f"  {NONE_MARKER}"
        transcript = (a.evidence.ambient_transcript or "").strip() or NONE_MARKER
        blocks.append(
            "\n".join([
                f"QUESTION {i}: {a.question}",
                f"ANSWER:\n{a.answer}",
                f"SCORE: {a.result.score}/100 ({'PASS' if a.result.is_pass else 'FAIL'})",
                f"EVALUATION: {a.result.evaluation}",
                f"PROCTORING SUMMARY: {a.result.proctoring_summary or NONE_MARKER}",
                f"VISIBILITY EVENTS:\n{events}",
                f"AMBIENT TRANSCRIPT: {transcript}",
            ])
        )
    header = "PHASE REPORT: TECHNICAL"
    return "\n\n".join([header, *blocks])


def stage_report(title: str, question: str | None, answer: str) -> str:
    return f"PHASE REPORT: {title.upper()}\n\nQUESTION:\n{question or NONE_MARKER}\n\nANSWER:\n{answer}"


def review_section(review: JudgmentResult | None, placeholder: str) -> str:
    if review is None:
        return placeholder
    lines = [
        f"Recommendation: {review.recommendation.label}",
        f"Assessment: {review.assessment}",
    ]
    if review.strengths:
        lines.append("Strengths:")
        lines.extend(f"  - {s}" for s in review.strengths)
    if review.concerns:
        lines.append("Concerns:")
        lines.extend(f"  - {s}" for s in review.concerns)
    return "\n".join(lines)


def compile_grand_report(name: str, state: GauntletState | None) -> str:
    """Every section heading is always present, however far the candidate got."""
    state = state or GauntletState()
    parts = [f"GRAND REPORT FOR CANDIDATE: {name}"]
    for heading, report_field, review_heading, review_field, placeholder in SECTIONS:
        report = getattr(state, report_field)
        parts.append(f"{heading}\n{report or placeholder}")
        parts.append(f"{review_heading}\n{review_section(getattr(state, review_field), placeholder)}")
    parts.append(END_OF_REPORT)
    return "\n\n".join(parts)


def report_filename(name: str) -> str:
    return f"grand_report_{safe_filename_part(name)}.txt"
