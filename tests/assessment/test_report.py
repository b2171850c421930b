"""Tests for gauntlet.assessment.report module."""

from __future__ import annotations

from gauntlet.assessment.report import compile_grand_report, END_OF_REPORT, report_filename, stage_report, \
    technical_report
from gauntlet.model import EvidenceEntry, GauntletState, Phase, ProctoringEvidence, Recommendation, TechnicalAnswer
from tests.conftest import judgment, proctor_result

from .conftest import START

HEADINGS = [
    "--- PHASE 1: TECHNICAL GAUNTLET ---",
    "--- BOSS AI VALIDATION (TECHNICAL) ---",
    "--- PHASE 2: SYSTEM DESIGN CHALLENGE ---",
    "--- BOSS AI VALIDATION (SYSTEM DESIGN) ---",
    "--- PHASE 3: FINAL INTERVIEW ---",
    "--- BOSS AI VALIDATION (FINAL INTERVIEW) ---",
]


def _answer(score: int, *, hidden: bool = False, transcript: str | None = None) -> TechnicalAnswer:
    entries = [EvidenceEntry(timestamp=START, description="User switched tabs or minimized the window.")]
    return TechnicalAnswer(
        question="How would you shard a hot table?",
        answer="By tenant, with a lookup service.",
        result=proctor_result(score),
        evidence=ProctoringEvidence(entries=entries if hidden else [], ambient_transcript=transcript),
    )


class TestTechnicalReport(object):
    def test_one_block_per_answer(self) -> None:
        report = technical_report([_answer(90), _answer(30, hidden=True, transcript="say sharding")])

        assert report.startswith("PHASE REPORT: TECHNICAL")
        assert "QUESTION 1: How would you shard a hot table?" in report
        assert "QUESTION 2: How would you shard a hot table?" in report
        assert "SCORE: 90/100 (PASS)" in report
        assert "SCORE: 30/100 (FAIL)" in report
        assert "User switched tabs or minimized the window." in report
        assert "AMBIENT TRANSCRIPT: say sharding" in report

    def test_missing_evidence_reads_none(self) -> None:
        report = technical_report([_answer(90)])

        assert "VISIBILITY EVENTS:\n  None" in report
        assert "AMBIENT TRANSCRIPT: None" in report


class TestStageReport(object):
    def test_stage_report(self) -> None:
        report = stage_report("System Design Challenge", "Design a queue.", "Use a log.")

        assert report == "PHASE REPORT: SYSTEM DESIGN CHALLENGE\n\nQUESTION:\nDesign a queue.\n\nANSWER:\nUse a log."


class TestGrandReport(object):
    def test_every_section_is_present_when_empty(self) -> None:
        report = compile_grand_report("Ada Lovelace", None)

        assert report.startswith("GRAND REPORT FOR CANDIDATE: Ada Lovelace")
        assert report.endswith(END_OF_REPORT)
        positions = [report.index(h) for h in HEADINGS]
        assert positions == sorted(positions)
        assert report.count("No data.") == 2
        assert report.count("Phase not completed.") == 4

    def test_failed_after_technical(self) -> None:
        state = GauntletState(
            phase=Phase.Failed,
            technical_report="PHASE REPORT: TECHNICAL\n\nQUESTION 1: ...",
            tech_review=judgment(Recommendation.DoNotHire, "Relied on memorized answers."),
            failed_stage=Phase.Technical,
        )

        report = compile_grand_report("Ada Lovelace", state)

        assert "PHASE REPORT: TECHNICAL" in report
        assert "Recommendation: Do Not Hire" in report
        assert "Assessment: Relied on memorized answers." in report
        assert "Concerns:\n  - Shallow design trade-offs" in report
        assert report.count("Phase not completed.") == 4
        assert "No data." not in report

    def test_complete(self) -> None:
        state = GauntletState(
            phase=Phase.Complete,
            technical_report="tech",
            tech_review=judgment(Recommendation.StrongHire),
            system_design_report="design",
            design_review=judgment(Recommendation.ProceedWithCaution),
            final_interview_report="final",
            final_review=judgment(Recommendation.StrongHire),
        )

        report = compile_grand_report("Ada Lovelace", state)

        assert "Phase not completed." not in report
        assert "Recommendation: Proceed with Caution" in report
        assert report.count("Recommendation: Strong Hire") == 2


class TestReportFilename(object):
    def test_name_is_made_safe(self) -> None:
        assert report_filename("Ada Lovelace") == "grand_report_Ada_Lovelace.txt"
        assert "/" not in report_filename("../../etc/passwd")
