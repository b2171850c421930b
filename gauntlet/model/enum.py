from __future__ import annotations

import enum


class DeploymentEnvironment(enum.Enum):
    Production = "production"
    Development = "development"
    Staging = "staging"
    Sandbox = "sandbox"
    Test = "test"
    Local = "local"


class LogAuthor(enum.Enum):
    AI = "AI"
    Admin = "Admin"
    System = "System"


class Phase(enum.Enum):
    Locked = "locked"
    Technical = "technical"
    PendingTechReview = "pending_tech_review"
    SystemDesign = "system_design"
    PendingDesignReview = "pending_design_review"
    FinalInterview = "final_interview"
    PendingFinalReview = "pending_final_review"
    Complete = "complete"
    Failed = "failed"


class Recommendation(enum.Enum):
    StrongHire = "strong_hire"
    ProceedWithCaution = "proceed_with_caution"
    DoNotHire = "do_not_hire"

    @property
    def label(self) -> str:
        return _RecommendationLabels[self]

    @property
    def is_passing(self) -> bool:
        return self in (Recommendation.StrongHire, Recommendation.ProceedWithCaution)

    @classmethod
    def from_label(cls, s: str) -> Recommendation:
        """Accept either the enum value or the human label, case-insensitively."""
        normalized = s.strip().lower().replace("-", " ").replace("_", " ")
        for rec in cls:
            if normalized in (rec.label.lower(), rec.value.replace("_", " ")):
                return rec
        raise ValueError(f"unknown recommendation: {s!r}")


_RecommendationLabels = {
    Recommendation.StrongHire: "Strong Hire",
    Recommendation.ProceedWithCaution: "Proceed with Caution",
    Recommendation.DoNotHire: "Do Not Hire",
}
