"""LLM-backed judges and collaborators."""

__all__ = [
    "Collaborators",
    "EmailDraft",
    "EvaluatorClient",
    "SkillGap",
]

from .collaborator import Collaborators, EmailDraft, SkillGap
from .judge import EvaluatorClient
