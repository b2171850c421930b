"""View models for the gauntlet web application."""

__all__ = [
    # Auth views
    "AdminLoginRequest",
    "AdminLoginResponse",
    "CandidateLoginRequest",
    "CandidateLoginResponse",
    "TokenResponse",
    # Candidate portal views
    "AnswerRequest",
    "EvidenceAcceptedResponse",
    "GauntletResponse",
    "PermissionRequest",
    "TranscriptRequest",
    "VisibilityRequest",
    # Admin views
    "CandidateCreateRequest",
    "CandidateListResponse",
    "CandidateLogResponse",
    "CandidateResponse",
]

from .admin import CandidateCreateRequest, CandidateListResponse, CandidateLogResponse, CandidateResponse
from .auth import AdminLoginRequest, AdminLoginResponse, CandidateLoginRequest, CandidateLoginResponse, TokenResponse
from .gauntlet import AnswerRequest, EvidenceAcceptedResponse, GauntletResponse, PermissionRequest, \
    TranscriptRequest, VisibilityRequest
