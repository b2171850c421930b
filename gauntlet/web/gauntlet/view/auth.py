"""View models for the session gate."""

from __future__ import annotations

import datetime

from gauntlet.model import BaseModel, CandidateID


class CandidateLoginRequest(BaseModel):
    candidate_id: CandidateID
    access_code: str


class AdminLoginRequest(BaseModel):
    admin_code: str


class TokenResponse(BaseModel):
    """Response containing access token."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime.datetime


class CandidateLoginResponse(BaseModel):
    candidate_id: CandidateID
    name: str
    token: TokenResponse


class AdminLoginResponse(BaseModel):
    token: TokenResponse
