"""Authentication dependencies for FastAPI routes."""

from __future__ import annotations

import typing as t

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gauntlet.model import CandidateID

from . import jwt as jwt_auth
from .jwt import Role, TokenData

# Security scheme for JWT bearer tokens
bearer_scheme = HTTPBearer(auto_error=False)


class AuthContext(t.NamedTuple):
    role: Role
    token_data: TokenData

    @property
    def candidate_id(self) -> CandidateID | None:
        if self.role is not Role.Candidate:
            return None
        try:
            return CandidateID(self.token_data.subject)
        except ValueError:
            return None


def get_current_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthContext:
    """
    Raises:
        HTTPException 401: If no token provided or token is invalid
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = jwt_auth.decode_token(credentials.credentials)
    if token_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthContext(role=token_data.role, token_data=token_data)


def require_admin(auth: AuthContext = Depends(get_current_auth)) -> AuthContext:
    if auth.role is not Role.Admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role '{auth.role.value}' not authorized for this resource",
        )
    return auth


def require_candidate(candidate_id: CandidateID, auth: AuthContext = Depends(get_current_auth)) -> AuthContext:
    """The bearer must be the candidate named in the path.

    A token only proves identity for the candidate ID it was issued for.
    """
    if auth.role is not Role.Candidate or auth.candidate_id != candidate_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token is not valid for this candidate",
        )
    return auth
