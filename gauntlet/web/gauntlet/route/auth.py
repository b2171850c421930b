"""Session gate routes."""

from __future__ import annotations

import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gauntlet.auth import gate, jwt
from gauntlet.auth.jwt import Role
from gauntlet.core import di, get_logger
from gauntlet.storage import candidate as candidate_storage

from ..view.auth import AdminLoginRequest, AdminLoginResponse, CandidateLoginRequest, CandidateLoginResponse, \
    TokenResponse

router = APIRouter(tags=["auth"])
logger = get_logger()


@router.post("/api/gauntlet/login", operation_id="candidate_login")
@di.inject
def candidate_login(
    request: CandidateLoginRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    expire_minutes: int = Depends(di.Provide["config.web.gauntlet.auth.access_token_expire_minutes"]),
) -> CandidateLoginResponse:
    """Exchange a candidate ID and the shared access code for a token scoped to that candidate."""
    if not gate.check_access_code(request.access_code):
        logger.info("rejected candidate login", extra={"candidate_id": str(request.candidate_id)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid candidate ID or access code",
            headers={"WWW-Authenticate": "Bearer"},
        )

    with session.begin():
        candidate = candidate_storage.get(request.candidate_id, session=session)
    if candidate is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid candidate ID or access code",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if candidate.gauntlet_start_date is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="The gauntlet has not been opened for this candidate",
        )

    expires_at = datetime.datetime.now(datetime.UTC) + datetime.timedelta(minutes=expire_minutes)
    return CandidateLoginResponse(
        candidate_id=candidate.candidate_id,
        name=candidate.name,
        token=TokenResponse(
            access_token=jwt.create_access_token(str(candidate.candidate_id), Role.Candidate),
            expires_at=expires_at,
        ),
    )


@router.post("/api/admin/login", operation_id="admin_login")
@di.inject
def admin_login(
    request: AdminLoginRequest,
    expire_minutes: int = Depends(di.Provide["config.web.gauntlet.auth.access_token_expire_minutes"]),
) -> AdminLoginResponse:
    if not gate.check_admin_code(request.admin_code):
        logger.info("rejected admin login")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin code",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expires_at = datetime.datetime.now(datetime.UTC) + datetime.timedelta(minutes=expire_minutes)
    return AdminLoginResponse(
        token=TokenResponse(
            access_token=jwt.create_access_token("admin", Role.Admin),
            expires_at=expires_at,
        )
    )
