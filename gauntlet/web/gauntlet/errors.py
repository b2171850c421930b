"""Map gauntlet errors onto HTTP responses."""

from __future__ import annotations

import typing as t

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from gauntlet.assessment.errors import CandidateNotFound, CollaboratorError, GateInFlight, GauntletError, \
    IllegalTransition, InvalidOperation, JudgeError, PermissionRequired
from gauntlet.core import get_logger

logger = get_logger()

# first match wins
StatusCodes: t.Final[tuple[tuple[type[GauntletError], int], ...]] = (
    (CandidateNotFound, status.HTTP_404_NOT_FOUND),
    (IllegalTransition, status.HTTP_409_CONFLICT),
    (InvalidOperation, status.HTTP_409_CONFLICT),
    (GateInFlight, status.HTTP_409_CONFLICT),
    (PermissionRequired, status.HTTP_412_PRECONDITION_FAILED),
    (JudgeError, status.HTTP_502_BAD_GATEWAY),
    (CollaboratorError, status.HTTP_502_BAD_GATEWAY),
)


def status_code_for(exc: GauntletError) -> int:
    for cls, code in StatusCodes:
        if isinstance(exc, cls):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def handle_gauntlet_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, GauntletError)
    code = status_code_for(exc)
    logger.info(
        "gauntlet request refused",
        extra={"path": request.url.path, "error": type(exc).__name__, "status": code, "detail": str(exc)},
    )
    return JSONResponse(
        status_code=code,
        content={
            "detail": str(exc),
            "error": type(exc).__name__,
            # judge and collaborator failures leave the state as it was; the same request can be repeated
            "retryable": isinstance(exc, (JudgeError, CollaboratorError, GateInFlight)),
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GauntletError, handle_gauntlet_error)
