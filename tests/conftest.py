"""Pytest fixtures for gauntlet integration tests.

This module provides fixtures for testing storage and API endpoints with a
real database connection. The Test environment runs on an in-memory sqlite
database; each test runs within a transaction that is rolled back afterwards,
so tests stay isolated without a separate database per test.

The judges and collaborators are replaced by `AsyncMock`s, so no test ever
reaches an LLM vendor.

Usage:
    def test_open_gauntlet(client: TestClient, admin_headers: dict[str, str], candidate_factory):
        candidate = candidate_factory()
        response = client.post(f"/api/admin/candidates/{candidate.candidate_id}/gauntlet", headers=admin_headers)
        assert response.status_code == 200
"""

from __future__ import annotations

import datetime
import os
import typing as t
from pathlib import Path
from unittest.mock import AsyncMock

import pydantic as p
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import gauntlet
from gauntlet.core import GauntletContainer, TimestampProvider
from gauntlet.llm import Collaborators, EvaluatorClient
from gauntlet.model import Candidate, DeploymentEnvironment, GauntletState, JudgmentResult, ProctorResult, \
    Recommendation
from gauntlet.storage import candidate as candidate_storage
from gauntlet.storage.table import metadata

ACCESS_CODE = "letmein"
ADMIN_CODE = "root-of-trust"


@pytest.fixture(scope="session")
def container() -> t.Generator[GauntletContainer]:
    """Boot the DI container for the test session.

    Uses the Test environment, whose configuration lives in
    config/env.d/test: in-memory sqlite, no debounce on writes and fixed
    access codes.
    """
    ct = GauntletContainer()
    root = Path(os.path.dirname(gauntlet.__file__)).parent

    GauntletContainer.boot(
        ct,
        debug=True,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )
    metadata.create_all(ct.storage().persistent().engine())

    yield ct

    ct.shutdown_resources()


@pytest.fixture(scope="session")
def app(container: GauntletContainer) -> FastAPI:
    """Create the FastAPI application for testing."""
    from gauntlet.core.config import GauntletWebSettings
    from gauntlet.web.gauntlet.main import _create_app  # pyright: ignore[reportPrivateUsage]

    return _create_app(
        config=GauntletWebSettings(**container.config.web.gauntlet()),
        env=DeploymentEnvironment.Test,
        root_path=t.cast(Path, container.root()),
    )


@pytest.fixture
def db_session(container: GauntletContainer) -> t.Generator[Session]:
    """Provide a database session wrapped in a transaction.

    Uses join_transaction_mode="create_savepoint" so that session.begin()
    creates savepoints instead of failing when already in a transaction.
    This allows production code using session.begin() to work correctly
    while still enabling rollback at test end.
    """
    engine = container.storage().persistent().engine()

    # Start outer transaction on connection - this will be rolled back
    connection = engine.connect()
    transaction = connection.begin()

    session = Session(
        bind=connection,
        autobegin=False,
        join_transaction_mode="create_savepoint",
    )

    yield session

    session.close()
    transaction.rollback()
    connection.close()


def proctor_result(score: int, *, summary: str = "No integrity concerns.") -> ProctorResult:
    return ProctorResult(evaluation=f"Scored {score}.", score=score, proctoring_summary=summary, is_pass=score >= 70)


def judgment(recommendation: Recommendation, assessment: str = "Solid reasoning throughout.") -> JudgmentResult:
    return JudgmentResult(
        recommendation=recommendation,
        assessment=assessment,
        strengths=["Clear communication"],
        concerns=[] if recommendation.is_passing else ["Shallow design trade-offs"],
    )


@pytest.fixture
def evaluator() -> AsyncMock:
    """A judge that passes everything unless a test says otherwise."""
    mock = AsyncMock(spec=EvaluatorClient)
    mock.proctor_answer.return_value = proctor_result(90)
    mock.review_stage.return_value = judgment(Recommendation.StrongHire)
    return mock


@pytest.fixture
def collaborators() -> AsyncMock:
    mock = AsyncMock(spec=Collaborators)
    mock.generate_technical_questions.side_effect = lambda *, count, **_: [
        f"Technical question {i}?" for i in range(1, count + 1)
    ]
    mock.generate_system_design_question.return_value = "Design a URL shortener for a billion links."
    mock.draft_rejection.return_value = {"subject": "Your application", "body": "Thank you for your time."}
    mock.analyze_skill_gaps.return_value = [{"skill": "Distributed systems", "suggestion": "Read DDIA."}]
    return mock


@pytest.fixture
def client(
    app: FastAPI,
    container: GauntletContainer,
    db_session: Session,
    evaluator: AsyncMock,
    collaborators: AsyncMock,
) -> t.Generator[TestClient]:
    """Provide a TestClient with database session and judge overrides.

    The session registry is rebuilt for every test so that live sessions
    never leak between tests.
    """
    assessment = container.assessment()
    container.storage().persistent().session.override(db_session)
    assessment.evaluator.override(evaluator)
    assessment.collaborators.override(collaborators)
    assessment.registry.reset()

    with TestClient(app) as test_client:
        yield test_client

    assessment.registry.reset()
    assessment.collaborators.reset_override()
    assessment.evaluator.reset_override()
    container.storage().persistent().session.reset_override()


@pytest.fixture
def utcnow() -> TimestampProvider:
    """Provide a timestamp provider for tests."""
    return lambda: datetime.datetime.now(datetime.UTC)


@pytest.fixture
def candidate_factory(db_session: Session) -> t.Callable[..., Candidate]:
    """Factory fixture for creating test candidates.

    Created candidates are automatically cleaned up via transaction rollback.

    Usage:
        def test_something(candidate_factory):
            candidate = candidate_factory(name="Ada Lovelace", started_at=now)
    """

    def create_candidate(
        name: str = "Ada Lovelace",
        role: str = "Senior Backend Engineer",
        skills: list[str] | None = None,
        ai_initial_score: int | None = 85,
        started_at: datetime.datetime | None = None,
        state: GauntletState | None = None,
        archived: bool = False,
    ) -> Candidate:
        with db_session.begin():
            obj = candidate_storage.create(
                name=name,
                role=role,
                role_description="Builds and operates the payments platform.",
                skills=skills if skills is not None else ["Python", "PostgreSQL"],
                narrative="Ten years of backend work.",
                ai_initial_score=ai_initial_score,
                session=db_session,
            )
            if started_at is not None or state is not None:
                candidate_storage.write_gauntlet_state(obj.candidate_id, state or GauntletState(), session=db_session)
            obj = candidate_storage.update(
                obj.candidate_id, archived=archived, gauntlet_start_date=started_at, session=db_session
            )
        return obj

    return create_candidate


def login_candidate(client: TestClient, candidate: Candidate) -> dict[str, str]:
    response = client.post(
        "/api/gauntlet/login",
        json={"candidate_id": str(candidate.candidate_id), "access_code": ACCESS_CODE},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']['access_token']}"}


@pytest.fixture
def admin_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/api/admin/login", json={"admin_code": ADMIN_CODE})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']['access_token']}"}
