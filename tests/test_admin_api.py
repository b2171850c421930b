"""Tests for admin monitor API endpoints."""

from __future__ import annotations

import datetime
import typing as t
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from gauntlet.assessment import events
from gauntlet.core import TimestampProvider
from gauntlet.model import Candidate, CandidateID, GauntletState, LogAuthor, Phase, Recommendation
from gauntlet.storage import candidate as candidate_storage
from tests.conftest import judgment


class TestListCandidates:
    """Tests for GET /api/admin/candidates."""

    def test_monitor_shows_active_screened_candidates(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
        utcnow: TimestampProvider,
    ) -> None:
        active = candidate_factory(name="Active", started_at=utcnow())
        candidate_factory(name="Below threshold", ai_initial_score=55)
        candidate_factory(name="Archived", archived=True)

        response = client.get("/api/admin/candidates", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        (row,) = data["candidates"]
        assert row["candidate_id"] == str(active.candidate_id)
        assert row["status"]["phase"] == "locked"
        assert row["status"]["progress"] == 0
        assert row["status"]["deadline"]["label"] == "7 days left"

    def test_all(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
    ) -> None:
        candidate_factory(name="Below threshold", ai_initial_score=55)
        candidate_factory(name="Archived", archived=True)

        response = client.get("/api/admin/candidates", params={"all": True}, headers=admin_headers)

        assert response.json()["total"] == 2

    def test_status_reflects_progress_and_deadline(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
        utcnow: TimestampProvider,
    ) -> None:
        """A candidate five days in, past the technical review."""
        state = GauntletState(
            phase=Phase.SystemDesign,
            technical_report="report",
            tech_review=judgment(Recommendation.ProceedWithCaution),
        )
        candidate_factory(started_at=utcnow() - datetime.timedelta(days=5), state=state)

        (row,) = client.get("/api/admin/candidates", headers=admin_headers).json()["candidates"]

        assert row["status"]["phase"] == "system_design"
        assert row["status"]["progress"] == 50
        assert row["status"]["deadline"] == {"label": "2 days left", "is_urgent": True, "is_expired": False}
        assert row["status"]["recommendation"] == "proceed_with_caution"

    def test_expired_deadline(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
        utcnow: TimestampProvider,
    ) -> None:
        candidate_factory(started_at=utcnow() - datetime.timedelta(days=8), state=GauntletState(phase=Phase.Technical))

        (row,) = client.get("/api/admin/candidates", headers=admin_headers).json()["candidates"]

        assert row["status"]["deadline"]["label"] == "Expired"
        assert row["status"]["deadline"]["is_expired"] is True


class TestCreateCandidate:
    """Tests for POST /api/admin/candidates."""

    def test_create(self, client: TestClient, admin_headers: dict[str, str], db_session: Session) -> None:
        response = client.post(
            "/api/admin/candidates",
            json={
                "name": "Grace Hopper",
                "role": "Staff Engineer",
                "skills": ["COBOL"],
                "ai_initial_score": 91,
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Grace Hopper"
        assert data["gauntlet_start_date"] is None

        with db_session.begin():
            stored = candidate_storage.get(CandidateID(data["candidate_id"]), session=db_session)
        assert stored is not None
        assert stored.skills == ["COBOL"]

    def test_score_out_of_range_returns_422(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.post(
            "/api/admin/candidates",
            json={"name": "Grace Hopper", "role": "Staff Engineer", "ai_initial_score": 101},
            headers=admin_headers,
        )

        assert response.status_code == 422


class TestOpenGauntlet:
    """Tests for POST /api/admin/candidates/{candidate_id}/gauntlet."""

    def test_open(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
    ) -> None:
        candidate = candidate_factory()

        response = client.post(f"/api/admin/candidates/{candidate.candidate_id}/gauntlet", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["gauntlet_start_date"] is not None

    def test_open_twice_returns_409(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
        utcnow: TimestampProvider,
    ) -> None:
        candidate = candidate_factory(started_at=utcnow())

        response = client.post(f"/api/admin/candidates/{candidate.candidate_id}/gauntlet", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "InvalidOperation"

    def test_open_missing_returns_404(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.post(f"/api/admin/candidates/{CandidateID()}/gauntlet", headers=admin_headers)

        assert response.status_code == 404


class TestArchiveAndDelete:
    def test_archive_is_logged(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
    ) -> None:
        candidate = candidate_factory()

        response = client.post(f"/api/admin/candidates/{candidate.candidate_id}/archive", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["archived"] is True

        response = client.get(f"/api/admin/candidates/{candidate.candidate_id}/log", headers=admin_headers)
        assert response.status_code == 200
        (entry,) = response.json()["entries"]
        assert entry["event"] == events.CandidateArchived
        assert entry["author"] == LogAuthor.Admin.value

    def test_archive_missing_returns_404(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.post(f"/api/admin/candidates/{CandidateID()}/archive", headers=admin_headers)

        assert response.status_code == 404

    def test_delete(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
    ) -> None:
        candidate = candidate_factory()

        response = client.delete(f"/api/admin/candidates/{candidate.candidate_id}", headers=admin_headers)
        assert response.status_code == 204

        response = client.delete(f"/api/admin/candidates/{candidate.candidate_id}", headers=admin_headers)
        assert response.status_code == 404

    def test_log_missing_returns_404(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.get(f"/api/admin/candidates/{CandidateID()}/log", headers=admin_headers)

        assert response.status_code == 404


class TestDownloadReport:
    """Tests for GET /api/admin/candidates/{candidate_id}/report."""

    def test_report_after_completion(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
        utcnow: TimestampProvider,
    ) -> None:
        state = GauntletState(
            phase=Phase.Complete,
            technical_report="Technical stage report.",
            tech_review=judgment(Recommendation.StrongHire),
            system_design_report="Design stage report.",
            design_review=judgment(Recommendation.StrongHire),
            final_interview_report="Final stage report.",
            final_review=judgment(Recommendation.ProceedWithCaution),
        )
        candidate = candidate_factory(name="Ada Lovelace", started_at=utcnow(), state=state)

        response = client.get(f"/api/admin/candidates/{candidate.candidate_id}/report", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'filename="grand_report_Ada_Lovelace.txt"' in response.headers["content-disposition"]
        assert response.text.startswith("GRAND REPORT FOR CANDIDATE: Ada Lovelace")
        assert "Design stage report." in response.text

    def test_report_before_the_end_returns_409(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
        utcnow: TimestampProvider,
    ) -> None:
        candidate = candidate_factory(started_at=utcnow(), state=GauntletState(phase=Phase.Technical))

        response = client.get(f"/api/admin/candidates/{candidate.candidate_id}/report", headers=admin_headers)

        assert response.status_code == 409


class TestSendCommunications:
    """Tests for POST /api/admin/communications."""

    def test_drafts_closing_emails_once(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        candidate_factory: t.Callable[..., Candidate],
        collaborators: AsyncMock,
        db_session: Session,
        utcnow: TimestampProvider,
    ) -> None:
        collaborators.draft_offer.return_value = {"subject": "An offer", "body": "Welcome aboard."}
        state = GauntletState(
            phase=Phase.Complete,
            technical_report="Technical stage report.",
            tech_review=judgment(Recommendation.StrongHire),
            system_design_report="Design stage report.",
            design_review=judgment(Recommendation.StrongHire),
            final_interview_report="Final stage report.",
            final_review=judgment(Recommendation.StrongHire),
        )
        hired = candidate_factory(started_at=utcnow(), state=state)
        candidate_factory(name="Still going", started_at=utcnow(), state=GauntletState(phase=Phase.Technical))

        response = client.post("/api/admin/communications", headers=admin_headers)

        assert response.status_code == 200, response.text
        assert response.json() == {"offers": [str(hired.candidate_id)], "rejections": [], "failed": [], "sent": 1}
        with db_session.begin():
            loaded = candidate_storage.get(hired.candidate_id, session=db_session)
        assert loaded is not None and loaded.communication_sent
        assert [(e.event, e.author) for e in loaded.log] == [("AI Email Drafted: Offer Extended", LogAuthor.AI)]

        again = client.post("/api/admin/communications", headers=admin_headers)

        assert again.json()["sent"] == 0
        assert collaborators.draft_offer.await_count == 1

    def test_requires_admin(self, client: TestClient) -> None:
        assert client.post("/api/admin/communications").status_code == 401
