"""Tests for gauntlet.llm.collaborator module."""

from __future__ import annotations

import asyncio
import json

import jinja2
import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from gauntlet.assessment.errors import CollaboratorError
from gauntlet.llm import Collaborators


def _collaborators(env: jinja2.Environment, reply: object) -> Collaborators:
    text = reply if isinstance(reply, str) else json.dumps(reply)
    return Collaborators(FakeListChatModel(responses=[text]), env)


class TestQuestionGeneration(object):
    def test_technical_questions(self, llm_env: jinja2.Environment) -> None:
        c = _collaborators(llm_env, {"questions": ["One?", "Two?", "Three?", "Four?"]})

        questions = asyncio.run(
            c.generate_technical_questions(role="SRE", role_description="Keeps things up.", narrative="", count=3)
        )

        assert questions == ["One?", "Two?", "Three?"]

    def test_too_few_questions(self, llm_env: jinja2.Environment) -> None:
        c = _collaborators(llm_env, {"questions": ["One?", " "]})

        with pytest.raises(CollaboratorError):
            asyncio.run(c.generate_technical_questions(role="SRE", role_description="", narrative="", count=2))

    def test_system_design_question(self, llm_env: jinja2.Environment) -> None:
        c = _collaborators(llm_env, {"question": "Design a rate limiter."})

        assert asyncio.run(c.generate_system_design_question(role="SRE")) == "Design a rate limiter."

    def test_non_json_reply(self, llm_env: jinja2.Environment) -> None:
        with pytest.raises(CollaboratorError):
            asyncio.run(_collaborators(llm_env, "Sure! Here you go.").generate_system_design_question(role="SRE"))


class TestAfterFailure(object):
    def test_rejection_draft(self, llm_env: jinja2.Environment) -> None:
        c = _collaborators(llm_env, {"subject": "Your application to Acme", "body": "Dear Ada, ..."})

        draft = asyncio.run(
            c.draft_rejection(
                candidate_name="Ada",
                stage="Technical Gauntlet",
                role="SRE",
                skills=["Python"],
                rationale="Did not pass.",
                company_name="Acme",
                recruiter_name="Jordan Reyes",
            )
        )

        assert draft == {"subject": "Your application to Acme", "body": "Dear Ada, ..."}

    def test_incomplete_rejection_draft(self, llm_env: jinja2.Environment) -> None:
        c = _collaborators(llm_env, {"subject": "Hello"})

        with pytest.raises(CollaboratorError):
            asyncio.run(
                c.draft_rejection(
                    candidate_name="Ada",
                    stage="Technical Gauntlet",
                    role="SRE",
                    skills=[],
                    rationale="",
                    company_name="Acme",
                    recruiter_name="Jordan Reyes",
                )
            )

    def test_skill_gaps_skip_junk(self, llm_env: jinja2.Environment) -> None:
        c = _collaborators(
            llm_env,
            {"skill_gaps": [{"skill": "Kubernetes", "suggestion": "Run a cluster."}, {"suggestion": "?"}, "x"]},
        )

        gaps = asyncio.run(c.analyze_skill_gaps(skills=["Python"], role_description="SRE"))

        assert gaps == [{"skill": "Kubernetes", "suggestion": "Run a cluster."}]


class TestOfferDraft(object):
    def test_offer_draft(self, llm_env: jinja2.Environment) -> None:
        c = _collaborators(llm_env, {"subject": "An offer from Acme", "body": "Dear Ada, congratulations!"})

        draft = asyncio.run(
            c.draft_offer(
                candidate_name="Ada",
                role="SRE",
                skills=["Python"],
                assessment="Excellent throughout.",
                company_name="Acme",
                recruiter_name="Jordan Reyes",
            )
        )

        assert draft == {"subject": "An offer from Acme", "body": "Dear Ada, congratulations!"}

    def test_incomplete_offer_draft(self, llm_env: jinja2.Environment) -> None:
        c = _collaborators(llm_env, {"body": "Congratulations!"})

        with pytest.raises(CollaboratorError, match="offer"):
            asyncio.run(
                c.draft_offer(
                    candidate_name="Ada",
                    role="SRE",
                    skills=[],
                    assessment="",
                    company_name="Acme",
                    recruiter_name="Jordan Reyes",
                )
            )
