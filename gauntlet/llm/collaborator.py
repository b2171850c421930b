"""External collaborators the gauntlet calls through narrow interfaces.

These are thin prompt calls with no state of their own: question generation
for the technical and system-design stages, the offer and rejection drafts,
and the skill-gap diagnostic run after a failed final interview.
"""

from __future__ import annotations

import typing as t

import jinja2
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from gauntlet.assessment.errors import CollaboratorError

from .parsing import extract_json_object, get_content_str


class EmailDraft(t.TypedDict):
    subject: str
    body: str


class SkillGap(t.TypedDict):
    skill: str
    suggestion: str


class Collaborators(object):
    def __init__(self, model: BaseChatModel, env: jinja2.Environment) -> None:
        self.model = model
        self.env = env

    async def generate_technical_questions(
        self, *, role: str, role_description: str, narrative: str, count: int
    ) -> list[str]:
        prompt = self.env.get_template("collaborator/technical_questions.j2").render(
            role=role,
            role_description=role_description,
            narrative=narrative,
            count=count,
        )
        parsed = await self._ask("You write technical interview questions.", prompt)
        questions = [str(q).strip() for q in parsed.get("questions") or [] if str(q).strip()]
        if len(questions) < count:
            raise CollaboratorError(f"expected {count} technical questions, got {len(questions)}")
        return questions[:count]

    async def generate_system_design_question(self, *, role: str) -> str:
        prompt = self.env.get_template("collaborator/system_design_question.j2").render(role=role)
        parsed = await self._ask("You write system design interview challenges.", prompt)
        question = str(parsed.get("question") or "").strip()
        if not question:
            raise CollaboratorError("system design question generator returned nothing")
        return question

    async def draft_rejection(
        self,
        *,
        candidate_name: str,
        stage: str,
        role: str,
        skills: list[str],
        rationale: str,
        company_name: str,
        recruiter_name: str,
    ) -> EmailDraft:
        prompt = self.env.get_template("collaborator/rejection_notice.j2").render(
            candidate_name=candidate_name,
            stage=stage,
            role=role,
            skills=skills,
            rationale=rationale,
            company_name=company_name,
            recruiter_name=recruiter_name,
        )
        parsed = await self._ask("You are a considerate recruiter writing to a candidate.", prompt)
        return _email_draft(parsed, "rejection")

    async def draft_offer(
        self,
        *,
        candidate_name: str,
        role: str,
        skills: list[str],
        assessment: str,
        company_name: str,
        recruiter_name: str,
    ) -> EmailDraft:
        prompt = self.env.get_template("collaborator/offer_notice.j2").render(
            candidate_name=candidate_name,
            role=role,
            skills=skills,
            assessment=assessment,
            company_name=company_name,
            recruiter_name=recruiter_name,
        )
        parsed = await self._ask("You are an enthusiastic recruiter writing to a candidate.", prompt)
        return _email_draft(parsed, "offer")

    async def analyze_skill_gaps(self, *, skills: list[str], role_description: str) -> list[SkillGap]:
        prompt = self.env.get_template("collaborator/skill_gaps.j2").render(
            skills=skills,
            role_description=role_description,
        )
        parsed = await self._ask("You are a career coach.", prompt)
        gaps: list[SkillGap] = []
        for item in parsed.get("skill_gaps") or []:
            if isinstance(item, dict) and item.get("skill"):
                gaps.append(SkillGap(skill=str(item["skill"]), suggestion=str(item.get("suggestion") or "")))
        return gaps

    async def _ask(self, persona: str, prompt: str) -> dict[str, t.Any]:
        messages = [
            SystemMessage(content=f"{persona} Respond only with valid JSON, no markdown formatting."),
            HumanMessage(content=prompt),
        ]
        try:
            response = await self.model.ainvoke(messages)
        except Exception as e:
            raise CollaboratorError(f"collaborator call failed: {e}") from e

        parsed = extract_json_object(get_content_str(response.content))
        if parsed is None:
            raise CollaboratorError("collaborator reply is not a JSON object")
        return parsed


def _email_draft(parsed: dict[str, t.Any], kind: str) -> EmailDraft:
    subject = str(parsed.get("subject") or "").strip()
    body = str(parsed.get("body") or "").strip()
    if not (subject and body):
        raise CollaboratorError(f"{kind} draft is missing a subject or body")
    return EmailDraft(subject=subject, body=body)
