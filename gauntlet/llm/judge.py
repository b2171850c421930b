"""Judgment calls that gate the gauntlet.

Two judges sit behind `EvaluatorClient`:

- the Proctor-Judge scores one technical answer together with the integrity
  evidence gathered while it was written;
- the Phase-Judge reads a whole stage report and issues a hire-track
  recommendation. It is called the same way after every stage.

Any failure to obtain a usable verdict raises `JudgeError`. Nothing here falls
back to a default verdict.
"""

from __future__ import annotations

import typing as t

import jinja2
import pydantic as p
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from gauntlet.assessment.errors import JudgeError, MalformedJudgment
from gauntlet.core import get_logger
from gauntlet.model import JudgmentResult, Phase, ProctoringEvidence, ProctorResult, Recommendation

from .parsing import extract_json_object, get_content_str

logger = get_logger()

NO_TRANSCRIPT = "None"

JSON_ONLY = "Respond only with valid JSON, no markdown formatting."


class ProctorVerdict(t.TypedDict):
    """Raw Proctor-Judge reply, before the voice override is applied."""

    evaluation: str
    score: int
    proctoring_summary: str
    second_voice_detected: bool


class EvaluatorClient(object):
    def __init__(self, model: BaseChatModel, env: jinja2.Environment, pass_score: int = 70) -> None:
        self.model = model
        self.env = env
        self.pass_score = pass_score

    async def review_stage(self, report: str, *, stage: Phase | None = None) -> JudgmentResult:
        """Ask the Phase-Judge for a recommendation on a stage report.

        `stage` is only used for logging; the judge sees the report alone.
        """
        prompt = self.env.get_template("judge/phase_review.j2").render(report=report)
        parsed = await self._ask(
            "You are a principal engineer and hiring committee chair reviewing an assessment. " + JSON_ONLY, prompt
        )
        result = parse_judgment(parsed)
        logger.info(
            "phase judge verdict",
            extra={
                "stage": stage.value if stage else None,
                "recommendation": result.recommendation.value,
            },
        )
        return result

    async def proctor_answer(self, question: str, answer: str, evidence: ProctoringEvidence) -> ProctorResult:
        """Score one technical answer with its integrity evidence.

        A second voice in the ambient transcript zeroes the score regardless of
        the answer. Without a transcript the override cannot fire.
        """
        transcript = evidence.ambient_transcript.strip() if evidence.ambient_transcript else ""
        prompt = self.env.get_template("judge/proctor_answer.j2").render(
            question=question,
            answer=answer,
            visibility_events=[str(e) for e in evidence.entries],
            ambient_transcript=transcript or NO_TRANSCRIPT,
            pass_score=self.pass_score,
        )
        parsed = await self._ask("You are a strict but fair technical proctor. " + JSON_ONLY, prompt)
        verdict = parse_proctor_verdict(parsed)
        result = apply_proctor_rules(verdict, has_transcript=bool(transcript), pass_score=self.pass_score)
        logger.info(
            "proctor judge verdict",
            extra={
                "score": result.score,
                "is_pass": result.is_pass,
                "second_voice": verdict["second_voice_detected"],
                "visibility_events": len(evidence.entries),
            },
        )
        return result

    async def _ask(self, system: str, prompt: str) -> dict[str, t.Any]:
        try:
            response = await self.model.ainvoke([SystemMessage(content=system), HumanMessage(content=prompt)])
        except Exception as e:
            logger.warning("judge call failed", extra={"error": repr(e)})
            raise JudgeError(f"judge call failed: {e}") from e

        text = get_content_str(response.content)
        parsed = extract_json_object(text)
        if parsed is None:
            raise MalformedJudgment(f"judge reply is not a JSON object: {text[:200]!r}")
        return parsed


def parse_judgment(parsed: dict[str, t.Any]) -> JudgmentResult:
    """Validate a Phase-Judge reply.

    Raises:
        MalformedJudgment: missing or unknown recommendation, no assessment text,
            or strengths/concerns that are not lists
    """
    raw = parsed.get("recommendation")
    if not isinstance(raw, str):
        raise MalformedJudgment("judgment has no recommendation")
    try:
        recommendation = Recommendation.from_label(raw)
    except ValueError as e:
        raise MalformedJudgment(str(e)) from e

    try:
        return JudgmentResult(
            recommendation=recommendation,
            assessment=_require_text(parsed, "assessment"),
            strengths=_text_list(parsed, "strengths"),
            concerns=_text_list(parsed, "concerns"),
        )
    except p.ValidationError as e:
        raise MalformedJudgment(str(e)) from e


def parse_proctor_verdict(parsed: dict[str, t.Any]) -> ProctorVerdict:
    """Validate a Proctor-Judge reply.

    Raises:
        MalformedJudgment: score missing, not a whole number or outside 0-100
    """
    score = parsed.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float, str)):
        raise MalformedJudgment("proctor verdict has no score")
    try:
        numeric = float(score)
    except ValueError as e:
        raise MalformedJudgment(f"proctor score is not numeric: {score!r}") from e
    if not numeric.is_integer():
        raise MalformedJudgment(f"proctor score is not a whole number: {score!r}")
    if not 0 <= numeric <= 100:
        raise MalformedJudgment(f"proctor score out of range: {numeric}")

    return ProctorVerdict(
        evaluation=_require_text(parsed, "evaluation"),
        score=int(numeric),
        proctoring_summary=str(parsed.get("proctoring_summary") or ""),
        second_voice_detected=parsed.get("second_voice_detected") is True,
    )


def apply_proctor_rules(verdict: ProctorVerdict, *, has_transcript: bool, pass_score: int) -> ProctorResult:
    score = verdict["score"]
    summary = verdict["proctoring_summary"]
    if has_transcript and verdict["second_voice_detected"]:
        score = 0
        summary = f"{summary} Second voice detected in ambient audio; score set to 0.".strip()
    return ProctorResult(
        evaluation=verdict["evaluation"],
        score=score,
        proctoring_summary=summary,
        is_pass=score >= pass_score,
    )


def _require_text(parsed: dict[str, t.Any], key: str) -> str:
    value = parsed.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedJudgment(f"judge reply is missing {key!r}")
    return value


def _text_list(parsed: dict[str, t.Any], key: str) -> list[str]:
    value = parsed.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedJudgment(f"{key!r} is not a list: {value!r}")
    return [str(v) for v in t.cast(list[t.Any], value)]
