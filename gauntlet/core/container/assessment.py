"""Assessment container: judges, collaborators and live candidate sessions."""

from __future__ import annotations

import typing as t

import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Provider, Singleton
from langchain_core.language_models import BaseChatModel

from gauntlet.llm import Collaborators, EvaluatorClient

from ..config.gauntlet import GauntletSettings
from ..provider import TimestampProvider

if t.TYPE_CHECKING:
    from gauntlet.assessment.persistence import RecordWriter
    from gauntlet.assessment.registry import SessionRegistry


# the assessment modules import gauntlet.core, so they are imported on first use


def provide_writer() -> RecordWriter:
    from gauntlet.assessment.persistence import StorageRecordWriter

    return StorageRecordWriter()


def provide_registry(
    evaluator: EvaluatorClient,
    collaborators: Collaborators,
    writer: RecordWriter,
    settings: GauntletSettings,
    now: TimestampProvider,
) -> SessionRegistry:
    from gauntlet.assessment.registry import SessionRegistry

    return SessionRegistry(
        evaluator=evaluator,
        collaborators=collaborators,
        writer=writer,
        settings=settings,
        now=now,
    )


class AssessmentContainer(DeclarativeContainer):
    settings: Provider[GauntletSettings] = Provider()
    judge_model: Provider[BaseChatModel] = Provider()
    collaborator_model: Provider[BaseChatModel] = Provider()
    templates: Provider[jinja2.Environment] = Provider()
    utcnow: Provider[TimestampProvider] = Provider()

    evaluator: Provider[EvaluatorClient] = Singleton(
        EvaluatorClient,
        judge_model,
        templates,
        pass_score=settings.provided.pass_score,
    )
    collaborators: Provider[Collaborators] = Singleton(Collaborators, collaborator_model, templates)
    writer: Provider[RecordWriter] = Singleton(provide_writer)
    registry: Provider[SessionRegistry] = Singleton(
        provide_registry,
        evaluator=evaluator,
        collaborators=collaborators,
        writer=writer,
        settings=settings,
        now=utcnow,
    )
