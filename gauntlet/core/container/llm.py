"""LLM container for dependency injection."""

from __future__ import annotations

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Provider, Singleton
from langchain_core.language_models import BaseChatModel

from gauntlet.llm.provider import create_chat_model

from ..config.llm import ModelSettings


class LLMContainer(DeclarativeContainer):
    """Container for LLM services.

    Models are built lazily, so an environment without vendor keys can boot as
    long as nothing asks for a model.
    """

    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    judge_model: Provider[BaseChatModel] = Singleton(
        create_chat_model,
        config.models.judge.as_(ModelSettings),
        openai_api_key=secrets.openai.secret_key,
        anthropic_api_key=secrets.anthropic.api_key,
    )
    collaborator_model: Provider[BaseChatModel] = Singleton(
        create_chat_model,
        config.models.collaborator.as_(ModelSettings),
        openai_api_key=secrets.openai.secret_key,
        anthropic_api_key=secrets.anthropic.api_key,
    )
