"""LLM configuration settings."""

from __future__ import annotations

import enum

from .base import BaseSettings


class ProviderType(enum.Enum):
    """Supported LLM providers."""

    OpenAI = "openai"
    Anthropic = "anthropic"


class ModelSettings(BaseSettings):
    """Settings for a specific model."""

    provider: ProviderType = ProviderType.OpenAI
    model: str = "gpt-4o"
    max_tokens: int = 4096
    temperature: float = 1.0
    max_retries: int = 3
    timeout_seconds: float = 60.0


class GauntletModels(BaseSettings):
    """Model configuration for the judges and the collaborators."""

    judge: ModelSettings = ModelSettings(
        provider=ProviderType.OpenAI,
        model="gpt-4o",
        max_tokens=2048,
        temperature=0.2,
    )
    collaborator: ModelSettings = ModelSettings(
        provider=ProviderType.OpenAI,
        model="gpt-4o-mini",
        max_tokens=2048,
        temperature=0.7,
    )


class LLMSettings(BaseSettings):
    """Root LLM configuration."""

    models: GauntletModels = GauntletModels()
