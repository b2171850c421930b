from __future__ import annotations

import pydantic as p
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from gauntlet.model import DeploymentEnvironment

from .base import BaseSecrets
from .source import YAMLSecretsSource


class DatabaseSecrets(BaseSecrets):
    username: p.Secret[str] | None = None
    password: p.Secret[str] | None = None


class AuthSecrets(BaseSecrets):
    """Authentication secrets.

    `access_code` is the single shared code candidates present alongside their
    candidate ID; `admin_code` unlocks the monitor.
    """

    jwt: p.Secret[str]
    access_code: p.Secret[str]
    admin_code: p.Secret[str]


class OpenAISecrets(BaseSecrets):
    """OpenAI API secrets."""

    secret_key: p.Secret[str]


class AnthropicSecrets(BaseSecrets):
    """Anthropic API secrets."""

    api_key: p.Secret[str]


class LLMSecrets(BaseSecrets):
    """LLM vendor API secrets."""

    openai: OpenAISecrets | None = None
    anthropic: AnthropicSecrets | None = None


class Secrets(BaseSecrets):
    root: p.AnyUrl
    env: DeploymentEnvironment

    auth: AuthSecrets | None = None
    database: DatabaseSecrets = DatabaseSecrets()
    llm: LLMSecrets = LLMSecrets()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, YAMLSecretsSource(settings_cls)
