import pydantic as p
from pydantic_settings import BaseSettings as PydanticBaseSettings
from pydantic_settings import PydanticBaseSettingsSource

from gauntlet.model import DeploymentEnvironment

from .base import BaseSettings
from .gauntlet import GauntletSettings
from .llm import LLMSettings
from .logging import LoggingSettings
from .source import OverrideSettingsSource, YAMLCascadingSettingsSource
from .storage import StorageSettings
from .template import TemplateSettings
from .web import WebSettings

SettingsField = p.Field(default=..., validate_default=True)


class Settings(BaseSettings):
    root: p.FileUrl
    env: DeploymentEnvironment
    override: tuple[str, ...]

    logging: LoggingSettings = SettingsField
    storage: StorageSettings = SettingsField
    template: TemplateSettings = SettingsField
    llm: LLMSettings = p.Field(default_factory=LLMSettings)
    web: WebSettings = SettingsField
    gauntlet: GauntletSettings = p.Field(default_factory=GauntletSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:  # noqa: E501
        # earlier sources take precedence
        return init_settings, OverrideSettingsSource(settings_cls), YAMLCascadingSettingsSource(settings_cls)
