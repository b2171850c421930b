__all__ = [
    "AuthSettings",
    "DatabaseSettings",
    "GauntletSettings",
    "GauntletWebSettings",
    "LLMSettings",
    "LoggingSettings",
    "ModelSettings",
    "ProviderType",
    "Secrets",
    "Settings",
    "StorageSettings",
    "WebSettings",
]


from .gauntlet import GauntletSettings
from .llm import LLMSettings, ModelSettings, ProviderType
from .logging import LoggingSettings
from .secrets import Secrets
from .settings import Settings
from .storage import DatabaseSettings, StorageSettings
from .web import AuthSettings, GauntletWebSettings, WebSettings
