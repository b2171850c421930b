__all__ = [
    "AssessmentContainer",
    "AuthContainer",
    "BootConfiguration",
    "GauntletContainer",
    "LLMContainer",
    "StorageContainer",
    "TemplateContainer",
]

from .assessment import AssessmentContainer
from .auth import AuthContainer
from .gauntlet import BootConfiguration, GauntletContainer
from .llm import LLMContainer
from .storage import StorageContainer
from .template import TemplateContainer
