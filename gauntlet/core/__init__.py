__all__ = [
    "BootConfiguration",
    "di",
    "GauntletContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
    "get_logger",
]


# NOTE: order matters, container pulls in domain modules which import di and
#       get_logger from this package
from . import di
from .provider import get_logger, LoggingProvider, TimestampProvider
from .config import Secrets, Settings  # isort: skip
from .container import BootConfiguration, GauntletContainer  # isort: skip
