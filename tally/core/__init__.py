__all__ = [
    "BootConfiguration",
    "di",
    "TallyContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
]


from . import di
from .config import Secrets, Settings
from .container import BootConfiguration, TallyContainer
from .provider import LoggingProvider, TimestampProvider
