__all__ = [
    "GradingSettings",
    "LoggingSettings",
    "PersistentSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
    "TallyWebSettings",
    "WebSettings",
]


from .grading import GradingSettings
from .logging import LoggingSettings
from .secrets import Secrets
from .settings import Settings
from .storage import PersistentSettings, StorageSettings
from .web import TallyWebSettings, WebSettings
