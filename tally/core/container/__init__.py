__all__ = [
    "BootConfiguration",
    "TallyContainer",
    "StorageContainer",
]

from .storage import StorageContainer
from .tally import BootConfiguration, TallyContainer
