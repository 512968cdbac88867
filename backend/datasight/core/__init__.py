from .config import Settings, get_settings, settings
from .exceptions import DataSightError, InvalidDatasetError, InvalidParameterError

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "DataSightError",
    "InvalidDatasetError",
    "InvalidParameterError",
]
