"""DataSight — tabular insight engine."""

from .core.config import settings
from .services.query_router import analyze

__version__ = settings.APP_VERSION

__all__ = ["analyze", "__version__"]
