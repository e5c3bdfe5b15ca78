"""Core app configuration and database."""

from civreg.core.config import get_settings, settings
from civreg.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
