"""Configuration and logging for meili-repository."""

from .logfire_config import configure_logging, get_logger
from .settings import DOCUMENTS_LIMIT, PRIMARY_KEY, MeiliSettings

__all__ = [
    "DOCUMENTS_LIMIT",
    "PRIMARY_KEY",
    "MeiliSettings",
    "configure_logging",
    "get_logger",
]
