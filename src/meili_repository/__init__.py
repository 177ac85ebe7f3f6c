"""Typed CRUD repositories over Meilisearch indexes.

Environment Variables:
    MEILI_URL: Meilisearch endpoint URL (default: http://localhost:7700)
    MEILI_API_KEY: API key (default: none)
    MEILI_SYNCHRONOUS: Wait for mutation tasks (default: true)
"""

from .config import MeiliSettings, configure_logging
from .errors import (
    ChunkWriteError,
    CoordinationTimeoutError,
    DecodingError,
    EncodingError,
    IllegalStateError,
    IndexMutationError,
    IndexServiceError,
    RepositoryError,
    UnsupportedOperation,
)
from .repositories import EntityCodec, MeiliClient, MeiliSearchRepository, SearchDbRepository, TaskCoordinator

__all__ = [
    "ChunkWriteError",
    "CoordinationTimeoutError",
    "DecodingError",
    "EncodingError",
    "EntityCodec",
    "IllegalStateError",
    "IndexMutationError",
    "IndexServiceError",
    "MeiliClient",
    "MeiliSearchRepository",
    "MeiliSettings",
    "RepositoryError",
    "SearchDbRepository",
    "TaskCoordinator",
    "UnsupportedOperation",
    "configure_logging",
]
