"""Meilisearch repository layer.

Provides a typed CRUD repository on top of a Meilisearch index. Index
mutations are applied by the service in background tasks; in synchronous
mode the repository waits for each task before returning.

Repository classes:
    - MeiliClient: HTTP client for the Meilisearch REST API
    - EntityCodec: Entity <-> document mapping via pydantic
    - TaskCoordinator: Task submission and completion polling
    - ChunkedBatchWriter: Sequential chunked document upserts
    - IndexBinding: Create-if-absent index resolution
    - MeiliSearchRepository: CRUD repository composing the above

Usage:
    >>> from meili_repository.repositories import MeiliSearchRepository
    >>> repo = MeiliSearchRepository(Book, "books")
    >>> repo.save(Book(id="1", title="Dune"))
"""

from .base import SearchDbRepository
from .chunked_batch_writer import ChunkedBatchWriter, iter_chunks
from .entity_codec import EntityCodec
from .index_binding import IndexBinding
from .meili_client import MeiliClient
from .meili_repository import MeiliSearchRepository
from .models import Document, IndexRef, IndexStats, TaskError, TaskHandle, TaskInfo, TaskStatus
from .task_coordinator import TaskCoordinator

__all__ = [
    "ChunkedBatchWriter",
    "Document",
    "EntityCodec",
    "IndexBinding",
    "IndexRef",
    "IndexStats",
    "MeiliClient",
    "MeiliSearchRepository",
    "SearchDbRepository",
    "TaskCoordinator",
    "TaskError",
    "TaskHandle",
    "TaskInfo",
    "TaskStatus",
    "iter_chunks",
]
