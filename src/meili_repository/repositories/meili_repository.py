"""Generic CRUD repository backed by a Meilisearch index.

Writes are upserts keyed by the ``id`` field, split into chunks and, in
synchronous mode, only return once the service has applied them. Reads by id
are lenient (errors mean "not found"); listing every document is strict.
"""

import logging
from collections.abc import Iterable
from typing import Any, Callable, Optional, TypeVar

from ..config.settings import MeiliSettings
from ..errors import UnsupportedOperation
from .base import SearchDbRepository
from .chunked_batch_writer import ChunkedBatchWriter
from .entity_codec import EntityCodec
from .index_binding import IndexBinding
from .meili_client import MeiliClient
from .models import IndexRef, TaskHandle
from .task_coordinator import TaskCoordinator

logger = logging.getLogger(__name__)

T = TypeVar("T")
ID = TypeVar("ID")


class MeiliSearchRepository(SearchDbRepository[T, ID]):
    """Repository for typed entities stored in one Meilisearch index.

    The entity type is passed explicitly and used to decode documents. The
    index is resolved (and created if missing) once, when the repository is
    built; a failure there raises IllegalStateError.

    Attributes:
        settings: Connection and behaviour settings
        client: Shared MeiliClient instance
        synchronous: Wait for every mutation task before returning
        codec: Entity/document codec for ``entity_type``
        coordinator: Task submission and polling
        binding: The resolved index

    Example:
        >>> class Book(BaseModel):
        ...     id: str
        ...     title: str
        >>> repo = MeiliSearchRepository(Book, "books", settings=MeiliSettings())
        >>> repo.save(Book(id="1", title="Dune"))
        >>> repo.find_by_id("1")
        Book(id='1', title='Dune')
    """

    def __init__(
        self,
        entity_type: type[T],
        index_name: str,
        settings: Optional[MeiliSettings] = None,
        client: Optional[MeiliClient] = None,
        synchronous: Optional[bool] = None,
        chunk_size: Optional[int] = None,
    ) -> None:
        """Initialize the repository and bind its index.

        Args:
            entity_type: Type documents are decoded into
            index_name: Name (uid) of the target index
            settings: Settings (read from the environment if None)
            client: Shared MeiliClient instance (creates new if None)
            synchronous: Overrides settings.synchronous
            chunk_size: Overrides settings.chunk_size

        Raises:
            IllegalStateError: If the index cannot be found or created
        """
        self.settings = settings or MeiliSettings.from_env()
        self.client = client or MeiliClient.from_settings(self.settings)
        self.synchronous = self.settings.synchronous if synchronous is None else synchronous
        self.primary_key = self.settings.primary_key

        self.codec: EntityCodec[T] = EntityCodec(entity_type, self.primary_key)
        self.coordinator = TaskCoordinator.from_settings(self.client, self.settings)
        self.binding = IndexBinding(self.client, self.coordinator, self.primary_key)
        self.binding.resolve(index_name)

        self.writer: ChunkedBatchWriter[T] = ChunkedBatchWriter(
            self.client,
            self.coordinator,
            self.codec,
            self.binding.uid,
            self.primary_key,
            chunk_size=self.settings.chunk_size if chunk_size is None else chunk_size,
            synchronous=self.synchronous,
        )
        logger.info(
            "meili_repository_initialized",
            extra={
                "index": self.binding.uid,
                "entity_type": getattr(entity_type, "__name__", repr(entity_type)),
                "synchronous": self.synchronous,
            },
        )

    @property
    def index(self) -> IndexRef:
        return self.binding.index

    @property
    def index_uid(self) -> str:
        return self.binding.uid

    def save(self, entity: T) -> T:
        return self.save_all([entity])[0]

    def save_all(self, entities: Iterable[T]) -> list[T]:
        """Upsert entities in chunks of at most ``chunk_size``.

        In synchronous mode every chunk is visible to reads when this returns.

        Raises:
            EncodingError: If an entity cannot be encoded
            IndexMutationError: If the service fails a chunk's task
            CoordinationTimeoutError: If a chunk's task does not finish in time
            ChunkWriteError: If a chunk after the first fails
        """
        items = list(entities)
        self.writer.write_all(items)
        return items

    def find_by_id(self, id: ID) -> Optional[T]:
        """Fetch and decode the document stored under ``id``.

        Any failure, including an undecodable document, is logged and
        reported as not found.
        """
        try:
            document = self.client.get_document(self.index_uid, str(id))
            if document is None:
                logger.debug(
                    "meili_document_not_found",
                    extra={"index": self.index_uid, "id": str(id)},
                )
                return None
            return self.codec.decode(document)
        except Exception as e:
            logger.warning(
                "meili_find_by_id_failed",
                extra={"index": self.index_uid, "id": str(id), "error": str(e)},
                exc_info=True,
            )
            return None

    def exists_by_id(self, id: ID) -> bool:
        return self.find_by_id(id) is not None

    def find_all(self) -> list[T]:
        """Fetch up to ``documents_limit`` documents in one page and decode them.

        Raises:
            DecodingError: If any document does not match the entity type
            IndexServiceError: If the documents cannot be fetched
        """
        documents = self.client.get_documents(self.index_uid, self.settings.documents_limit)
        entities = self.codec.decode_many(documents)
        logger.debug(
            "meili_documents_listed",
            extra={"index": self.index_uid, "count": len(entities)},
        )
        return entities

    def find_all_by_id(self, ids: Iterable[ID]) -> list[T]:
        found = (self.find_by_id(id) for id in ids)
        return [entity for entity in found if entity is not None]

    def count(self) -> int:
        """Number of documents in the index.

        Read from the index stats: the hit totals of an empty search stop at
        the index's ``maxTotalHits`` setting.
        """
        return self.client.get_stats(self.index_uid).number_of_documents

    def delete_by_id(self, id: ID) -> None:
        self._mutate(
            "delete_by_id",
            lambda: self.client.delete_document(self.index_uid, str(id)),
            id=str(id),
        )

    def delete_all(self, entities: Optional[Iterable[T]] = None) -> None:
        """Delete every document in the index.

        Raises:
            UnsupportedOperation: If ``entities`` is given
        """
        if entities is not None:
            raise UnsupportedOperation("Deleting a given collection of entities is not implemented")
        self._mutate(
            "delete_all",
            lambda: self.client.delete_all_documents(self.index_uid),
        )

    def delete(self, entity: T) -> None:
        raise UnsupportedOperation("Deleting by entity is not implemented")

    def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        raise UnsupportedOperation("Deleting by a collection of ids is not implemented")

    def _mutate(self, operation: str, mutation: Callable[[], TaskHandle], **fields: Any) -> None:
        try:
            self.coordinator.run(mutation, self.synchronous)
        except Exception as e:
            logger.exception(
                "meili_mutation_failed",
                extra={"index": self.index_uid, "operation": operation, "error": str(e), **fields},
            )
            raise

        logger.info(
            "meili_mutation_applied" if self.synchronous else "meili_mutation_submitted",
            extra={"index": self.index_uid, "operation": operation, **fields},
        )
