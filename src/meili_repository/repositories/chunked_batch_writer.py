"""Batch writes split into bounded, strictly sequential chunks.

Each chunk is encoded and sent as one document update. In synchronous mode
chunk i is only submitted once chunk i-1 has succeeded. There is no
cross-chunk atomicity: chunks written before a failure stay written.
"""

import logging
from collections.abc import Iterator, Sequence
from typing import Generic, Optional, TypeVar

from ..errors import ChunkWriteError
from .entity_codec import EntityCodec
from .meili_client import MeiliClient
from .task_coordinator import TaskCoordinator

logger = logging.getLogger(__name__)

T = TypeVar("T")


def iter_chunks(items: Sequence[T], chunk_size: int) -> Iterator[Sequence[T]]:
    """Yield contiguous slices of at most ``chunk_size`` items, in order."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    for start in range(0, len(items), chunk_size):
        yield items[start:start + chunk_size]


class ChunkedBatchWriter(Generic[T]):
    """Writes entity collections to one index chunk by chunk.

    Attributes:
        client: Client issuing the document updates
        coordinator: Coordinator used to submit and await each chunk
        codec: Codec encoding each chunk
        index_uid: Target index
        primary_key: Primary key sent with each update
        chunk_size: Default maximum entities per request
        synchronous: Default wait mode
    """

    def __init__(
        self,
        client: MeiliClient,
        coordinator: TaskCoordinator,
        codec: EntityCodec[T],
        index_uid: str,
        primary_key: str,
        chunk_size: int = 1000,
        synchronous: bool = True,
    ) -> None:
        self.client = client
        self.coordinator = coordinator
        self.codec = codec
        self.index_uid = index_uid
        self.primary_key = primary_key
        self.chunk_size = chunk_size
        self.synchronous = synchronous

    def write_all(
        self,
        entities: Sequence[T],
        chunk_size: Optional[int] = None,
        synchronous: Optional[bool] = None,
    ) -> Sequence[T]:
        """Upsert all entities, one request per chunk.

        Args:
            entities: Entities to write, in order
            chunk_size: Maximum entities per request (default: writer setting)
            synchronous: Wait for each chunk's task (default: writer setting)

        Returns:
            The ``entities`` argument, unchanged

        Raises:
            ValueError: If chunk_size is smaller than 1
            EncodingError, IndexMutationError, CoordinationTimeoutError,
            IndexServiceError: If the first chunk fails; nothing was written
            ChunkWriteError: If a later chunk fails; earlier chunks stay written
        """
        chunk_size = self.chunk_size if chunk_size is None else chunk_size
        synchronous = self.synchronous if synchronous is None else synchronous
        chunks = list(iter_chunks(entities, chunk_size))
        if not chunks:
            return entities

        for chunk_index, chunk in enumerate(chunks):
            try:
                self._write_chunk(chunk, synchronous)
            except Exception as e:
                logger.exception(
                    "meili_chunk_write_failed",
                    extra={
                        "index": self.index_uid,
                        "chunk_index": chunk_index,
                        "chunk_count": len(chunks),
                        "error": str(e),
                    },
                )
                if chunk_index == 0:
                    raise
                raise ChunkWriteError(
                    chunk_index, chunk_index, len(chunks), confirmed=synchronous
                ) from e

        logger.info(
            "meili_documents_written",
            extra={
                "index": self.index_uid,
                "documents": len(entities),
                "chunks": len(chunks),
                "synchronous": synchronous,
            },
        )
        return entities

    def _write_chunk(self, chunk: Sequence[T], synchronous: bool) -> None:
        documents = self.codec.encode(chunk)
        payload = self.codec.to_json(documents)
        self.coordinator.run(
            lambda: self.client.update_documents(self.index_uid, payload, self.primary_key),
            synchronous,
        )
