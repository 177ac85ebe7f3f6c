"""Error types raised by the Meilisearch repository layer.

Every error derives from RepositoryError so callers can catch the whole family
in one place. Write paths surface these errors unchanged; the lenient read
paths (find_by_id, exists_by_id) log them and report absence instead.
"""

from typing import Any, Optional


class RepositoryError(Exception):
    """Base class for all repository errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EncodingError(RepositoryError):
    """An entity could not be turned into an index document."""


class DecodingError(RepositoryError):
    """A document could not be turned back into the entity type."""


class IllegalStateError(RepositoryError):
    """Unrecoverable setup failure, e.g. the index could not be resolved."""


class UnsupportedOperation(RepositoryError, NotImplementedError):
    """Repository method that is part of the contract but not implemented."""


class IndexServiceError(RepositoryError):
    """The index service rejected a request or could not be reached.

    Attributes:
        status_code: HTTP status code, None for transport failures
        code: Service error code (e.g. "index_not_found")
        error_type: Service error type (e.g. "invalid_request")
        link: Documentation link returned by the service
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        error_type: Optional[str] = None,
        link: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            details={
                "status_code": status_code,
                "code": code,
                "type": error_type,
                "link": link,
            },
        )
        self.status_code = status_code
        self.code = code
        self.error_type = error_type
        self.link = link


class IndexMutationError(RepositoryError):
    """A submitted task reached a failed (or canceled) terminal state.

    Carries the task's error code, type and link exactly as the service
    reported them.
    """

    def __init__(
        self,
        task_uid: int,
        error_code: Optional[str],
        error_type: Optional[str],
        error_link: Optional[str],
        error_message: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"error code: '{error_code}' - error type: '{error_type}' "
            f"- error link: '{error_link}'",
            details={
                "task_uid": task_uid,
                "error_message": error_message,
            },
        )
        self.task_uid = task_uid
        self.error_code = error_code
        self.error_type = error_type
        self.error_link = error_link
        self.error_message = error_message


class CoordinationTimeoutError(RepositoryError):
    """A task did not reach a terminal state in time, or the wait was cancelled."""

    def __init__(self, task_uid: int, waited_ms: int, cancelled: bool = False) -> None:
        reason = "cancelled" if cancelled else "timed out"
        super().__init__(
            f"waiting for task {task_uid} {reason} after {waited_ms} ms",
            details={"task_uid": task_uid, "waited_ms": waited_ms},
        )
        self.task_uid = task_uid
        self.waited_ms = waited_ms
        self.cancelled = cancelled


class ChunkWriteError(RepositoryError):
    """A batch write failed after some chunks had already been written.

    Chunks written before the failure are not rolled back. The original
    error is chained as ``__cause__``. ``confirmed`` is False when the earlier
    chunks were only submitted and their tasks never awaited.
    """

    def __init__(
        self,
        chunk_index: int,
        chunks_written: int,
        chunk_count: int,
        confirmed: bool = True,
    ) -> None:
        progress = "already written" if confirmed else "submitted without waiting for completion"
        super().__init__(
            f"chunk {chunk_index} of {chunk_count} failed; "
            f"{chunks_written} chunk(s) {progress} and not rolled back",
            details={
                "chunk_index": chunk_index,
                "chunks_written": chunks_written,
                "chunk_count": chunk_count,
                "confirmed": confirmed,
            },
        )
        self.confirmed = confirmed
        self.chunk_index = chunk_index
        self.chunks_written = chunks_written
        self.chunk_count = chunk_count
