"""HTTP client for the Meilisearch REST API.

Covers the subset of the API the repositories need: index lookup and
creation, task status, document writes, reads and deletes, and counting via
index stats. Every mutation returns a TaskHandle as soon as the service has
enqueued it; waiting for the task is TaskCoordinator's job.
"""

import logging
from typing import Any, Optional, Union
from urllib.parse import quote

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from ..config.settings import MeiliSettings
from ..errors import IndexServiceError
from .models import Document, IndexRef, IndexStats, TaskHandle, TaskInfo

logger = logging.getLogger(__name__)

INDEX_PAGE_SIZE = 1000


def _is_transient(exc: BaseException) -> bool:
    """Connection failures and 5xx responses are worth another attempt."""
    if not isinstance(exc, IndexServiceError):
        return False
    return exc.status_code is None or exc.status_code >= 500


# Only read-only requests are retried; mutations are never resubmitted here.
read_retry = retry(
    retry=retry_if_exception(_is_transient),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True,
)


class MeiliClient:
    """HTTP client for Meilisearch operations.

    Opens a short-lived httpx.Client per request. Timeouts are plain
    constructor arguments.

    Attributes:
        url: Base URL of the Meilisearch instance
        api_key: Key sent as bearer token, if any
        timeout: HTTP request timeout in seconds

    Example:
        >>> client = MeiliClient("http://localhost:7700", api_key="masterKey")
        >>> handle = client.update_documents("books", [{"id": "1", "title": "Dune"}])
        >>> client.get_task(handle.task_uid).status
    """

    def __init__(
        self,
        url: str = "http://localhost:7700",
        api_key: Optional[str] = None,
        timeout: float = 300.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Meilisearch endpoint URL
            api_key: API key (master or scoped key)
            timeout: Request timeout in seconds applied to connect, read and write
            transport: Optional httpx transport, used by tests
        """
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        logger.info(
            "meili_client_initialized",
            extra={"url": self.url, "timeout": timeout},
        )

    @classmethod
    def from_settings(
        cls,
        settings: MeiliSettings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "MeiliClient":
        return cls(
            url=settings.url,
            api_key=settings.api_key,
            timeout=settings.request_timeout_s,
            transport=transport,
        )

    def _get_client(self) -> httpx.Client:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return httpx.Client(
            base_url=self.url,
            headers=headers,
            timeout=self.timeout,
            http2=self._transport is None,
            transport=self._transport,
        )

    def _request(
        self,
        method: str,
        path: str,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> Optional[Any]:
        """Send one request and translate failures into IndexServiceError.

        Returns:
            Decoded JSON body, or None for a 404 when allow_not_found is set
        """
        with self._get_client() as client:
            logger.debug(
                "meili_request",
                extra={"method": method, "path": path},
            )
            try:
                response = client.request(method, path, **kwargs)
            except httpx.HTTPError as e:
                raise IndexServiceError(
                    f"{method} {path} failed: {e}"
                ) from e

            if response.status_code == 404 and allow_not_found:
                logger.debug("meili_not_found", extra={"path": path})
                return None

            if response.is_error:
                raise self._service_error(method, path, response)

            if not response.content:
                return None
            return response.json()

    @staticmethod
    def _service_error(method: str, path: str, response: httpx.Response) -> IndexServiceError:
        body: dict[str, Any] = {}
        try:
            decoded = response.json()
            if isinstance(decoded, dict):
                body = decoded
        except ValueError:
            pass
        message = body.get("message") or response.text or response.reason_phrase
        logger.warning(
            "meili_request_failed",
            extra={
                "method": method,
                "path": path,
                "status": response.status_code,
                "code": body.get("code"),
            },
        )
        return IndexServiceError(
            f"{method} {path} returned {response.status_code}: {message}",
            status_code=response.status_code,
            code=body.get("code"),
            error_type=body.get("type"),
            link=body.get("link"),
        )

    @staticmethod
    def _documents_path(index_uid: str, document_id: Optional[str] = None) -> str:
        path = f"/indexes/{quote(index_uid, safe='')}/documents"
        if document_id is not None:
            path += f"/{quote(document_id, safe='')}"
        return path

    def _task_handle(self, body: Any) -> TaskHandle:
        try:
            return TaskHandle.model_validate(body)
        except ValidationError as e:
            raise IndexServiceError(f"Unexpected task summary: {body!r}") from e

    # Indexes

    @read_retry
    def list_indexes(self) -> list[IndexRef]:
        """List every index, following pages of INDEX_PAGE_SIZE until a short page."""
        indexes: list[IndexRef] = []
        offset = 0
        while True:
            body = self._request(
                "GET",
                "/indexes",
                params={"limit": INDEX_PAGE_SIZE, "offset": offset},
            )
            results = body.get("results", []) if isinstance(body, dict) else body or []
            indexes.extend(IndexRef.model_validate(item) for item in results)
            if len(results) < INDEX_PAGE_SIZE:
                return indexes
            offset += len(results)

    def create_index(self, index_uid: str, primary_key: str) -> TaskHandle:
        """Enqueue creation of an index with a fixed primary key."""
        body = self._request(
            "POST",
            "/indexes",
            json={"uid": index_uid, "primaryKey": primary_key},
        )
        handle = self._task_handle(body)
        logger.info(
            "meili_index_creation_enqueued",
            extra={"index": index_uid, "task_uid": handle.task_uid},
        )
        return handle

    @read_retry
    def get_index(self, index_uid: str) -> IndexRef:
        body = self._request("GET", f"/indexes/{quote(index_uid, safe='')}")
        return IndexRef.model_validate(body)

    # Tasks

    @read_retry
    def get_task(self, task_uid: int) -> TaskInfo:
        body = self._request("GET", f"/tasks/{task_uid}")
        try:
            return TaskInfo.model_validate(body)
        except ValidationError as e:
            raise IndexServiceError(f"Unexpected task payload: {body!r}") from e

    # Documents

    def update_documents(
        self,
        index_uid: str,
        payload: Union[bytes, list[Document]],
        primary_key: Optional[str] = None,
    ) -> TaskHandle:
        """Add or replace documents (upsert keyed by the primary key).

        Args:
            index_uid: Target index
            payload: JSON-encoded array of documents, or the documents themselves
            primary_key: Primary key field sent as query parameter

        Returns:
            Handle of the enqueued task
        """
        params = {"primaryKey": primary_key} if primary_key else None
        if isinstance(payload, (bytes, bytearray)):
            request_body: dict[str, Any] = {
                "content": bytes(payload),
                "headers": {"Content-Type": "application/json"},
            }
        else:
            request_body = {"json": payload}

        body = self._request(
            "PUT",
            self._documents_path(index_uid),
            params=params,
            **request_body,
        )
        handle = self._task_handle(body)
        logger.debug(
            "meili_documents_update_enqueued",
            extra={"index": index_uid, "task_uid": handle.task_uid},
        )
        return handle

    def delete_document(self, index_uid: str, document_id: str) -> TaskHandle:
        body = self._request("DELETE", self._documents_path(index_uid, document_id))
        return self._task_handle(body)

    def delete_all_documents(self, index_uid: str) -> TaskHandle:
        body = self._request("DELETE", self._documents_path(index_uid))
        return self._task_handle(body)

    @read_retry
    def get_document(self, index_uid: str, document_id: str) -> Optional[Document]:
        """Fetch one document by primary key.

        Returns:
            The document, or None if the service answers 404
        """
        return self._request(
            "GET",
            self._documents_path(index_uid, document_id),
            allow_not_found=True,
        )

    @read_retry
    def get_documents(self, index_uid: str, limit: int) -> list[Document]:
        """Fetch the first ``limit`` documents of an index in one page."""
        body = self._request(
            "GET",
            self._documents_path(index_uid),
            params={"limit": limit},
        )
        if isinstance(body, dict):
            return body.get("results", [])
        return body or []

    @read_retry
    def get_stats(self, index_uid: str) -> IndexStats:
        """Index statistics; ``number_of_documents`` is exact, unlike search totals."""
        body = self._request("GET", f"/indexes/{quote(index_uid, safe='')}/stats")
        return IndexStats.model_validate(body or {})
