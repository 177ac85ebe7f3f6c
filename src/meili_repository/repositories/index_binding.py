"""Create-if-absent resolution of the index a repository works on."""

import logging
from typing import Optional

from ..errors import IllegalStateError
from .meili_client import MeiliClient
from .models import IndexRef
from .task_coordinator import TaskCoordinator

logger = logging.getLogger(__name__)


class IndexBinding:
    """Resolves an index by name once and keeps the reference.

    If the index does not exist it is created with the configured primary key,
    the creation task is awaited and the index is fetched again. Any failure
    along the way is fatal and raised as IllegalStateError.

    Example:
        >>> binding = IndexBinding(client, coordinator, primary_key="id")
        >>> binding.resolve("books").uid
        'books'
    """

    def __init__(
        self,
        client: MeiliClient,
        coordinator: TaskCoordinator,
        primary_key: str,
    ) -> None:
        self.client = client
        self.coordinator = coordinator
        self.primary_key = primary_key
        self._index: Optional[IndexRef] = None

    @property
    def index(self) -> IndexRef:
        if self._index is None:
            raise IllegalStateError("Index has not been resolved yet")
        return self._index

    @property
    def uid(self) -> str:
        return self.index.uid

    def resolve(self, name: str) -> IndexRef:
        """Look up ``name`` among existing indexes, creating it if absent.

        Raises:
            IllegalStateError: If already bound, or lookup/creation fails
        """
        if self._index is not None:
            raise IllegalStateError(
                f"Already bound to index '{self._index.uid}'",
                details={"requested": name},
            )

        try:
            existing = next(
                (index for index in self.client.list_indexes() if index.uid == name),
                None,
            )
            index = existing or self._create(name)
        except Exception as e:
            logger.exception(
                "meili_index_resolution_failed",
                extra={"index": name, "error": str(e)},
            )
            raise IllegalStateError(f"Could not resolve index '{name}': {e}") from e

        self._index = index
        logger.info(
            "meili_index_bound",
            extra={"index": index.uid, "primary_key": index.primary_key, "index_created": existing is None},
        )
        return index

    def _create(self, name: str) -> IndexRef:
        handle = self.coordinator.submit(
            lambda: self.client.create_index(name, self.primary_key)
        )
        self.coordinator.await_completion(handle)
        return self.client.get_index(name)
