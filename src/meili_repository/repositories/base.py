"""Abstract CRUD contract implemented by search-backed repositories."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Generic, Optional, TypeVar

T = TypeVar("T")
ID = TypeVar("ID")


class SearchDbRepository(ABC, Generic[T, ID]):
    """CRUD repository over a document index.

    Implementations must provide:
    - Upserts of single entities and collections
    - Lookups by id, existence checks, full listing and counting
    - Deletion by id and of every document
    """

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert or replace one entity, keyed by its id."""
        pass

    @abstractmethod
    def save_all(self, entities: Iterable[T]) -> list[T]:
        """Insert or replace many entities."""
        pass

    @abstractmethod
    def find_by_id(self, id: ID) -> Optional[T]:
        """Return the entity stored under ``id``, or None."""
        pass

    @abstractmethod
    def exists_by_id(self, id: ID) -> bool:
        pass

    @abstractmethod
    def find_all(self) -> list[T]:
        pass

    @abstractmethod
    def find_all_by_id(self, ids: Iterable[ID]) -> list[T]:
        """Return the entities found for ``ids``; missing ids are skipped."""
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def delete_by_id(self, id: ID) -> None:
        pass

    @abstractmethod
    def delete(self, entity: T) -> None:
        pass

    @abstractmethod
    def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        pass

    @abstractmethod
    def delete_all(self, entities: Optional[Iterable[T]] = None) -> None:
        """Delete every document in the index.

        Passing ``entities`` is not supported and raises UnsupportedOperation.
        """
        pass
