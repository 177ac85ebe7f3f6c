"""Mapping between typed entities and index documents.

Any type pydantic can build a schema for works as an entity type: BaseModel
subclasses, dataclasses, TypedDicts. The type is passed in explicitly when the
codec is built; nothing is inferred from generic parameters at runtime.
"""

from collections.abc import Iterable, Sequence
from functools import lru_cache
from typing import Any, Generic, Optional, TypeVar

from pydantic import PydanticSchemaGenerationError, PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from ..config.settings import PRIMARY_KEY
from ..errors import DecodingError, EncodingError
from .models import Document

T = TypeVar("T")


@lru_cache(maxsize=128)
def _adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


class EntityCodec(Generic[T]):
    """Encodes entities to documents and decodes documents to entities.

    Attributes:
        entity_type: Default type documents are decoded into
        primary_key: Field every document must carry as identifier

    Example:
        >>> codec = EntityCodec(Book)
        >>> docs = codec.encode([Book(id="1", title="Dune")])
        >>> codec.decode(docs[0])
        Book(id='1', title='Dune')
    """

    def __init__(self, entity_type: type[T], primary_key: str = PRIMARY_KEY) -> None:
        self.entity_type = entity_type
        self.primary_key = primary_key

    @staticmethod
    def _resolve(target: Any) -> TypeAdapter:
        try:
            return _adapter(target)
        except (PydanticSchemaGenerationError, PydanticUserError, TypeError) as e:
            raise DecodingError(f"Cannot resolve entity type {target!r}: {e}") from e

    def encode(self, entities: Iterable[T]) -> list[Document]:
        """Serialize entities to JSON-compatible documents.

        Raises:
            EncodingError: If an entity cannot be represented (wrong type,
                cyclic structure, unsupported value) or has no usable identifier
        """
        items = list(entities)
        try:
            adapter = _adapter(list[self.entity_type])
            documents = adapter.dump_python(items, mode="json", warnings="error")
        except (PydanticSchemaGenerationError, PydanticUserError) as e:
            raise EncodingError(f"Cannot resolve entity type {self.entity_type!r}: {e}") from e
        except (PydanticSerializationError, ValueError, TypeError) as e:
            raise EncodingError(f"Cannot encode {self.entity_type!r} entities: {e}") from e

        for position, document in enumerate(documents):
            self._check_identifier(position, document)
        return documents

    def _check_identifier(self, position: int, document: Any) -> None:
        if not isinstance(document, dict):
            raise EncodingError(
                f"Entity at position {position} did not encode to an object"
            )
        identifier = document.get(self.primary_key)
        if isinstance(identifier, bool) or not isinstance(identifier, (str, int)):
            raise EncodingError(
                f"Entity at position {position} has no usable '{self.primary_key}' field",
                details={"position": position, "identifier": identifier},
            )

    def to_json(self, documents: Sequence[Document]) -> bytes:
        """Render encoded documents as a JSON array for a request body."""
        try:
            return to_json(list(documents))
        except PydanticSerializationError as e:
            raise EncodingError(f"Cannot render documents as JSON: {e}") from e

    def decode(self, document: Document, target_type: Optional[Any] = None) -> T:
        """Build an entity from a document.

        Raises:
            DecodingError: If the document does not match the type, or the
                type cannot be resolved
        """
        target = self.entity_type if target_type is None else target_type
        adapter = self._resolve(target)
        try:
            return adapter.validate_python(document)
        except ValidationError as e:
            raise DecodingError(
                f"Document does not match {target!r}: {e}",
                details={"errors": e.error_count()},
            ) from e

    def decode_many(self, documents: Iterable[Document], target_type: Optional[Any] = None) -> list[T]:
        """Decode every document; the first malformed one fails the call."""
        return [self.decode(document, target_type) for document in documents]
