"""Record store capability and the typed collection built on top of it.

A ``RecordStore`` is the backend-specific part of the persistence gateway: it
moves raw JSON bodies in and out of named collections. Two implementations
exist (SQL document table, local JSON files) and are interchangeable.

``Collection`` is the backend-neutral part: it converts between pydantic
entities and stored bodies and implements the list/create/update/delete
contract every caller relies on. Subclasses only set ``name`` and
``model_class``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from ..schemas.common import WireModel

EntityT = TypeVar("EntityT", bound=WireModel)


class RecordStore(ABC):
    """Async raw-document storage, one namespace per collection.

    Every method raises ``StorageError`` on backend faults.
    """

    @abstractmethod
    async def list_records(self, collection: str) -> List[Dict[str, Any]]:
        """All bodies in arrival order (oldest first)."""

    @abstractmethod
    async def insert(self, collection: str, record_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new body. Raises ``DuplicateRecordError`` if the id exists."""

    @abstractmethod
    async def replace(self, collection: str, record_id: str, body: Dict[str, Any]) -> None:
        """Overwrite the full body. Raises ``RecordNotFoundError`` if missing."""

    @abstractmethod
    async def remove(self, collection: str, record_id: str) -> bool:
        """Delete a body. Returns False when nothing was stored under the id."""

    @abstractmethod
    async def prune(self, collection: str, keep: int) -> int:
        """Drop all but the ``keep`` most recently inserted bodies. Returns the count dropped."""

    async def close(self) -> None:
        """Release backend resources. Default is a no-op."""


class Collection(Generic[EntityT]):
    """Typed CRUD over one collection of a ``RecordStore``.

    Class variables to set in subclasses:
        name:        Collection name (also the storage namespace)
        model_class: The pydantic entity stored in this collection
    """

    name: str
    model_class: Type[EntityT]

    def __init__(self, store: RecordStore):
        self.store = store

    async def list(self, order_by: Optional[str] = None, descending: bool = False) -> List[EntityT]:
        """Fetch every entity.

        Without ``order_by`` entities come back in arrival order. ``order_by``
        names a wire field (e.g. ``"updatedAt"``); ISO timestamps sort
        chronologically as strings. Bodies missing the field sort first.
        """
        bodies = await self.store.list_records(self.name)
        if order_by:
            bodies = sorted(bodies, key=lambda b: str(b.get(order_by) or ""), reverse=descending)
        return [self.model_class.from_record(b) for b in bodies]

    async def create(self, entity: EntityT) -> EntityT:
        """Insert with the caller-supplied id and return the stored entity."""
        body = await self.store.insert(self.name, entity.id, entity.to_record())
        return self.model_class.from_record(body)

    async def update(self, entity: EntityT) -> None:
        """Full-document overwrite; fields absent from ``entity`` are removed."""
        await self.store.replace(self.name, entity.id, entity.to_record())

    async def delete(self, entity_id: str) -> None:
        """Remove by id. Deleting an id that is already gone succeeds silently."""
        await self.store.remove(self.name, entity_id)
