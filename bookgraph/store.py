"""In-memory store for book and review collections."""
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional
import logging

from bookgraph.errors import UnknownKindError

logger = logging.getLogger(__name__)

ID_STRATEGIES = ("counter", "uuid", "length")


class Store:
    """Owned entity collections with linear-scan lookups."""

    KINDS = ("books", "reviews")

    def __init__(
        self,
        books: Optional[Iterable[Any]] = None,
        reviews: Optional[Iterable[Any]] = None,
        id_strategy: str = "counter"
    ):
        """
        Initialize the store with seed data.

        Args:
            books: Initial Book entities
            reviews: Initial Review entities
            id_strategy: One of "counter", "uuid" or "length"
        """
        if id_strategy not in ID_STRATEGIES:
            raise ValueError(
                f"Unknown id strategy {id_strategy!r}, expected one of {ID_STRATEGIES}"
            )

        self.id_strategy = id_strategy
        self._collections: Dict[str, List[Any]] = {
            "books": list(books or []),
            "reviews": list(reviews or []),
        }
        self._counters: Dict[str, int] = {}

        logger.info(
            f"Store initialized with {len(self._collections['books'])} books "
            f"and {len(self._collections['reviews'])} reviews"
        )

    def _collection(self, kind: str) -> List[Any]:
        try:
            return self._collections[kind]
        except KeyError:
            raise UnknownKindError(kind) from None

    def list_all(self, kind: str) -> List[Any]:
        """Return a snapshot of every entity of the given kind."""
        return list(self._collection(kind))

    def find_by_id(self, kind: str, entity_id: str) -> Optional[Any]:
        """Find an entity by id, or None if absent."""
        for entity in self._collection(kind):
            if entity.id == entity_id:
                return entity
        return None

    def filter(self, kind: str, predicate: Callable[[Any], bool]) -> List[Any]:
        """Return entities of the given kind matching the predicate."""
        return [entity for entity in self._collection(kind) if predicate(entity)]

    def insert(self, kind: str, entity: Any) -> Any:
        """
        Append an entity to its collection.

        Id uniqueness is not checked here; use next_id() to obtain one.

        Args:
            kind: Collection name
            entity: Entity to store

        Returns:
            The stored entity
        """
        self._collection(kind).append(entity)
        logger.info(f"Inserted {kind} entity {entity.id}")
        return entity

    def remove(self, kind: str, entity_id: str) -> Optional[Any]:
        """
        Remove an entity by id.

        Returns:
            The removed entity, or None if nothing matched
        """
        collection = self._collection(kind)
        for index, entity in enumerate(collection):
            if entity.id == entity_id:
                del collection[index]
                logger.info(f"Removed {kind} entity {entity_id}")
                return entity
        return None

    def next_id(self, kind: str) -> str:
        """
        Generate a new id for the given collection.

        The "length" strategy reproduces the size-based scheme of the
        tutorial server and can repeat ids after deletions.
        """
        collection = self._collection(kind)
        taken = {entity.id for entity in collection}

        if self.id_strategy == "uuid":
            return uuid.uuid4().hex

        if self.id_strategy == "length":
            new_id = str(len(collection) + 1)
            if new_id in taken:
                logger.warning(f"Generated id {new_id} already exists in {kind}")
            return new_id

        counter = self._counters.get(kind, len(collection) + 1)
        while str(counter) in taken:
            counter += 1
        self._counters[kind] = counter + 1
        return str(counter)

    def get_stats(self) -> Dict[str, int]:
        """Get collection statistics."""
        book_ids = {book.id for book in self._collections["books"]}
        dangling = [
            review for review in self._collections["reviews"]
            if review.book_id not in book_ids
        ]
        return {
            "total_books": len(self._collections["books"]),
            "total_reviews": len(self._collections["reviews"]),
            "dangling_reviews": len(dangling),
        }

    def close(self):
        """Drop all stored entities."""
        for collection in self._collections.values():
            collection.clear()
        self._counters.clear()
        logger.info("Store closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
