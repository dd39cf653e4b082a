"""Thread-safe facade over the store, schema and executors."""
import threading
from dataclasses import asdict, replace
from typing import Any, Dict, List, Optional
import logging

from bookgraph.config import Config
from bookgraph.executor import Request, Selection, default_selection, execute_request
from bookgraph.resolvers import build_schema
from bookgraph.schema import MUTATION, QUERY, SchemaRegistry
from bookgraph.seed_data import load_seed
from bookgraph.store import Store

logger = logging.getLogger(__name__)


class GraphService:
    """
    Serve query and mutation requests against one store.

    Every request runs under a single lock; there are no transactions and
    a mutation is visible to the next request as soon as it returns.
    """

    def __init__(self, store: Store, schema: Optional[SchemaRegistry] = None):
        self.store = store
        self.schema = schema or build_schema()
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: Config, seed_file: Optional[str] = None) -> "GraphService":
        """Create a service seeded from configuration."""
        books, reviews = load_seed(seed_file or config.SEED_FILE)
        return cls(Store(books, reviews, id_strategy=config.ID_STRATEGY))

    def execute(self, request: Request) -> Dict[str, Any]:
        """Execute a request, filling in a default selection when none is given."""
        if not request.fields:
            root_field = self.schema.get_field(
                MUTATION if request.kind == "mutation" else QUERY, request.operation
            )
            if root_field is not None and self.schema.is_object(root_field.type.name):
                request = replace(request, fields=default_selection(self.schema, root_field.type.name))

        logger.debug(f"Executing {request.kind} {request.operation}")
        with self._lock:
            return execute_request(self.schema, self.store, request)

    def _call(self, operation: str, kind: str, args: Dict[str, Any],
              fields: Optional[List[Selection]]) -> Any:
        request = Request(operation, kind=kind, args=args, fields=fields or [])
        return self.execute(request)[operation]

    def books(self, fields: Optional[List[Selection]] = None) -> List[Dict[str, Any]]:
        return self._call("books", "query", {}, fields)

    def reviews(self, fields: Optional[List[Selection]] = None) -> List[Dict[str, Any]]:
        return self._call("reviews", "query", {}, fields)

    def book(self, book_id: str, fields: Optional[List[Selection]] = None) -> Optional[Dict[str, Any]]:
        return self._call("book", "query", {"id": book_id}, fields)

    def delete_book(self, book_id: str, fields: Optional[List[Selection]] = None) -> Optional[Dict[str, Any]]:
        return self._call("deleteBook", "mutation", {"id": book_id}, fields)

    def add_review(
        self,
        rating: int,
        content: str,
        book_id: str,
        fields: Optional[List[Selection]] = None
    ) -> Dict[str, Any]:
        review = {"rating": rating, "content": content, "bookId": book_id}
        return self._call("addReview", "mutation", {"review": review}, fields)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return self.store.get_stats()

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Plain-data copy of both collections."""
        with self._lock:
            return {
                kind: [asdict(entity) for entity in self.store.list_all(kind)]
                for kind in Store.KINDS
            }

    def close(self):
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
