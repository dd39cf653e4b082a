"""Parse and normalize plain-data requests, selections and seed records."""
from typing import Dict, Any, List, Optional, Tuple
import logging

from bookgraph.errors import SeedDataError, SelectionError
from bookgraph.executor import Request, Selection
from bookgraph.models import AddReviewInput, Book, Review

logger = logging.getLogger(__name__)

OPERATION_TYPES = ("query", "mutation")


def _parse_field_name(text: str) -> Tuple[str, Optional[str]]:
    """Split "alias:field" into (field, alias)."""
    if not isinstance(text, str) or not text.strip():
        raise SelectionError(f"Invalid field name: {text!r}")

    alias, sep, name = text.partition(":")
    if not sep:
        return text.strip(), None
    if not alias.strip() or not name.strip():
        raise SelectionError(f"Invalid aliased field: {text!r}")
    return name.strip(), alias.strip()


def parse_selection(spec: Any) -> List[Selection]:
    """
    Parse a selection set.

    Args:
        spec: List of field names, or single-key dicts mapping a field
            name to its nested selection, e.g.
            ["id", "title", {"reviews": ["id", "rating"]}]

    Returns:
        List of Selection objects
    """
    if not isinstance(spec, list):
        raise SelectionError(f"Selection set must be a list, got {type(spec).__name__}")

    selections = []
    for item in spec:
        if isinstance(item, str):
            name, alias = _parse_field_name(item)
            selections.append(Selection(name, alias=alias))
        elif isinstance(item, dict) and len(item) == 1:
            key, children = next(iter(item.items()))
            name, alias = _parse_field_name(key)
            selections.append(Selection(name, children=parse_selection(children), alias=alias))
        else:
            raise SelectionError(f"Invalid selection item: {item!r}")

    return selections


def parse_request(data: Dict[str, Any]) -> Request:
    """
    Parse a request object.

    Args:
        data: {"operation": ..., "type": "query"|"mutation",
               "args": {...}, "fields": [...]}

    Returns:
        Request object
    """
    if not isinstance(data, dict):
        raise SelectionError(f"Request must be an object, got {type(data).__name__}")

    operation = data.get("operation")
    if not operation:
        raise SelectionError("Request has no operation")
    name, alias = _parse_field_name(operation)

    kind = data.get("type", "query")
    if kind not in OPERATION_TYPES:
        raise SelectionError(f"Unknown operation type {kind!r}")

    args = data.get("args", {})
    if not isinstance(args, dict):
        raise SelectionError("Request args must be an object")

    fields = data.get("fields")
    selections = parse_selection(fields) if fields is not None else []

    return Request(operation=name, kind=kind, args=args, fields=selections, alias=alias)


def parse_review_input(data: Dict[str, Any]) -> AddReviewInput:
    """Build an AddReviewInput from its schema-shaped dict."""
    return AddReviewInput(
        rating=data["rating"],
        content=data["content"],
        book_id=data["bookId"]
    )


def parse_book(item: Dict[str, Any]) -> Optional[Book]:
    """
    Parse a single book record.

    Returns:
        Book object or None if the record has no id or is malformed
    """
    try:
        book_id = item.get("id")
        if not book_id:
            logger.warning(f"Skipping book without id: {item!r}")
            return None

        return Book(
            id=str(book_id),
            title=item.get("title", "Unknown Title"),
            author=item.get("author", "Unknown")
        )
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning(f"Skipping malformed book {item!r}: {e}")
        return None


def parse_review(item: Dict[str, Any]) -> Optional[Review]:
    """
    Parse a single review record.

    Accepts both "bookId" and "book_id". Malformed records are skipped.
    """
    try:
        review_id = item.get("id")
        if not review_id:
            logger.warning(f"Skipping review without id: {item!r}")
            return None

        book_id = item.get("bookId", item.get("book_id"))
        return Review(
            id=str(review_id),
            rating=int(item.get("rating", 0)),
            content=item.get("content", ""),
            book_id=str(book_id) if book_id is not None else ""
        )
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning(f"Skipping malformed review {item!r}: {e}")
        return None


def deduplicate(entities: List[Any]) -> List[Any]:
    """
    Remove duplicate entities by ID, keeping the first.

    Args:
        entities: List of entities

    Returns:
        Deduplicated list
    """
    seen_ids = set()
    unique = []

    for entity in entities:
        if entity.id not in seen_ids:
            seen_ids.add(entity.id)
            unique.append(entity)
        else:
            logger.warning(f"Dropping duplicate id {entity.id}")

    return unique


def _records(data: Dict[str, Any], key: str) -> List[Any]:
    records = data.get(key, [])
    if not isinstance(records, list):
        raise SeedDataError(f"Seed {key!r} must be a list, got {type(records).__name__}")
    return records


def parse_seed(data: Dict[str, Any]) -> Tuple[List[Book], List[Review]]:
    """
    Parse seed data into book and review lists.

    Args:
        data: {"books": [...], "reviews": [...]}

    Returns:
        (books, reviews), each with unique ids
    """
    books = [book for book in map(parse_book, _records(data, "books")) if book]
    reviews = [review for review in map(parse_review, _records(data, "reviews")) if review]
    return deduplicate(books), deduplicate(reviews)
