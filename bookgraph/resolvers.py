"""Book and review schema declarations with their resolvers."""
from typing import Any, Dict, List, Optional
import logging

from bookgraph.models import Book, Review
from bookgraph.parse import parse_review_input
from bookgraph.schema import SchemaRegistry
from bookgraph.store import Store

logger = logging.getLogger(__name__)

# Parsed form of the SDL served by the tutorial server
SCHEMA_DESCRIPTION = {
    "types": {
        "Book": {
            "id": "ID!",
            "title": "String!",
            "author": "String!",
            "reviews": "[Review]",
        },
        "Review": {
            "id": "ID!",
            "rating": "Int!",
            "content": "String!",
            "bookId": "ID!",
            "book": "Book",
        },
    },
    "inputs": {
        "AddReviewInput": {
            "rating": "Int!",
            "content": "String!",
            "bookId": "ID!",
        },
    },
    "query": {
        "books": "[Book]",
        "reviews": "[Review]",
        # Nullable so an unknown id can come back as null
        "book": {"type": "Book", "args": {"id": "ID!"}},
    },
    "mutation": {
        "deleteBook": {"type": "Book", "args": {"id": "ID!"}},
        "addReview": {"type": "Review", "args": {"review": "AddReviewInput!"}},
    },
}


def resolve_books(parent, args: Dict[str, Any], store: Store) -> List[Book]:
    return store.list_all("books")


def resolve_reviews(parent, args: Dict[str, Any], store: Store) -> List[Review]:
    return store.list_all("reviews")


def resolve_book(parent, args: Dict[str, Any], store: Store) -> Optional[Book]:
    return store.find_by_id("books", args["id"])


def resolve_book_reviews(parent: Book, args: Dict[str, Any], store: Store) -> List[Review]:
    return store.filter("reviews", lambda review: review.book_id == parent.id)


def resolve_review_book(parent: Review, args: Dict[str, Any], store: Store) -> Optional[Book]:
    logger.debug(f"Resolving book {parent.book_id} for review {parent.id}")
    return store.find_by_id("books", parent.book_id)


def resolve_delete_book(parent, args: Dict[str, Any], store: Store) -> Optional[Book]:
    """
    Delete a book and return it.

    Reviews of the book are left in place and keep pointing at its id.
    """
    book = store.find_by_id("books", args["id"])
    if book is None:
        logger.info(f"deleteBook: no book with id {args['id']}")
        return None
    return store.remove("books", book.id)


def resolve_add_review(parent, args: Dict[str, Any], store: Store) -> Review:
    """Store a new review. The referenced book is not required to exist."""
    review_input = parse_review_input(args["review"])
    review = Review(
        id=store.next_id("reviews"),
        rating=review_input.rating,
        content=review_input.content,
        book_id=review_input.book_id
    )
    return store.insert("reviews", review)


RESOLVERS = {
    "Query": {
        "books": resolve_books,
        "reviews": resolve_reviews,
        "book": resolve_book,
    },
    "Book": {
        "reviews": resolve_book_reviews,
    },
    "Review": {
        "book": resolve_review_book,
    },
    "Mutation": {
        "deleteBook": resolve_delete_book,
        "addReview": resolve_add_review,
    },
}


def build_schema() -> SchemaRegistry:
    """Build the book/review schema registry."""
    return SchemaRegistry.from_description(SCHEMA_DESCRIPTION, RESOLVERS)
