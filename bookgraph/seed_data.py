"""Seed data for the in-memory store."""
import json
from typing import List, Optional, Tuple
import logging

from bookgraph.errors import SeedDataError
from bookgraph.models import Book, Review
from bookgraph.parse import parse_seed

logger = logging.getLogger(__name__)


def default_books() -> List[Book]:
    return [
        Book(id="1", title="The Awakening", author="Kate Chopin"),
        Book(id="2", title="City of Glass", author="Paul Auster"),
    ]


def default_reviews() -> List[Review]:
    return [
        Review(id="101", rating=5, content="This is amazing!", book_id="1"),
        Review(id="102", rating=4, content="Liked it.", book_id="1"),
        Review(id="103", rating=2, content="Confusing.", book_id="2"),
    ]


def load_seed(path: Optional[str] = None) -> Tuple[List[Book], List[Review]]:
    """
    Load seed books and reviews.

    Args:
        path: JSON file with "books" and "reviews" lists; the built-in
            sample catalogue is used when omitted

    Returns:
        (books, reviews)
    """
    if not path:
        return default_books(), default_reviews()

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SeedDataError(f"Failed to load seed file {path}: {e}") from e

    if not isinstance(data, dict):
        raise SeedDataError(f"Seed file {path} must contain a JSON object")

    books, reviews = parse_seed(data)
    logger.info(f"Loaded {len(books)} books and {len(reviews)} reviews from {path}")
    return books, reviews
