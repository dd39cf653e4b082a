"""Data models for books and reviews."""
from dataclasses import dataclass


@dataclass
class Book:
    """A book in the catalogue."""
    id: str
    title: str
    author: str


@dataclass
class Review:
    """A review pointing at a book by id (not enforced)."""
    id: str
    rating: int
    content: str
    book_id: str


@dataclass
class AddReviewInput:
    """Input object for the addReview mutation."""
    rating: int
    content: str
    book_id: str
