"""Tests for the in-memory store."""
import logging

import pytest

from bookgraph.errors import UnknownKindError
from bookgraph.models import Book, Review
from bookgraph.store import Store


def make_store(**kwargs):
    books = [
        Book("1", "The Awakening", "Kate Chopin"),
        Book("2", "City of Glass", "Paul Auster"),
    ]
    reviews = [
        Review("101", 5, "This is amazing!", "1"),
        Review("102", 4, "Liked it.", "1"),
        Review("103", 2, "Confusing.", "2"),
    ]
    return Store(books, reviews, **kwargs)


def test_find_by_id():
    """Test lookup of present and absent ids."""
    store = make_store()

    assert store.find_by_id("books", "2").title == "City of Glass"
    assert store.find_by_id("books", "999") is None


def test_list_all_returns_snapshot():
    """Test that later mutations do not alter a list already handed out."""
    store = make_store()
    books = store.list_all("books")

    store.remove("books", "1")

    assert [book.id for book in books] == ["1", "2"]
    assert [book.id for book in store.list_all("books")] == ["2"]


def test_filter():
    """Test filtering by predicate."""
    store = make_store()

    reviews = store.filter("reviews", lambda review: review.book_id == "1")

    assert [review.id for review in reviews] == ["101", "102"]


def test_insert_does_not_check_uniqueness():
    """Test that insert appends even when the id is taken."""
    store = make_store()

    store.insert("books", Book("1", "Duplicate", "Nobody"))

    assert len(store.list_all("books")) == 3


def test_remove():
    """Test removing present and absent ids."""
    store = make_store()

    removed = store.remove("books", "1")

    assert removed == Book("1", "The Awakening", "Kate Chopin")
    assert store.find_by_id("books", "1") is None
    assert store.remove("books", "1") is None
    assert len(store.list_all("books")) == 1


def test_unknown_kind():
    """Test that an unknown collection raises."""
    store = make_store()

    with pytest.raises(UnknownKindError):
        store.list_all("authors")
    with pytest.raises(KeyError):
        store.find_by_id("authors", "1")


def test_counter_ids_never_repeat_after_delete():
    """Test the counter strategy across delete and add cycles."""
    store = Store(reviews=[Review("1", 5, "a", "1"), Review("2", 4, "b", "1")])

    first = store.next_id("reviews")
    store.insert("reviews", Review(first, 3, "c", "1"))
    store.remove("reviews", "1")
    second = store.next_id("reviews")

    assert first == "3"
    assert second == "4"


def test_counter_skips_taken_ids():
    """Test that the counter skips ids already present."""
    store = Store(reviews=[Review("2", 5, "a", "1"), Review("3", 4, "b", "1")])

    assert store.next_id("reviews") == "4"


def test_length_strategy_reproduces_collision(caplog):
    """Test that the length strategy repeats ids and warns."""
    store = Store(reviews=[Review("1", 5, "a", "1"), Review("2", 4, "b", "1")], id_strategy="length")
    store.insert("reviews", Review(store.next_id("reviews"), 3, "c", "1"))
    store.remove("reviews", "1")

    with caplog.at_level(logging.WARNING):
        new_id = store.next_id("reviews")

    assert new_id == "3"
    assert "already exists" in caplog.text


def test_uuid_strategy():
    """Test uuid ids are fresh hex strings."""
    store = make_store(id_strategy="uuid")

    first = store.next_id("reviews")
    second = store.next_id("reviews")

    assert len(first) == 32
    assert first != second


def test_invalid_strategy():
    """Test that an unknown id strategy is rejected."""
    with pytest.raises(ValueError):
        Store(id_strategy="random")


def test_get_stats_counts_dangling_reviews():
    """Test statistics after deleting a reviewed book."""
    store = make_store()
    store.remove("books", "1")

    assert store.get_stats() == {
        "total_books": 1,
        "total_reviews": 3,
        "dangling_reviews": 2,
    }


def test_context_manager_clears_store():
    """Test that closing the store drops its entities."""
    with make_store() as store:
        assert store.get_stats()["total_books"] == 2

    assert store.list_all("books") == []
    assert store.list_all("reviews") == []
