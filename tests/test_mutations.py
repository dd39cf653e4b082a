"""Tests for the mutation executor."""
import pytest

from bookgraph.errors import SelectionError
from bookgraph.executor import MutationExecutor, QueryExecutor, Selection
from bookgraph.parse import parse_selection
from bookgraph.resolvers import build_schema
from bookgraph.seed_data import default_books, default_reviews
from bookgraph.store import Store


def make_executors():
    schema = build_schema()
    store = Store(default_books(), default_reviews())
    return QueryExecutor(schema, store), MutationExecutor(schema, store)


def run(executor, operation, fields, **args):
    return executor.execute(Selection(operation, args=args, children=parse_selection(fields)))


def test_delete_book_returns_deleted_book():
    """Test that deleteBook returns the removed entity."""
    queries, mutations = make_executors()

    deleted = run(mutations, "deleteBook", ["id", "title"], id="1")

    assert deleted == {"id": "1", "title": "The Awakening"}
    assert run(queries, "book", ["id"], id="1") is None


def test_delete_book_leaves_dangling_reviews():
    """Test that reviews of a deleted book survive with a null book."""
    queries, mutations = make_executors()

    run(mutations, "deleteBook", ["id"], id="1")
    reviews = run(queries, "reviews", ["id", "bookId", {"book": ["id"]}])

    assert len(reviews) == 3
    orphaned = [review for review in reviews if review["bookId"] == "1"]
    assert {review["id"] for review in orphaned} == {"101", "102"}
    assert all(review["book"] is None for review in orphaned)


def test_delete_unknown_book():
    """Test that deleting a missing book returns None and changes nothing."""
    queries, mutations = make_executors()

    assert run(mutations, "deleteBook", ["id"], id="999") is None
    assert len(run(queries, "books", ["id"])) == 2


def test_delete_book_reviews_resolve_against_current_store():
    """Test resolving reviews on the deleted book snapshot."""
    _, mutations = make_executors()

    deleted = run(mutations, "deleteBook", ["id", {"reviews": ["id"]}], id="2")

    assert deleted == {"id": "2", "reviews": [{"id": "103"}]}


def test_add_review():
    """Test that addReview stores a review with a fresh id."""
    queries, mutations = make_executors()
    before = run(queries, "reviews", ["id"])

    review = {"rating": 5, "content": "x", "bookId": "1"}
    added = run(mutations, "addReview", ["id", "rating", "content", "bookId"], review=review)

    after = run(queries, "reviews", ["id", "rating", "content", "bookId"])
    assert len(after) == len(before) + 1
    assert added["id"] not in {r["id"] for r in before}
    assert added in after
    assert (added["rating"], added["content"], added["bookId"]) == (5, "x", "1")


def test_add_review_for_missing_book():
    """Test that a review may point at a book that does not exist."""
    _, mutations = make_executors()

    review = {"rating": 1, "content": "Who wrote this?", "bookId": "404"}
    added = run(mutations, "addReview", ["bookId", {"book": ["id"]}], review=review)

    assert added == {"bookId": "404", "book": None}


def test_add_review_appears_on_book():
    """Test that a new review shows up on its book."""
    queries, mutations = make_executors()

    added = run(mutations, "addReview", ["id"], review={"rating": 3, "content": "Ok", "bookId": "2"})
    book = run(queries, "book", [{"reviews": ["id"]}], id="2")

    assert {review["id"] for review in book["reviews"]} == {"103", added["id"]}


def test_ids_stay_unique_across_delete_and_add():
    """Test that repeated adds never reuse an id."""
    queries, mutations = make_executors()
    store = queries.store

    first = run(mutations, "addReview", ["id"], review={"rating": 3, "content": "a", "bookId": "1"})
    store.remove("reviews", "101")
    second = run(mutations, "addReview", ["id"], review={"rating": 3, "content": "b", "bookId": "1"})

    ids = [review["id"] for review in run(queries, "reviews", ["id"])]
    assert first["id"] != second["id"]
    assert len(ids) == len(set(ids))


def test_add_review_missing_input_field():
    """Test that required input fields are checked."""
    _, mutations = make_executors()

    with pytest.raises(SelectionError):
        run(mutations, "addReview", ["id"], review={"rating": 3, "bookId": "1"})


def test_add_review_unknown_input_field():
    """Test that unknown input fields are rejected."""
    _, mutations = make_executors()

    with pytest.raises(SelectionError):
        run(mutations, "addReview", ["id"],
            review={"rating": 3, "content": "a", "bookId": "1", "stars": 5})


def test_add_review_input_must_be_object():
    """Test that the review argument must be an object."""
    _, mutations = make_executors()

    with pytest.raises(SelectionError):
        run(mutations, "addReview", ["id"], review="5 stars")


def test_query_fields_not_reachable_from_mutation():
    """Test that query fields are not mutation entry points."""
    _, mutations = make_executors()

    with pytest.raises(SelectionError):
        run(mutations, "books", ["id"])


def test_add_review_coerces_input_fields():
    """Test that a numeric bookId still links the review to its book."""
    queries, mutations = make_executors()

    review = {"rating": 4.0, "content": "Solid", "bookId": 1}
    added = run(mutations, "addReview", ["id", "rating", "bookId", {"book": ["id"]}], review=review)
    book = run(queries, "book", [{"reviews": ["id"]}], id="1")

    assert added["rating"] == 4
    assert added["bookId"] == "1"
    assert added["book"] == {"id": "1"}
    assert added["id"] in {r["id"] for r in book["reviews"]}
    assert queries.store.get_stats()["dangling_reviews"] == 0


def test_add_review_rejects_non_integer_rating():
    """Test that rating must be an integer."""
    _, mutations = make_executors()

    with pytest.raises(SelectionError):
        run(mutations, "addReview", ["id"], review={"rating": "five", "content": "a", "bookId": "1"})
