"""Exception hierarchy for the book graph engine."""


class BookGraphError(Exception):
    """Base class for all book graph errors."""


class SchemaError(BookGraphError):
    """Raised when schema declarations are inconsistent."""


class SelectionError(BookGraphError):
    """Raised when a request or selection set is malformed."""


class UnknownKindError(BookGraphError, KeyError):
    """Raised when the store is asked for a collection it does not hold."""

    def __init__(self, kind: str):
        super().__init__(kind)
        self.kind = kind

    def __str__(self):
        return f"Unknown entity kind: {self.kind!r}"


class SeedDataError(BookGraphError):
    """Raised when seed data cannot be loaded."""
