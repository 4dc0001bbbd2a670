"""Exceptions raised by the search engine."""


class SearchError(ValueError):
    """Base class for engine usage errors."""


class InvalidDocument(SearchError):
    """Raised when a document cannot be indexed (missing or empty id, non-text content)."""


class InvalidQuery(SearchError):
    """Raised when a query is malformed before any index traversal happens."""
