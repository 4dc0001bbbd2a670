"""In-memory full-text search with prefix matching, phrases, and boolean queries."""

from inverted_search.domain.model import Document, SearchResponse, SearchResult
from inverted_search.errors import InvalidDocument, InvalidQuery, SearchError
from inverted_search.search.index import InvertedIndex, SynchronizedIndex
from inverted_search.search.query import And, Match, Or, Phrase, Query


__all__ = [
    "And",
    "Document",
    "InvalidDocument",
    "InvalidQuery",
    "InvertedIndex",
    "Match",
    "Or",
    "Phrase",
    "Query",
    "SearchError",
    "SearchResponse",
    "SearchResult",
    "SynchronizedIndex",
]
