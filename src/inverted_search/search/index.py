"""In-memory document index: indexing, replacement, removal, and ranked queries.

The index owns every posting and term node. Callers only ever receive frozen
``Document``/``SearchResult`` values, never references into internal state.
Re-indexing an id replaces the previous document: the terms it contributed
are tracked per id so removal touches only those terms instead of scanning
the whole vocabulary.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager, nullcontext
import logging
import threading
import time
from typing import Any

from pydantic import ValidationError

from inverted_search.config import get_settings
from inverted_search.domain.model import Document, SearchResponse, SearchResult
from inverted_search.errors import InvalidDocument, InvalidQuery
from inverted_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_OPERATIONS,
    INDEX_TERM_COUNT,
    QUERY_COUNT,
    QUERY_LATENCY,
    track_latency,
)
from inverted_search.observability.context import index_context
from inverted_search.observability.tracing import create_span
from inverted_search.search.analyzers import analyze
from inverted_search.search.models import Position
from inverted_search.search.query import Match, MatchSet, Query, QueryEvaluator, validate_query
from inverted_search.search.scoring import rank_key, score_spans
from inverted_search.search.trie import TermTrie


logger = logging.getLogger(__name__)


class InvertedIndex:
    """Prefix-searchable inverted index over whole documents.

    Not thread-safe; wrap in ``SynchronizedIndex`` (or guard with one lock)
    when shared between threads.
    """

    def __init__(self, name: str = "default", *, instrument: bool | None = None) -> None:
        self.name = name
        self._instrument = get_settings().instrumentation_enabled if instrument is None else instrument
        self._trie = TermTrie()
        self._evaluator = QueryEvaluator(self._trie)
        self._documents: dict[str, Document] = {}
        self._doc_terms: dict[str, set[str]] = {}

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __repr__(self) -> str:
        return f"InvertedIndex(name={self.name!r}, documents={len(self._documents)}, terms={len(self._trie)})"

    @property
    def term_count(self) -> int:
        """Number of distinct terms currently indexed."""
        return len(self._trie)

    def get(self, doc_id: str) -> Document | None:
        return self._documents.get(doc_id)

    def documents(self) -> Iterator[Document]:
        """Iterate over indexed documents ordered by id."""
        for doc_id in sorted(self._documents):
            yield self._documents[doc_id]

    def index(self, document: Document | Mapping[str, Any]) -> None:
        """Insert ``document``, replacing any earlier document with the same id.

        Raises:
            InvalidDocument: if the id is missing or empty, or fields are not
                strings. Nothing is changed in that case.
        """
        document = _coerce_document(document)
        tokens = list(analyze(document.text))
        replacing = document.id in self._documents
        operation = "replace" if replacing else "index"

        attributes = {"document.id": document.id, "document.tokens": len(tokens)}
        with index_context(self.name), self._span("index", attributes):
            if replacing:
                self._drop(document.id)
            terms: set[str] = set()
            for token in tokens:
                self._trie.insert(token.text, document.id, Position(token.start_char, token.end_char, token.position))
                terms.add(token.text)
            self._doc_terms[document.id] = terms
            self._documents[document.id] = document
            logger.debug(
                "%s document %r (%d tokens, %d terms)", operation.capitalize(), document.id, len(tokens), len(terms)
            )

        self._record_mutation(operation)

    def index_many(self, documents: Iterable[Document | Mapping[str, Any]]) -> int:
        """Index each document in turn; returns how many were indexed."""
        count = 0
        for document in documents:
            self.index(document)
            count += 1
        return count

    def remove(self, doc_id: str) -> bool:
        """Remove a document and all of its postings. Returns False if unknown."""
        if doc_id not in self._documents:
            return False
        with index_context(self.name), self._span("remove", {"document.id": doc_id}):
            self._drop(doc_id)
            logger.debug("Removed document %r", doc_id)
        self._record_mutation("remove")
        return True

    def clear(self) -> None:
        """Remove every document."""
        self._trie.clear()
        self._documents.clear()
        self._doc_terms.clear()
        with index_context(self.name):
            logger.debug("Cleared index %r", self.name)
        self._update_gauges()

    def search(self, text: str, limit: int | None = None) -> list[SearchResult]:
        """Shorthand for ``query(Match(text))``."""
        return self.query(Match(text), limit=limit)

    def query(self, expr: Query, limit: int | None = None) -> list[SearchResult]:
        """Evaluate ``expr`` and return results ranked by score.

        Raises:
            InvalidQuery: if the query (or ``limit``) is malformed.
        """
        if limit is not None and limit < 0:
            msg = f"limit must be non-negative, got {limit}"
            raise InvalidQuery(msg)

        kind = getattr(expr, "kind", type(expr).__name__.lower())
        with index_context(self.name):
            try:
                validate_query(expr)
            except InvalidQuery as exc:
                logger.warning("Rejected %s query on index %r: %s", kind, self.name, exc)
                self._record_query(kind, "invalid")
                raise

            with self._span("query", {"query.kind": kind}), self._latency():
                match_set = self._evaluator.evaluate(expr)
                results = self._rank(match_set)
                logger.debug("%s query matched %d documents", kind.capitalize(), len(results))

        self._record_query(kind, "ok")
        return results if limit is None else results[:limit]

    def search_response(self, expr: Query | str, limit: int | None = None) -> SearchResponse:
        """Run a query and wrap its results with the total count and elapsed time."""
        if isinstance(expr, str):
            expr = Match(expr)
        if limit is not None and limit < 0:
            msg = f"limit must be non-negative, got {limit}"
            raise InvalidQuery(msg)
        started = time.perf_counter()
        results = self.query(expr)
        elapsed_ms = (time.perf_counter() - started) * 1000
        return SearchResponse(
            results=results if limit is None else results[:limit],
            total=len(results),
            elapsed_ms=elapsed_ms,
        )

    def _drop(self, doc_id: str) -> None:
        self._trie.remove_document(doc_id, self._doc_terms.pop(doc_id, ()))
        del self._documents[doc_id]

    def _rank(self, match_set: MatchSet) -> list[SearchResult]:
        results: list[SearchResult] = []
        for doc_id, spans in match_set.items():
            document = self._documents[doc_id]
            ordered = tuple(sorted(spans))
            score = score_spans(ordered, len(document.text))
            if score <= 0:
                continue
            results.append(SearchResult(document=document, spans=ordered, score=score))
        results.sort(key=lambda result: rank_key(result.document.id, result.score))
        return results

    def _span(self, operation: str, attributes: dict[str, Any]):
        if not self._instrument:
            return nullcontext()
        return create_span(f"inverted_search.{operation}", attributes={"index.name": self.name, **attributes})

    def _latency(self):
        if not self._instrument:
            return nullcontext()
        return track_latency(QUERY_LATENCY, index=self.name)

    def _record_mutation(self, operation: str) -> None:
        if not self._instrument:
            return
        INDEX_OPERATIONS.labels(index=self.name, operation=operation).inc()
        self._update_gauges()

    def _record_query(self, kind: str, status: str) -> None:
        if self._instrument:
            QUERY_COUNT.labels(index=self.name, kind=kind, status=status).inc()

    def _update_gauges(self) -> None:
        if not self._instrument:
            return
        INDEX_DOC_COUNT.labels(index=self.name).set(len(self._documents))
        INDEX_TERM_COUNT.labels(index=self.name).set(len(self._trie))


class SynchronizedIndex:
    """``InvertedIndex`` guarded by a single lock for readers and writers alike."""

    def __init__(self, index: InvertedIndex | None = None) -> None:
        self._index = index if index is not None else InvertedIndex()
        self._lock = threading.RLock()

    @contextmanager
    def locked(self) -> Iterator[InvertedIndex]:
        """Hold the lock across several calls on the wrapped index."""
        with self._lock:
            yield self._index

    def __len__(self) -> int:
        with self._lock:
            return len(self._index)

    def __contains__(self, doc_id: object) -> bool:
        with self._lock:
            return doc_id in self._index

    @property
    def term_count(self) -> int:
        with self._lock:
            return self._index.term_count

    def get(self, doc_id: str) -> Document | None:
        with self._lock:
            return self._index.get(doc_id)

    def documents(self) -> list[Document]:
        """Snapshot of indexed documents ordered by id, taken under the lock."""
        with self._lock:
            return list(self._index.documents())

    def index(self, document: Document | Mapping[str, Any]) -> None:
        with self._lock:
            self._index.index(document)

    def index_many(self, documents: Iterable[Document | Mapping[str, Any]]) -> int:
        with self._lock:
            return self._index.index_many(documents)

    def remove(self, doc_id: str) -> bool:
        with self._lock:
            return self._index.remove(doc_id)

    def clear(self) -> None:
        with self._lock:
            self._index.clear()

    def search(self, text: str, limit: int | None = None) -> list[SearchResult]:
        with self._lock:
            return self._index.search(text, limit=limit)

    def query(self, expr: Query, limit: int | None = None) -> list[SearchResult]:
        with self._lock:
            return self._index.query(expr, limit=limit)

    def search_response(self, expr: Query | str, limit: int | None = None) -> SearchResponse:
        with self._lock:
            return self._index.search_response(expr, limit=limit)


def _coerce_document(document: Document | Mapping[str, Any]) -> Document:
    if isinstance(document, Mapping):
        try:
            document = Document.model_validate(dict(document))
        except ValidationError as exc:
            msg = f"Invalid document: {exc.errors()[0]['msg']}"
            raise InvalidDocument(msg) from exc
    elif not isinstance(document, Document):
        msg = f"Expected a Document, got {type(document).__name__}"
        raise InvalidDocument(msg)
    if not document.id:
        msg = "Document id must not be empty"
        raise InvalidDocument(msg)
    return document
