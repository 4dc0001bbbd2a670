"""Query expressions and their evaluation against the term index.

A query is one of four variants: ``Match``, ``Phrase``, ``And`` and ``Or``.
Evaluation produces a match set, ``{doc_id: {(start, end), ...}}``, holding
the spans that justify each document's membership.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import logging
from typing import ClassVar, Union

from inverted_search.errors import InvalidQuery
from inverted_search.search.analyzers import analyze_terms
from inverted_search.search.models import Position, Span
from inverted_search.search.phrase import find_phrase_spans, index_by_ordinal
from inverted_search.search.trie import TermTrie


logger = logging.getLogger(__name__)

MatchSet = dict[str, set[Span]]


@dataclass(frozen=True)
class Match:
    """Documents containing a term that starts with each word of ``text``."""

    text: str
    kind: ClassVar[str] = "match"


@dataclass(frozen=True)
class Phrase:
    """Documents where the words of ``text`` appear on consecutive tokens."""

    text: str
    kind: ClassVar[str] = "phrase"


@dataclass(frozen=True)
class And:
    """Documents matched by every sub-query."""

    queries: tuple[Query, ...]
    kind: ClassVar[str] = "and"

    def __init__(self, queries: Iterable[Query]) -> None:
        object.__setattr__(self, "queries", tuple(queries))


@dataclass(frozen=True)
class Or:
    """Documents matched by at least one sub-query."""

    queries: tuple[Query, ...]
    kind: ClassVar[str] = "or"

    def __init__(self, queries: Iterable[Query]) -> None:
        object.__setattr__(self, "queries", tuple(queries))


Query = Union[Match, Phrase, And, Or]


def _query_terms(query: Match | Phrase) -> list[str]:
    if not isinstance(query.text, str):
        msg = f"{type(query).__name__} text must be a string, got {type(query.text).__name__}"
        raise InvalidQuery(msg)
    if not query.text.strip():
        msg = f"{type(query).__name__} text must not be empty or whitespace"
        raise InvalidQuery(msg)
    terms = analyze_terms(query.text)
    if not terms:
        msg = f"{type(query).__name__} text {query.text!r} contains no searchable words"
        raise InvalidQuery(msg)
    return terms


def validate_query(query: object) -> None:
    """Raise ``InvalidQuery`` if ``query`` or any sub-query is malformed."""
    if isinstance(query, (Match, Phrase)):
        _query_terms(query)
        return
    if isinstance(query, (And, Or)):
        if not query.queries:
            msg = f"{type(query).__name__} requires at least one sub-query"
            raise InvalidQuery(msg)
        for sub_query in query.queries:
            validate_query(sub_query)
        return
    msg = f"Unsupported query type: {type(query).__name__}"
    raise InvalidQuery(msg)


class QueryEvaluator:
    """Evaluates query trees against a ``TermTrie``."""

    def __init__(self, trie: TermTrie) -> None:
        self._trie = trie

    def evaluate(self, query: Query) -> MatchSet:
        """Validate then evaluate ``query``.

        Raises:
            InvalidQuery: before any traversal, if the query is malformed.
        """
        validate_query(query)
        return self._evaluate(query)

    def _evaluate(self, query: Query) -> MatchSet:
        if isinstance(query, Match):
            return self._match(query)
        if isinstance(query, Phrase):
            return self._phrase(query)
        sub_results = [self._evaluate(sub_query) for sub_query in query.queries]
        if isinstance(query, And):
            return intersect_match_sets(sub_results)
        return union_match_sets(sub_results)

    def _match(self, query: Match) -> MatchSet:
        result: MatchSet = defaultdict(set)
        for term in dict.fromkeys(_query_terms(query)):
            for _, postings in self._trie.lookup_prefix(term):
                for doc_id, posting in postings.items():
                    result[doc_id].update(posting.spans)
        return dict(result)

    def _phrase(self, query: Phrase) -> MatchSet:
        terms = _query_terms(query)
        per_term = [self._positions_by_document(term) for term in terms]
        candidates = set(per_term[0])
        for positions in per_term[1:]:
            candidates &= positions.keys()

        result: MatchSet = {}
        for doc_id in candidates:
            spans = find_phrase_spans([positions[doc_id] for positions in per_term])
            if spans:
                result[doc_id] = set(spans)
        logger.debug("Phrase %r matched %d of %d candidate documents", query.text, len(result), len(candidates))
        return result

    def _positions_by_document(self, prefix: str) -> dict[str, dict[int, Position]]:
        by_document: dict[str, dict[int, Position]] = defaultdict(dict)
        for _, postings in self._trie.lookup_prefix(prefix):
            for doc_id, posting in postings.items():
                by_document[doc_id].update(index_by_ordinal(posting.positions))
        return by_document


def union_match_sets(match_sets: Sequence[MatchSet]) -> MatchSet:
    """Documents in any match set, with their spans unioned."""
    result: MatchSet = defaultdict(set)
    for match_set in match_sets:
        for doc_id, spans in match_set.items():
            result[doc_id].update(spans)
    return dict(result)


def intersect_match_sets(match_sets: Sequence[MatchSet]) -> MatchSet:
    """Documents present in every match set, with their spans unioned."""
    if not match_sets:
        return {}
    common = set(match_sets[0])
    for match_set in match_sets[1:]:
        common &= match_set.keys()
    return {doc_id: set().union(*(match_set[doc_id] for match_set in match_sets)) for doc_id in common}
