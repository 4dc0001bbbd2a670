"""Prefix tree over indexed terms, holding each term's postings.

Prefix lookups walk ``len(prefix)`` nodes and then visit only the subtree
below, so their cost depends on the number of matching terms rather than the
size of the vocabulary.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from inverted_search.search.models import Position, Posting


_EMPTY: Mapping[str, Posting] = MappingProxyType({})


class _Node:
    __slots__ = ("children", "postings")

    def __init__(self) -> None:
        self.children: dict[str, _Node] = {}
        # Only nodes that terminate a real term carry postings.
        self.postings: dict[str, Posting] | None = None

    def is_prunable(self) -> bool:
        return not self.children and not self.postings


class TermTrie:
    """Term index mapping each term to ``{doc_id: Posting}``."""

    def __init__(self) -> None:
        self._root = _Node()
        self._term_count = 0

    def __len__(self) -> int:
        return self._term_count

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and bool(self.lookup_exact(term))

    def insert(self, term: str, doc_id: str, position: Position) -> None:
        """Append ``position`` to the posting for ``(term, doc_id)``."""
        if not term:
            msg = "Cannot index an empty term"
            raise ValueError(msg)
        node = self._root
        for char in term:
            child = node.children.get(char)
            if child is None:
                child = node.children[char] = _Node()
            node = child
        if node.postings is None:
            node.postings = {}
        if not node.postings:
            self._term_count += 1
        posting = node.postings.get(doc_id)
        if posting is None:
            posting = node.postings[doc_id] = Posting(doc_id=doc_id)
        posting.append(position)

    def remove_document(self, doc_id: str, terms: Iterable[str]) -> None:
        """Drop ``doc_id`` from the postings of every term in ``terms``.

        Nodes left without postings or children are pruned.
        """
        for term in terms:
            self._remove(term, doc_id)

    def _remove(self, term: str, doc_id: str) -> None:
        path: list[tuple[_Node, str]] = []
        node = self._root
        for char in term:
            child = node.children.get(char)
            if child is None:
                return
            path.append((node, char))
            node = child
        if not node.postings or doc_id not in node.postings:
            return
        del node.postings[doc_id]
        if node.postings:
            return
        node.postings = None
        self._term_count -= 1
        for parent, char in reversed(path):
            if not parent.children[char].is_prunable():
                break
            del parent.children[char]

    def _find(self, prefix: str) -> _Node | None:
        node = self._root
        for char in prefix:
            node = node.children.get(char)
            if node is None:
                return None
        return node

    def lookup_exact(self, term: str) -> Mapping[str, Posting]:
        """Return the postings for ``term``, or an empty mapping."""
        node = self._find(term)
        if node is None or not node.postings:
            return _EMPTY
        return MappingProxyType(node.postings)

    def lookup_prefix(self, prefix: str) -> Iterator[tuple[str, Mapping[str, Posting]]]:
        """Yield ``(term, postings)`` for every indexed term starting with ``prefix``.

        The prefix itself is included when it is an indexed term. Terms are
        yielded in lexicographic order.
        """
        start = self._find(prefix)
        if start is None:
            return
        stack: list[tuple[str, _Node]] = [(prefix, start)]
        while stack:
            term, node = stack.pop()
            if node.postings:
                yield term, MappingProxyType(node.postings)
            for char in sorted(node.children, reverse=True):
                stack.append((term + char, node.children[char]))

    def terms(self) -> Iterator[str]:
        """Iterate over all indexed terms in lexicographic order."""
        for term, _ in self.lookup_prefix(""):
            yield term

    def clear(self) -> None:
        self._root = _Node()
        self._term_count = 0
