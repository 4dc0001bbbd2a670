"""Positional chain matching for phrase queries.

A phrase ``t1 .. tn`` matches at token ordinal ``p`` when a token matching
``t1`` sits at ``p``, one matching ``t2`` at ``p + 1``, and so on. Sub-terms
match by prefix, so unrelated words sharing a prefix can complete a chain;
those false positives are accepted.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from inverted_search.search.models import Position, Span


def index_by_ordinal(positions: Iterable[Position]) -> dict[int, Position]:
    """Map each token ordinal to its occurrence."""
    return {position.ordinal: position for position in positions}


def find_phrase_spans(term_positions: Sequence[Mapping[int, Position]]) -> list[Span]:
    """Return one span per qualifying chain, covering first start to last end.

    Args:
        term_positions: For each phrase sub-term in order, the occurrences in
            one document keyed by token ordinal.

    Returns:
        Spans sorted by start. Empty when any sub-term is missing.
    """
    if not term_positions or any(not positions for positions in term_positions):
        return []

    first, rest = term_positions[0], term_positions[1:]
    spans: list[Span] = []
    for ordinal in sorted(first):
        last = first[ordinal]
        for offset, positions in enumerate(rest, start=1):
            following = positions.get(ordinal + offset)
            if following is None:
                break
            last = following
        else:
            spans.append((first[ordinal].start, last.end))
    return spans
