"""Length-normalized relevance scoring.

``score = matched_length / sqrt(document_length)`` where ``matched_length`` is
the total width of the merged matched spans and ``document_length`` is the
character length of the document text. Taking the square root dampens the
bias toward very short documents without ignoring length entirely.
"""

from __future__ import annotations

from collections.abc import Iterable
import math

from inverted_search.search.highlight import merge_spans
from inverted_search.search.models import Span


def matched_length(spans: Iterable[Span]) -> int:
    """Total characters covered by ``spans`` after merging overlaps."""
    return sum(end - start for start, end in merge_spans(spans))


def score_spans(spans: Iterable[Span], document_length: int) -> float:
    """Return the relevance score, or ``0.0`` when nothing was matched."""
    if document_length <= 0:
        return 0.0
    covered = matched_length(spans)
    if covered <= 0:
        return 0.0
    return covered / math.sqrt(document_length)


def rank_key(doc_id: str, score: float) -> tuple[float, str]:
    """Sort key: score descending, then document id ascending."""
    return -score, doc_id
