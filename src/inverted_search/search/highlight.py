"""Span merging, highlighting, and sentence-aware snippets.

Highlighting works on character spans produced by query evaluation rather
than re-searching the text, so every marked region is exactly what matched.
"""

from __future__ import annotations

from collections.abc import Iterable
import re

from inverted_search.search.models import Span


SENTENCE_END_PATTERN = re.compile(r"[.!?]\s+")
WHITESPACE_PATTERN = re.compile(r"\s+")


def merge_spans(spans: Iterable[Span]) -> list[Span]:
    """Merge overlapping or touching spans into a sorted, disjoint list.

    Two spans merge when the next start is <= the current end, so exactly
    adjacent spans become one. Merging an already merged list is a no-op.
    """
    merged: list[Span] = []
    for start, end in sorted(spans):
        if end < start:
            msg = f"Invalid span ({start}, {end}): end precedes start"
            raise ValueError(msg)
        if merged and start <= merged[-1][1]:
            last_start, last_end = merged[-1]
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def render_highlight(text: str, spans: Iterable[Span], before: str, after: str) -> str:
    """Wrap each merged span of ``text`` with ``before`` and ``after``.

    Unmatched runs are copied verbatim. Spans are clamped to the text bounds.
    """
    length = len(text)
    parts: list[str] = []
    cursor = 0
    for start, end in merge_spans(spans):
        start = min(max(start, cursor), length)
        end = min(end, length)
        if end <= start:
            continue
        parts.append(text[cursor:start])
        parts.append(before)
        parts.append(text[start:end])
        parts.append(after)
        cursor = end
    parts.append(text[cursor:])
    return "".join(parts)


def find_sentence_start(text: str, position: int, max_lookback: int = 200) -> int:
    """Index where the sentence around ``position`` begins.

    Only the ``max_lookback`` characters before ``position`` are examined.
    Without a sentence break there, the first whitespace run past a quarter of
    that window is used, and failing that the window start.
    """
    if position <= 0:
        return 0
    floor = max(0, position - max_lookback)
    window = text[floor:position]

    breaks = list(SENTENCE_END_PATTERN.finditer(window))
    if breaks:
        return floor + breaks[-1].end()
    gap = WHITESPACE_PATTERN.search(window, len(window) // 4)
    return floor + gap.end() if gap else floor


def find_sentence_end(text: str, position: int, max_lookahead: int = 200) -> int:
    """Index just past the sentence around ``position``, trailing space included.

    Mirrors ``find_sentence_start``: without a sentence break in the next
    ``max_lookahead`` characters, cut at the last whitespace within three
    quarters of that window, else at the window end.
    """
    if position >= len(text):
        return len(text)
    ceiling = min(len(text), position + max_lookahead)
    window = text[position:ceiling]

    sentence_break = SENTENCE_END_PATTERN.search(window)
    if sentence_break:
        return position + sentence_break.end()
    limit = len(window) * 3 // 4
    gaps = [gap.start() for gap in WHITESPACE_PATTERN.finditer(window) if gap.start() <= limit]
    return position + gaps[-1] if gaps else ceiling


def snippet_window(
    text: str,
    match: Span,
    max_chars: int = 300,
    surrounding_context: int = 100,
) -> Span:
    """Choose the ``[start, end)`` window of ``text`` to show around ``match``.

    The window is widened to sentence boundaries when they are close enough,
    and re-centred on the match when that would exceed ``max_chars``.
    Surrounding whitespace is trimmed.
    """
    match_start, match_end = match
    initial_start = max(0, match_start - surrounding_context)
    initial_end = min(len(text), match_end + surrounding_context)

    start = find_sentence_start(text, initial_start, max_lookback=surrounding_context)
    end = find_sentence_end(text, initial_end, max_lookahead=surrounding_context)

    if end - start > max_chars:
        half_max = max_chars // 2
        center = (match_start + match_end) // 2
        start = max(0, center - half_max)
        end = min(len(text), center + half_max)

    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


def build_snippet(
    text: str,
    spans: Iterable[Span],
    before: str,
    after: str,
    max_chars: int = 300,
    surrounding_context: int = 100,
) -> str:
    """Excerpt of ``text`` around the first matched span, with highlights.

    Spans falling partly outside the window are clipped to it.
    """
    if not text:
        return ""

    merged = merge_spans(spans)
    if not merged:
        return text[:max_chars].strip()

    window_start, window_end = snippet_window(text, merged[0], max_chars, surrounding_context)
    local_spans = [
        (max(start, window_start) - window_start, min(end, window_end) - window_start)
        for start, end in merged
        if end > window_start and start < window_end
    ]
    return render_highlight(text[window_start:window_end], local_spans, before, after)
