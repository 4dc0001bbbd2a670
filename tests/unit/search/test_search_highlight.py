"""Unit tests for span merging, highlighting, and snippets."""

import pytest

from inverted_search.search.highlight import (
    build_snippet,
    find_sentence_end,
    find_sentence_start,
    merge_spans,
    render_highlight,
)


TEXT = "learn to program in rust today"


@pytest.mark.unit
class TestMergeSpans:
    def test_merges_overlapping_and_adjacent(self):
        assert merge_spans([(5, 7), (0, 2), (1, 3), (3, 4)]) == [(0, 4), (5, 7)]

    def test_contained_span_is_absorbed(self):
        assert merge_spans([(0, 10), (2, 4)]) == [(0, 10)]

    def test_merge_is_idempotent(self):
        once = merge_spans([(9, 16), (0, 5), (4, 8), (25, 30), (16, 19)])

        assert merge_spans(once) == once
        assert once == [(0, 8), (9, 19), (25, 30)]

    def test_empty_input(self):
        assert merge_spans([]) == []

    def test_reversed_span_rejected(self):
        with pytest.raises(ValueError):
            merge_spans([(4, 2)])


@pytest.mark.unit
class TestRenderHighlight:
    def test_wraps_matched_word(self):
        assert render_highlight(TEXT, [(9, 16)], "<b>", "</b>") == "learn to <b>program</b> in rust today"

    def test_spans_at_text_boundaries(self):
        result = render_highlight(TEXT, [(0, 5), (25, 30)], "[", "]")

        assert result == "[learn] to program in rust [today]"

    def test_whole_text_span(self):
        assert render_highlight("abc", [(0, 3)], "<", ">") == "<abc>"

    def test_overlapping_spans_render_once(self):
        assert render_highlight(TEXT, [(0, 5), (3, 8)], "[", "]") == "[learn to] program in rust today"

    def test_spans_past_end_are_clamped(self):
        assert render_highlight("abc", [(1, 10)], "[", "]") == "a[bc]"

    def test_never_drops_or_duplicates_characters(self):
        spans = [(0, 3), (2, 9), (12, 13), (29, 30)]

        rendered = render_highlight(TEXT, spans, "\x00", "\x01")

        assert rendered.replace("\x00", "").replace("\x01", "") == TEXT

    def test_no_spans_returns_text(self):
        assert render_highlight(TEXT, [], "[", "]") == TEXT


@pytest.mark.unit
class TestSentenceBoundaries:
    def test_sentence_start_after_previous_sentence(self):
        text = "First one. Second sentence here."

        assert find_sentence_start(text, 20) == 11

    def test_sentence_end_includes_punctuation(self):
        text = "First one. Second sentence here."

        assert find_sentence_end(text, 2) == 11

    def test_whitespace_fallback_without_sentence_break(self):
        text = "aaaa bbbb cccc dddd"

        assert find_sentence_start(text, 19, max_lookback=19) == 5
        assert find_sentence_end(text, 0, max_lookahead=19) == 14

    def test_bounds(self):
        assert find_sentence_start("abc", 0) == 0
        assert find_sentence_end("abc", 3) == 3


@pytest.mark.unit
class TestBuildSnippet:
    def test_short_text_snippet_equals_full_highlight(self):
        assert build_snippet(TEXT, [(9, 16)], "[", "]") == render_highlight(TEXT, [(9, 16)], "[", "]")

    def test_long_text_is_windowed_around_first_match(self):
        text = "alpha " * 100 + "needle " + "omega " * 100
        start = text.index("needle")

        snippet = build_snippet(text, [(start, start + 6)], "[", "]", max_chars=60, surrounding_context=20)

        assert "[needle]" in snippet
        assert len(snippet) <= 62

    def test_no_spans_returns_text_prefix(self):
        assert build_snippet(TEXT, [], "[", "]", max_chars=5) == "learn"

    def test_empty_text(self):
        assert build_snippet("", [(0, 1)], "[", "]") == ""
