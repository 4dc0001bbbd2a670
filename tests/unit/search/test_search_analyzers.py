"""Unit tests for the tokenizer pipeline."""

import pytest

from inverted_search.search.analyzers import (
    AnalyzerPipeline,
    LowercaseFilter,
    RegexTokenizer,
    StandardAnalyzer,
    Token,
    TokenStream,
    analyze,
    analyze_terms,
)


@pytest.mark.unit
class TestToken:
    """Token helpers produce independent copies."""

    def test_copy_with_overrides_only_given_fields(self):
        token = Token(text="Configure", position=2, start_char=10, end_char=19)

        clone = token.copy_with(text="configure")

        assert clone.text == "configure"
        assert clone.span == (10, 19)
        assert clone.position == 2
        assert token.text == "Configure"


@pytest.mark.unit
class TestRegexTokenizer:
    """Regex tokenizer should emit positions and char offsets."""

    def test_emits_tokens_with_offsets(self):
        tokens = list(RegexTokenizer()("Hi, Dave! How are you?"))

        assert [t.text for t in tokens] == ["Hi", "Dave", "How", "are", "you"]
        assert [t.span for t in tokens] == [(0, 2), (4, 8), (10, 13), (14, 17), (18, 21)]
        assert [t.position for t in tokens] == [0, 1, 2, 3, 4]

    def test_splits_on_punctuation_and_underscores(self):
        terms = [t.text for t in RegexTokenizer()("won't stop_now, ok?")]

        assert terms == ["won", "t", "stop", "now", "ok"]

    def test_multiple_separators_do_not_create_empty_tokens(self):
        terms = [t.text for t in RegexTokenizer()("  quick \t\n  fox  ")]

        assert terms == ["quick", "fox"]


@pytest.mark.unit
class TestLowercaseFilter:
    def test_lowercase_keeps_original_span(self):
        tokens = list(LowercaseFilter()(RegexTokenizer()("BeAt")))

        assert tokens[0].text == "beat"
        assert tokens[0].span == (0, 4)

    def test_already_lowercase_tokens_pass_through(self):
        token = Token(text="quiet", position=0, start_char=0, end_char=5)

        assert next(LowercaseFilter()([token])) is token


@pytest.mark.unit
class TestAnalyzerPipeline:
    def test_pipeline_is_lazy(self):
        stream = AnalyzerPipeline(RegexTokenizer(), [LowercaseFilter()])("One Two Three")

        assert next(stream).text == "one"
        assert next(stream).text == "two"

    def test_positions_renumbered_after_filtering(self):
        def drop_short(tokens):
            return (token for token in tokens if len(token.text) > 2)

        tokens = list(AnalyzerPipeline(RegexTokenizer(), [drop_short])("a bee and the sea"))

        assert [(t.text, t.position) for t in tokens] == [("bee", 0), ("and", 1), ("the", 2), ("sea", 3)]

    def test_standard_analyzer_lowercases(self):
        assert [t.text for t in StandardAnalyzer()("Rust TODAY")] == ["rust", "today"]


@pytest.mark.unit
class TestTokenStream:
    def test_empty_text_yields_nothing(self):
        assert list(analyze("")) == []
        assert analyze_terms("   ") == []

    def test_stream_is_restartable(self):
        stream = analyze("learn to program")

        first = [t.text for t in stream]
        second = [t.text for t in stream]

        assert first == second == ["learn", "to", "program"]

    def test_unicode_offsets_are_character_offsets(self):
        stream = TokenStream("嗨, 您好")
        tokens = list(stream)

        assert [t.text for t in tokens] == ["嗨", "您好"]
        assert tokens[1].span == (3, 5)
        assert stream.text[3:5] == "您好"
