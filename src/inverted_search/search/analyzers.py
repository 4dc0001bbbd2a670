"""Tokenizer and filters shared by indexing and query parsing.

Tokenization splits on whitespace and punctuation, lowercases each token, and
keeps the character span of the token in the *original* text so highlights can
recover exact casing. Stemming and stopword removal are intentionally absent:
prefix matching would otherwise see truncated or missing tokens.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import re
from typing import Any, Protocol


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int

    @property
    def span(self) -> tuple[int, int]:
        return self.start_char, self.end_char

    def copy_with(self, **updates: Any) -> Token:
        data = {
            "text": self.text,
            "position": self.position,
            "start_char": self.start_char,
            "end_char": self.end_char,
        }
        data.update(updates)
        return Token(**data)


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


# Letters and digits; underscores and apostrophes count as separators.
WORD_PATTERN = r"[^\W_]+"


class RegexTokenizer:
    """Regex-based tokenizer that yields word tokens."""

    def __init__(self, pattern: str = WORD_PATTERN, flags: int = re.UNICODE | re.MULTILINE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.islower():
                yield token
            else:
                yield token.copy_with(text=token.text.lower())


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters).

    Unlike a list-returning analyzer, the pipeline is lazy: tokens are produced
    as the caller iterates.
    """

    def __init__(self, tokenizer: Tokenizer, filters: Iterable[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> Iterator[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        for position, token in enumerate(stream):  # normalize positions post-filtering
            if token.position != position:
                token = token.copy_with(position=position)
            yield token


class StandardAnalyzer:
    """Default analyzer: word tokens, lowercased."""

    def __init__(self) -> None:
        self.pipeline = AnalyzerPipeline(RegexTokenizer(), [LowercaseFilter()])

    def __call__(self, text: str) -> Iterator[Token]:
        return self.pipeline(text)


class TokenStream:
    """Lazy, finite, restartable sequence of tokens over one text.

    Each iteration re-runs the analyzer from the start of the text.
    """

    def __init__(self, text: str, analyzer: StandardAnalyzer | None = None) -> None:
        self.text = text
        self._analyzer = analyzer or _DEFAULT_ANALYZER

    def __iter__(self) -> Iterator[Token]:
        if not self.text:
            return iter(())
        return self._analyzer(self.text)

    def terms(self) -> list[str]:
        return [token.text for token in self]


_DEFAULT_ANALYZER = StandardAnalyzer()


def analyze(text: str) -> TokenStream:
    """Return the token stream for ``text`` using the standard analyzer."""
    return TokenStream(text)


def analyze_terms(text: str) -> list[str]:
    """Return just the normalized terms of ``text``, in order."""
    return analyze(text).terms()
