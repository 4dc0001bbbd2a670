"""Domain models for indexed documents and search results.

Value objects are immutable (frozen) so results handed to callers cannot be
used to mutate index state.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from inverted_search.config import get_settings
from inverted_search.search.highlight import build_snippet, merge_spans, render_highlight
from inverted_search.search.models import Span


class Document(BaseModel):
    """A caller-supplied document. Identity is the ``id`` field."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: str
    text: str

    def __len__(self) -> int:
        return len(self.text)


class SearchResult(BaseModel):
    """A matched document, the spans that justify it, and its score."""

    model_config = ConfigDict(frozen=True)

    document: Document
    spans: tuple[Span, ...] = Field(default_factory=tuple)
    score: float

    @property
    def doc_id(self) -> str:
        return self.document.id

    @property
    def highlights(self) -> list[Span]:
        """Matched spans with overlapping and adjacent spans merged."""
        return merge_spans(self.spans)

    def highlight(self, before: str | None = None, after: str | None = None) -> str:
        """Return the document text with every matched region wrapped in markers.

        Markers default to the configured ``highlight_before``/``highlight_after``.
        """
        before, after = _markers(before, after)
        return render_highlight(self.document.text, self.spans, before, after)

    def snippet(
        self,
        before: str | None = None,
        after: str | None = None,
        *,
        max_chars: int | None = None,
        surrounding_context: int | None = None,
    ) -> str:
        """Return a highlighted excerpt around the first match."""
        settings = get_settings()
        before, after = _markers(before, after)
        return build_snippet(
            self.document.text,
            self.spans,
            before,
            after,
            max_chars=settings.snippet_max_chars if max_chars is None else max_chars,
            surrounding_context=settings.snippet_context if surrounding_context is None else surrounding_context,
        )


class SearchResponse(BaseModel):
    """Ranked results plus timing for a single query."""

    model_config = ConfigDict(frozen=True)

    results: list[SearchResult]
    total: int
    elapsed_ms: float = 0.0


def _markers(before: str | None, after: str | None) -> tuple[str, str]:
    if before is not None and after is not None:
        return before, after
    settings = get_settings()
    return (
        settings.highlight_before if before is None else before,
        settings.highlight_after if after is None else after,
    )
