"""Search data models."""

from __future__ import annotations

from dataclasses import dataclass, field


Span = tuple[int, int]


@dataclass(frozen=True, order=True)
class Position:
    """One occurrence of a term: its character span and token ordinal."""

    start: int
    end: int
    ordinal: int

    @property
    def span(self) -> Span:
        return self.start, self.end


@dataclass
class Posting:
    """All occurrences of one exact term in one document.

    Positions are appended in tokenization order, which keeps them strictly
    increasing and non-overlapping.
    """

    doc_id: str
    positions: list[Position] = field(default_factory=list)

    @property
    def spans(self) -> list[Span]:
        return [position.span for position in self.positions]

    def append(self, position: Position) -> None:
        if self.positions and position.start < self.positions[-1].end:
            msg = f"Position {position.span} overlaps or precedes {self.positions[-1].span} in '{self.doc_id}'"
            raise ValueError(msg)
        self.positions.append(position)
