from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line / character position inside a document."""

    line: int
    character: int


@dataclass(frozen=True)
class TextRange:
    start: Position
    end: Position  # exclusive

    def __post_init__(self):
        if self.start.line < 0 or self.start.character < 0:
            raise ValueError(f"Negative range start: {self.start}")
        if self.end < self.start:
            raise ValueError(f"Range end {self.end} before start {self.start}")

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class SelectionContext:
    """
    Where an analysis applies: captured at request time, so later changes
    of the active document or selection never redirect an edit.
    """

    document_id: str
    text_range: TextRange
    language: str

    # Text found at text_range when the analysis was requested.
    original_text: str
