# models/highlight.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from syntax.spans import StyleSpan


@dataclass(frozen=True)
class TextChange:
    position: int
    removed: str = ""
    inserted: str = ""

    @property
    def is_noop(self) -> bool:
        # смена форматирования: Qt сообщает removed == added
        return self.inserted == self.removed


@dataclass(frozen=True)
class HighlightRequest:
    generation: int
    text: str


@dataclass(frozen=True)
class HighlightResult:
    generation: int
    text_length: int
    spans: List[StyleSpan] = field(default_factory=list)
