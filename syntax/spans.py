# syntax/spans.py
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence

from syntax.patterns import DEFAULT_PATTERN_TABLE, PatternTable, TokenClass


@dataclass(frozen=True)
class StyleSpan:
    start: int
    length: int
    style: Optional[TokenClass] = None

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def style_classes(self) -> FrozenSet[str]:
        # ноль или один класс
        return frozenset((self.style.value,)) if self.style else frozenset()


def compute_highlighting(text: str, table: PatternTable = DEFAULT_PATTERN_TABLE) -> List[StyleSpan]:
    """
    Разбивает текст на непрерывную последовательность StyleSpan.

    Между совпадениями вставляются нестилизованные промежутки, после
    последнего совпадения идёт хвост. Промежутки нулевой длины не выдаются,
    поэтому пустой текст даёт пустой список.
    """
    spans: List[StyleSpan] = []
    last_end = 0
    for token_class, start, end in table.finditer(text):
        if start > last_end:
            spans.append(StyleSpan(last_end, start - last_end))
        spans.append(StyleSpan(start, end - start, token_class))
        last_end = end
    if len(text) > last_end:
        spans.append(StyleSpan(last_end, len(text) - last_end))
    return spans


def spans_cover(spans: Sequence[StyleSpan], length: int) -> bool:
    """True, если spans без дыр и наложений покрывают [0, length)."""
    pos = 0
    for span in spans:
        if span.start != pos or span.length < 0:
            return False
        pos = span.end
    return pos == length


def clamp_spans(spans: Sequence[StyleSpan], length: int) -> List[StyleSpan]:
    """Обрезает spans по длине текущего буфера."""
    clamped: List[StyleSpan] = []
    for span in spans:
        if span.start >= length:
            break
        if span.end > length:
            span = StyleSpan(span.start, length - span.start, span.style)
        clamped.append(span)
    return clamped
