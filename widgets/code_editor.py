# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from PySide6.QtCore import QRect, QSize, Qt, Signal, Slot
from PySide6.QtGui import (
    QColor,
    QFont,
    QPainter,
    QTextCharFormat,
    QTextCursor,
    QTextFormat,
    QTextLayout,
)
from PySide6.QtWidgets import QPlainTextEdit, QTextEdit, QWidget

from models.highlight import TextChange
from syntax.patterns import TokenClass
from syntax.spans import StyleSpan, clamp_spans
from syntax.styles import SyntaxStyleDark, build_token_formats


class LineNumberArea(QWidget):
    """Gutter слева от текста: номера строк и маркер ошибки рендера."""

    def __init__(self, editor: "PlantUmlCodeEdit"):
        super().__init__(editor)
        self._editor = editor

    def sizeHint(self) -> QSize:
        return QSize(self._editor.line_number_area_width(), 0)

    def paintEvent(self, event):  # noqa: N802
        self._editor.paint_line_numbers(event)


class PlantUmlCodeEdit(QPlainTextEdit):
    """
    Редактор PlantUML-текста.

    Для подсветки отдаёт наружу:
        • text_changed(TextChange): что удалено / вставлено;
        • get_text();
        • apply_style_spans(spans): раскраска через форматы QTextLayout
          (не попадает в undo-стек).
    """
    text_changed = Signal(object)

    TAB_SPACES = 4
    MIN_POINT_SIZE = 6
    MAX_POINT_SIZE = 40

    _CLR_GUTTER_BG = QColor("#21252B")
    _CLR_GUTTER_FG = QColor("#5C6370")
    _CLR_GUTTER_FG_ACTIVE = SyntaxStyleDark.DefaultText
    _CLR_ERROR_LINE = QColor(224, 108, 117, 110)
    _CLR_CURRENT_LINE = QColor(70, 80, 100, 80)

    def __init__(self, parent=None):
        super().__init__(parent)

        self._error_line: Optional[int] = None
        self._line_number_area = LineNumberArea(self)
        self.blockCountChanged.connect(self.update_line_number_area_width)
        self.updateRequest.connect(self.update_line_number_area)
        self.cursorPositionChanged.connect(self._update_extra_selections)
        self.update_line_number_area_width()

        self.setFont(QFont("Consolas", 11))
        self.setTabStopDistance(self.fontMetrics().horizontalAdvance(" ") * self.TAB_SPACES)
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        self.setStyleSheet(
            f"PlantUmlCodeEdit {{ background: {SyntaxStyleDark.TextEditBackground.name()};"
            f" color: {SyntaxStyleDark.DefaultText.name()}; }}"
        )

        self._formats: Dict[TokenClass, QTextCharFormat] = build_token_formats()
        self._last_text: str = ""
        self.document().contentsChange.connect(self._on_contents_change)

        self._update_extra_selections()

    # ───────────  editor shell API  ───────────
    def get_text(self) -> str:
        return self.toPlainText()

    def apply_style_spans(self, spans: Sequence[StyleSpan]) -> None:
        doc = self.document()
        text_len = len(self.toPlainText())
        spans = clamp_spans(spans, text_len)

        idx = 0
        block = doc.begin()
        while block.isValid():
            b_start = block.position()
            b_end = b_start + len(block.text())
            ranges: List[QTextLayout.FormatRange] = []

            # spans упорядочены, идём одним проходом
            while idx < len(spans) and spans[idx].end <= b_start:
                idx += 1
            j = idx
            while j < len(spans) and spans[j].start < b_end:
                span = spans[j]
                if span.style is not None:
                    start = max(span.start, b_start)
                    end = min(span.end, b_end)
                    if end > start:
                        fr = QTextLayout.FormatRange()
                        fr.start = start - b_start
                        fr.length = end - start
                        fr.format = self._formats[span.style]
                        ranges.append(fr)
                j += 1

            layout = block.layout()
            if layout is not None:
                layout.setFormats(ranges)
            block = block.next()

        # перерисовка; Qt сообщит contentsChange с removed == added
        doc.markContentsDirty(0, doc.characterCount())

    def style_at(self, position: int) -> Optional[TokenClass]:
        """Класс токена, которым раскрашен символ (для отладки и тестов)."""
        block = self.document().findBlock(position)
        if not block.isValid() or block.layout() is None:
            return None
        pos = position - block.position()
        for fr in block.layout().formats():
            if fr.start <= pos < fr.start + fr.length:
                for token_class, fmt in self._formats.items():
                    if fmt == fr.format:
                        return token_class
        return None

    @Slot(int, int, int)
    def _on_contents_change(self, position: int, removed: int, added: int):
        new_text = self.toPlainText()
        change = TextChange(
            position,
            self._last_text[position:position + removed],
            new_text[position:position + added],
        )
        self._last_text = new_text
        self.text_changed.emit(change)

    # ───────────  render error marker  ───────────
    def set_error_line(self, line: Optional[int]) -> None:
        """Отметить в gutter строку (1-based), на которую ругается PlantUML."""
        self._error_line = line if line and line > 0 else None
        self._line_number_area.update()

    def error_line(self) -> Optional[int]:
        return self._error_line

    # ───────────  gutter  ───────────
    def line_number_area_width(self) -> int:
        digits = len(str(max(1, self.blockCount())))
        return self.fontMetrics().horizontalAdvance("9") * (digits + 1) + 8

    def update_line_number_area_width(self, _=0):
        self.setViewportMargins(self.line_number_area_width(), 0, 0, 0)

    def update_line_number_area(self, rect: QRect, dy: int):
        area = self._line_number_area
        if dy:
            area.scroll(0, dy)
        else:
            area.update(0, rect.y(), area.width(), rect.height())
        if rect.contains(self.viewport().rect()):
            self.update_line_number_area_width()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        cr = self.contentsRect()
        self._line_number_area.setGeometry(
            QRect(cr.left(), cr.top(), self.line_number_area_width(), cr.height())
        )

    def paint_line_numbers(self, event):
        area = self._line_number_area
        painter = QPainter(area)
        painter.fillRect(event.rect(), self._CLR_GUTTER_BG)

        active = self.textCursor().blockNumber()
        normal_font = self.font()
        bold_font = QFont(normal_font)
        bold_font.setBold(True)
        line_h = self.fontMetrics().height()

        block = self.firstVisibleBlock()
        top = round(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
        while block.isValid() and top <= event.rect().bottom():
            height = round(self.blockBoundingRect(block).height())
            number = block.blockNumber() + 1
            if block.isVisible() and top + height >= event.rect().top():
                if number == self._error_line:
                    painter.fillRect(0, top, area.width(), height, self._CLR_ERROR_LINE)
                is_active = number - 1 == active
                painter.setFont(bold_font if is_active else normal_font)
                painter.setPen(self._CLR_GUTTER_FG_ACTIVE if is_active else self._CLR_GUTTER_FG)
                painter.drawText(0, top, area.width() - 6, line_h, Qt.AlignRight, str(number))
            block = block.next()
            top += height

    # ───────────  zoom  ───────────
    def wheelEvent(self, event):
        if event.modifiers() & Qt.ControlModifier:
            step = 1 if event.angleDelta().y() > 0 else -1
            self.zoom_by(step)
            event.accept()
            return
        super().wheelEvent(event)

    def zoom_by(self, step: int) -> None:
        size = self.font().pointSize() + step
        if self.MIN_POINT_SIZE <= size <= self.MAX_POINT_SIZE:
            self.zoomIn(step)
            self.update_line_number_area_width()

    # ───────────  keys  ───────────
    def keyPressEvent(self, event):
        key = event.key()
        mod = event.modifiers()

        if key == Qt.Key_Tab and mod == Qt.NoModifier:
            self.textCursor().insertText(" " * self.TAB_SPACES)
            event.accept()
            return

        if key in (Qt.Key_Return, Qt.Key_Enter) and mod == Qt.NoModifier:
            self._insert_newline_with_indent()
            event.accept()
            return

        if event.text() == "}" and self._dedent_before_closing_brace():
            event.accept()
            return

        super().keyPressEvent(event)

    def _insert_newline_with_indent(self):
        cur = self.textCursor()
        line = cur.block().text()[:cur.positionInBlock()]
        indent = line[:len(line) - len(line.lstrip())]
        # после "{" (package, class, skinparam ...) на уровень глубже
        if line.rstrip().endswith("{"):
            indent += " " * self.TAB_SPACES
        cur.insertText("\n" + indent)
        self.setTextCursor(cur)
        self.ensureCursorVisible()

    def _dedent_before_closing_brace(self) -> bool:
        cur = self.textCursor()
        before = cur.block().text()[:cur.positionInBlock()]
        if not before or before.strip():
            return False
        keep = max(0, len(before) - self.TAB_SPACES)
        cur.movePosition(QTextCursor.StartOfBlock)
        cur.movePosition(QTextCursor.Right, QTextCursor.KeepAnchor, len(before))
        cur.insertText(before[:keep] + "}")
        self.setTextCursor(cur)
        return True

    # ───────────  current line  ───────────
    def _update_extra_selections(self):
        sel = QTextEdit.ExtraSelection()
        sel.format.setBackground(self._CLR_CURRENT_LINE)
        sel.format.setProperty(QTextFormat.FullWidthSelection, True)  # type: ignore
        sel.cursor = self.textCursor()
        sel.cursor.clearSelection()
        self.setExtraSelections([sel])
