"""Editor shell: change notifications and span painting."""

import pytest
from PySide6.QtCore import Qt
from PySide6.QtGui import QTextCursor
from PySide6.QtTest import QTest

from syntax.highlighter import AsyncPlantUmlHighlighter
from syntax.patterns import TokenClass
from syntax.spans import StyleSpan, compute_highlighting
from widgets.code_editor import PlantUmlCodeEdit


@pytest.fixture
def code_edit(qapp):
    ed = PlantUmlCodeEdit()
    yield ed
    ed.deleteLater()


class TestTextChanged:
    def test_insert_reports_inserted_text(self, code_edit):
        changes = []
        code_edit.text_changed.connect(changes.append)
        code_edit.insertPlainText("class A")
        real = [c for c in changes if not c.is_noop]
        assert real
        assert real[-1].inserted == "class A"
        assert real[-1].removed == ""

    def test_painting_spans_is_a_noop_change(self, code_edit):
        code_edit.setPlainText("@startuml\nclass Foo\n@enduml")
        changes = []
        code_edit.text_changed.connect(changes.append)
        code_edit.apply_style_spans(compute_highlighting(code_edit.get_text()))
        assert all(c.is_noop for c in changes)

    def test_get_text(self, code_edit):
        code_edit.setPlainText("actor Bob")
        assert code_edit.get_text() == "actor Bob"


class TestApplyStyleSpans:
    def test_styles_land_on_the_right_characters(self, code_edit):
        text = "@startuml\nclass Foo\n@enduml"
        code_edit.setPlainText(text)
        code_edit.apply_style_spans(compute_highlighting(text))

        assert code_edit.style_at(0) is TokenClass.AT
        assert code_edit.style_at(10) is TokenClass.TYPE      # "class"
        assert code_edit.style_at(16) is None                  # "Foo"
        assert code_edit.style_at(text.index("@enduml")) is TokenClass.AT

    def test_multiline_comment_is_painted_on_every_block(self, code_edit):
        text = "/* line1\nline2 */\nclass A"
        code_edit.setPlainText(text)
        code_edit.apply_style_spans(compute_highlighting(text))

        assert code_edit.style_at(0) is TokenClass.COMMENT
        assert code_edit.style_at(text.index("line2")) is TokenClass.COMMENT
        assert code_edit.style_at(text.index("class")) is TokenClass.TYPE

    def test_spans_longer_than_buffer_are_clamped(self, code_edit):
        code_edit.setPlainText("class")
        spans = [StyleSpan(0, 5, TokenClass.TYPE), StyleSpan(5, 20, TokenClass.COMMENT)]
        code_edit.apply_style_spans(spans)
        assert code_edit.style_at(4) is TokenClass.TYPE

    def test_spans_for_shorter_text_leave_tail_unstyled(self, code_edit):
        code_edit.setPlainText("class Foo actor")
        code_edit.apply_style_spans(compute_highlighting("class"))
        assert code_edit.style_at(0) is TokenClass.TYPE
        assert code_edit.style_at(12) is None


class TestWithHighlighter:
    def test_typing_gets_highlighted(self, code_edit, wait_until):
        hl = AsyncPlantUmlHighlighter(code_edit, delay_ms=20)
        applied = []
        hl.highlight_applied.connect(applied.append)
        try:
            code_edit.setPlainText("@startuml\nactor Bob\n@enduml")
            assert wait_until(lambda: applied)
            assert code_edit.style_at(0) is TokenClass.AT
            assert code_edit.style_at(10) is TokenClass.TYPE
        finally:
            hl.shutdown()


class TestEditing:
    def test_enter_keeps_indent(self, code_edit):
        code_edit.setPlainText("    actor Bob")
        code_edit.moveCursor(QTextCursor.End)
        QTest.keyClick(code_edit, Qt.Key_Return)
        assert code_edit.get_text() == "    actor Bob\n    "

    def test_enter_after_open_brace_indents_deeper(self, code_edit):
        code_edit.setPlainText("package Shop {")
        code_edit.moveCursor(QTextCursor.End)
        QTest.keyClick(code_edit, Qt.Key_Return)
        assert code_edit.get_text() == "package Shop {\n    "

    def test_closing_brace_dedents(self, code_edit):
        code_edit.setPlainText("package Shop {\n    class A\n    ")
        code_edit.moveCursor(QTextCursor.End)
        QTest.keyClicks(code_edit, "}")
        assert code_edit.get_text() == "package Shop {\n    class A\n}"

    def test_closing_brace_after_text_is_plain(self, code_edit):
        code_edit.setPlainText("class A {")
        code_edit.moveCursor(QTextCursor.End)
        QTest.keyClicks(code_edit, "}")
        assert code_edit.get_text() == "class A {}"

    def test_zoom_is_bounded(self, code_edit):
        for _ in range(100):
            code_edit.zoom_by(1)
        assert code_edit.font().pointSize() <= PlantUmlCodeEdit.MAX_POINT_SIZE


class TestErrorLine:
    def test_set_and_clear(self, code_edit):
        code_edit.set_error_line(3)
        assert code_edit.error_line() == 3
        code_edit.set_error_line(None)
        assert code_edit.error_line() is None
        code_edit.set_error_line(0)
        assert code_edit.error_line() is None
