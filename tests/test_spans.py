"""Span computer: coverage, determinism and classification."""

import random

import pytest

from syntax.patterns import PatternTable, TokenClass
from syntax.spans import StyleSpan, clamp_spans, compute_highlighting, spans_cover


def styled(text, spans):
    return [(s.style, text[s.start:s.end]) for s in spans]


SAMPLES = [
    "",
    "no tokens at all",
    "@startuml\nclass Foo\n@enduml",
    'note "a quoted \\"string\\" here"',
    "/* line1\nline2 */\nactor Bob",
    "(){}[];",
    '"unterminated string\nclass X',
    "/* unterminated comment\nclass X",
    "// only a comment",
    "Alice -> Bob: Authentication Request\nBob --> Alice: Response",
]


class TestCoverage:
    @pytest.mark.parametrize("text", SAMPLES)
    def test_spans_cover_whole_text(self, text):
        spans = compute_highlighting(text)
        assert spans_cover(spans, len(text))
        assert "".join(text[s.start:s.end] for s in spans) == text

    def test_random_text_is_covered(self):
        rnd = random.Random(1234)
        alphabet = "abc class actor @startuml !define ()[]{};\"\\/*\n '"
        for _ in range(200):
            text = "".join(rnd.choice(alphabet) for _ in range(rnd.randint(0, 80)))
            assert spans_cover(compute_highlighting(text), len(text)), text

    @pytest.mark.parametrize("text", SAMPLES)
    def test_deterministic(self, text):
        assert compute_highlighting(text) == compute_highlighting(text)


class TestEdgeCases:
    def test_empty_text_gives_no_spans(self):
        assert compute_highlighting("") == []

    def test_text_without_matches_is_one_unstyled_span(self):
        assert compute_highlighting("hello world") == [StyleSpan(0, 11, None)]

    def test_adjacent_matches_have_no_zero_length_gap(self):
        spans = compute_highlighting("()")
        assert spans == [
            StyleSpan(0, 1, TokenClass.PAREN),
            StyleSpan(1, 1, TokenClass.PAREN),
        ]
        assert all(s.length > 0 for s in spans)

    def test_unstyled_spans_have_empty_class_set(self):
        spans = compute_highlighting("x (")
        assert spans[0].style_classes == frozenset()
        assert spans[1].style_classes == frozenset({"paren"})


class TestClassification:
    def test_startuml_class_enduml(self):
        text = "@startuml\nclass Foo\n@enduml"
        assert styled(text, compute_highlighting(text)) == [
            (TokenClass.AT, "@startuml"),
            (None, "\n"),
            (TokenClass.TYPE, "class"),
            (None, " Foo\n"),
            (TokenClass.AT, "@enduml"),
        ]

    def test_escaped_quote_string_is_one_span(self):
        text = 'x "a quoted \\"string\\" here" y'
        result = styled(text, compute_highlighting(text))
        assert result == [
            (None, "x "),
            (TokenClass.STRING, '"a quoted \\"string\\" here"'),
            (None, " y"),
        ]

    def test_block_comment_then_code(self):
        text = "/* line1\nline2 */\nclass A"
        assert styled(text, compute_highlighting(text)) == [
            (TokenClass.COMMENT, "/* line1\nline2 */"),
            (None, "\n"),
            (TokenClass.TYPE, "class"),
            (None, " A"),
        ]

    def test_custom_table(self):
        table = PatternTable([(TokenClass.KEYWORD, r"\bfoo\b")])
        text = "foo bar foo"
        assert styled(text, compute_highlighting(text, table)) == [
            (TokenClass.KEYWORD, "foo"),
            (None, " bar "),
            (TokenClass.KEYWORD, "foo"),
        ]


class TestHelpers:
    def test_spans_cover_detects_gap_and_overlap(self):
        assert not spans_cover([StyleSpan(0, 2), StyleSpan(3, 1)], 4)
        assert not spans_cover([StyleSpan(0, 2), StyleSpan(1, 3)], 4)
        assert not spans_cover([StyleSpan(0, 2)], 4)
        assert spans_cover([], 0)

    def test_clamp_spans_to_shorter_buffer(self):
        spans = compute_highlighting("class Foo actor")
        clamped = clamp_spans(spans, 7)
        assert spans_cover(clamped, 7)
        assert clamped[-1] == StyleSpan(5, 2, None)

    def test_clamp_spans_longer_buffer_unchanged(self):
        spans = compute_highlighting("class Foo")
        assert clamp_spans(spans, 100) == spans
