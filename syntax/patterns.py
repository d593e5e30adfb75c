# syntax/patterns.py
from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

# Словари PlantUML взяты из LanguageDescriptor:
# https://raw.githubusercontent.com/plantuml/plantuml/master/src/net/sourceforge/plantuml/syntax/LanguageDescriptor.java

PUML_ATS = [
    "@startuml", "@enduml", "@startdot", "@enddot", "@startsalt",
    "@endsalt",
]

PUML_PREPROCS = [
    "!include", "!pragma", "!define", "!undef", "!ifdef",
    "!endif", "!ifndef", "!else", "!definelong", "!enddefinelong",
]

PUML_TYPES = [
    "actor", "participant", "usecase", "class", "interface",
    "abstract", "enum", "component", "state", "object",
    "artifact", "folder", "rectangle", "node", "frame", "cloud",
    "database", "storage", "agent", "boundary", "control", "entity",
    "card", "file", "package", "queue",
]

PUML_KEYWORDS = [
    "as", "also", "autonumber", "caption", "title",
    "newpage", "box", "alt", "else", "opt", "loop", "par", "break",
    "critical", "note", "rnote", "hnote", "legend", "group", "left",
    "right", "of", "on", "link", "over", "end", "activate", "deactivate",
    "destroy", "create", "footbox", "hide", "show", "skinparam", "skin",
    "top", "bottom", "top to bottom direction", "package", "namespace",
    "page", "up", "down", "if", "else", "elseif", "endif", "partition",
    "footer", "header", "center", "rotate", "ref", "return", "is",
    "repeat", "start", "stop", "while", "endwhile", "fork", "again",
    "kill",
]


class TokenClass(Enum):
    """Лексические категории; value = имя style-класса."""
    AT = "at"
    PREPROC = "preproc"
    TYPE = "type"
    KEYWORD = "keyword"
    PAREN = "paren"
    BRACE = "brace"
    BRACKET = "bracket"
    SEMICOLON = "semicolon"
    STRING = "string"
    COMMENT = "comment"


class TokenMatch(NamedTuple):
    token_class: TokenClass
    start: int
    end: int


def words_pattern(words: Iterable[str], leading_boundary: bool = True) -> str:
    # длинные варианты первыми: "!definelong" раньше "!define",
    # "top to bottom direction" раньше "top"
    unique = sorted(dict.fromkeys(words), key=len, reverse=True)
    body = "|".join(re.escape(w) for w in unique)
    prefix = r"\b" if leading_boundary else ""
    return prefix + "(?:" + body + r")\b"


AT_PATTERN        = words_pattern(PUML_ATS, leading_boundary=False)
PREPROC_PATTERN   = words_pattern(PUML_PREPROCS, leading_boundary=False)
TYPES_PATTERN     = words_pattern(PUML_TYPES)
KEYWORD_PATTERN   = words_pattern(PUML_KEYWORDS)

PAREN_PATTERN     = r"\(|\)"
BRACE_PATTERN     = r"\{|\}"
BRACKET_PATTERN   = r"\[|\]"
SEMICOLON_PATTERN = r";"
STRING_PATTERN    = r'"(?:[^"\\]|\\.)*"'
COMMENT_PATTERN   = r"//[^\n]*" + "|" + r"/\*[\s\S]*?\*/"


class PatternTable:
    """
    Упорядоченный список (TokenClass, regex).

    Каждая запись компилируется отдельно и ищется сама по себе, поэтому
    номерные группы, обратные ссылки (\\1) и глобальные флаги вроде (?i)
    работают так же, как в одиночном re.compile.

    Порядок записей = приоритет: побеждает самое левое совпадение, а при
    совпадениях с одной позиции та запись, что объявлена раньше (как у
    альтернации "первая ветка выигрывает").
    """

    def __init__(self, entries: Iterable[Tuple[TokenClass, str]]):
        self._entries: Tuple[Tuple[TokenClass, str], ...] = tuple(entries)
        if not self._entries:
            raise ValueError("PatternTable needs at least one entry")

        self._compiled: List[Tuple[TokenClass, re.Pattern]] = []
        for token_class, sub_pattern in self._entries:
            try:
                rx = re.compile(sub_pattern)
            except re.error as e:
                raise ValueError(f"Invalid pattern for {token_class.name}: {e}") from e
            self._compiled.append((token_class, rx))

    @property
    def entries(self) -> Tuple[Tuple[TokenClass, str], ...]:
        return self._entries

    def extended(self, token_class: TokenClass, sub_pattern: str) -> "PatternTable":
        """Новая таблица с добавленной записью (самый низкий приоритет)."""
        return PatternTable(self._entries + ((token_class, sub_pattern),))

    @staticmethod
    def _search_nonempty(rx: re.Pattern, text: str, pos: int) -> Optional[re.Match]:
        # пустые совпадения пропускаем, ищем дальше со следующей позиции
        while pos <= len(text):
            m = rx.search(text, pos)
            if m is None:
                return None
            if m.end() > m.start():
                return m
            pos = m.start() + 1
        return None

    def finditer(self, text: str) -> Iterator[TokenMatch]:
        # next_match[i]: ближайшее совпадение записи i с позиции >= pos,
        # False, когда запись больше ничего не найдёт
        next_match: List[Union[re.Match, None, bool]] = [None] * len(self._compiled)
        pos = 0
        while pos < len(text):
            best_idx = -1
            best: Optional[re.Match] = None
            for idx, (_cls, rx) in enumerate(self._compiled):
                m = next_match[idx]
                if m is False:
                    continue
                if m is None or m.start() < pos:
                    m = self._search_nonempty(rx, text, pos)
                    next_match[idx] = m if m is not None else False
                    if m is None:
                        continue
                # строгое "<": при равном начале остаётся более ранняя запись
                if best is None or m.start() < best.start():
                    best_idx, best = idx, m
            if best is None:
                return
            yield TokenMatch(self._compiled[best_idx][0], best.start(), best.end())
            pos = best.end()


DEFAULT_PATTERN_TABLE = PatternTable([
    (TokenClass.AT,        AT_PATTERN),
    (TokenClass.PREPROC,   PREPROC_PATTERN),
    (TokenClass.TYPE,      TYPES_PATTERN),
    (TokenClass.KEYWORD,   KEYWORD_PATTERN),

    (TokenClass.PAREN,     PAREN_PATTERN),
    (TokenClass.BRACE,     BRACE_PATTERN),
    (TokenClass.BRACKET,   BRACKET_PATTERN),
    (TokenClass.SEMICOLON, SEMICOLON_PATTERN),
    (TokenClass.STRING,    STRING_PATTERN),
    (TokenClass.COMMENT,   COMMENT_PATTERN),
])
