# logic/document_list.py
from __future__ import annotations

import os
from typing import Iterable, Iterator, List, Optional

from utils.logger import get_child_logger

_log = get_child_logger("documents")


class DocumentReadError(OSError):
    pass


class DocumentList:
    """Список открытых документов; абсолютные пути уникальны."""

    def __init__(self):
        self._paths: List[str] = []

    @staticmethod
    def normalize(path: str) -> str:
        return os.path.normpath(os.path.abspath(os.path.expanduser(path)))

    def add_paths(self, paths: Iterable[str]) -> List[str]:
        added: List[str] = []
        for raw in paths:
            path = self.normalize(raw)
            if path in self._paths:
                _log.warning(f"Don't add duplicate path: {path}")
                continue
            self._paths.append(path)
            added.append(path)
            _log.info(f"Document added: {path}")
        return added

    def remove(self, path: str) -> bool:
        path = self.normalize(path)
        if path not in self._paths:
            return False
        self._paths.remove(path)
        return True

    def last(self) -> Optional[str]:
        return self._paths[-1] if self._paths else None

    def __contains__(self, path: str) -> bool:
        return self.normalize(path) in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._paths))


def read_document(path: str) -> str:
    """
    Читает файл как UTF-8.

    Текст не сырой: недекодируемые байты заменяются на U+FFFD, символы NUL
    удаляются. Именно этот текст попадает в редактор и в рендер.
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            data = f.read()
    except OSError as e:
        _log.error(f"Cannot read '{path}': {e}")
        raise DocumentReadError(e.errno, f"Cannot read {path}: {e.strerror or e}") from e
    return data.replace("\x00", "")
