# widgets/log_panel.py
import logging
from collections import deque
from typing import Deque, NamedTuple, Tuple

from PySide6.QtCore import QObject, Qt, Signal, Slot
from PySide6.QtGui import QColor, QFont
from PySide6.QtWidgets import (
    QComboBox, QDockWidget, QHBoxLayout, QLabel, QPushButton,
    QSizePolicy, QStyle, QTextEdit, QVBoxLayout, QWidget,
)

from syntax.styles import SyntaxStyleDark
from utils.logger import LOG_FORMAT, LOGGER_NAME


def subsystem_of(logger_name: str) -> str:
    """'FabrikUml.highlighter' -> 'highlighter', корневой логгер -> 'app'."""
    if logger_name.startswith(LOGGER_NAME + "."):
        return logger_name[len(LOGGER_NAME) + 1:].split(".", 1)[0]
    return "app"


class LogEntry(NamedTuple):
    text: str
    level: int
    subsystem: str


class QtLogHandler(QObject, logging.Handler):
    """
    Handler → GUI. Записи из рабочих потоков (подсветка, рендер) уходят
    через сигнал, поэтому виджет трогается только из UI-потока.
    """
    log_received = Signal(object)   # LogEntry

    def __init__(self):
        QObject.__init__(self)
        logging.Handler.__init__(self)
        self.setFormatter(logging.Formatter(LOG_FORMAT))

    def emit(self, record: logging.LogRecord):
        try:
            self.log_received.emit(
                LogEntry(self.format(record), record.levelno, subsystem_of(record.name))
            )
        except Exception:
            self.handleError(record)


class LogPanel(QDockWidget):
    """Журнал приложения с фильтром по уровню и подсистеме."""

    MAX_LOG_LINES = 2_000
    ALL_SUBSYSTEMS = "All"
    SUBSYSTEMS = ("app", "highlighter", "renderer", "documents", "window")
    _LEVELS = [
        ("Debug",   logging.DEBUG),
        ("Info",    logging.INFO),
        ("Warning", logging.WARNING),
        ("Error",   logging.ERROR),
    ]
    _LEVEL_COLORS = {
        logging.ERROR: QColor("#E06C75"),
        logging.WARNING: QColor("#E5C07B"),
        logging.INFO: QColor("#61AFEF"),
    }

    def __init__(self, title: str = "Log", parent=None):
        super().__init__(title, parent)
        self.setObjectName("LogPanelDock")
        self.setAllowedAreas(
            Qt.DockWidgetArea.BottomDockWidgetArea |
            Qt.DockWidgetArea.TopDockWidgetArea
        )

        self._level_filter = logging.INFO
        self._subsystem_filter = self.ALL_SUBSYSTEMS
        self._error_cnt = 0
        self._warn_cnt = 0
        self._entries: Deque[LogEntry] = deque(maxlen=10_000)

        self._build_ui()

        self._qt_handler = QtLogHandler()
        self._qt_handler.log_received.connect(self._on_log)

    def _build_ui(self):
        central = QWidget()
        outer = QVBoxLayout(central)
        outer.setContentsMargins(0, 0, 0, 0)

        bar = QHBoxLayout()
        bar.setContentsMargins(4, 4, 4, 4)

        self.level_box = QComboBox()
        self.level_box.addItems([name for name, _ in self._LEVELS])
        self.level_box.setCurrentIndex(1)
        self.level_box.currentIndexChanged.connect(self._on_level_changed)

        self.subsystem_box = QComboBox()
        self.subsystem_box.addItem(self.ALL_SUBSYSTEMS)
        self.subsystem_box.addItems(list(self.SUBSYSTEMS))
        self.subsystem_box.currentTextChanged.connect(self._on_subsystem_changed)

        clear_btn = QPushButton()
        clear_btn.setIcon(self.style().standardIcon(QStyle.SP_TrashIcon))
        clear_btn.setToolTip("Clear log")
        clear_btn.clicked.connect(self.clear_logs)

        self.counters_lbl = QLabel()

        spacer = QWidget()
        spacer.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)

        bar.addWidget(QLabel("Level:"))
        bar.addWidget(self.level_box)
        bar.addSpacing(8)
        bar.addWidget(QLabel("Source:"))
        bar.addWidget(self.subsystem_box)
        bar.addWidget(spacer)
        bar.addWidget(self.counters_lbl)
        bar.addWidget(clear_btn)

        self.text = QTextEdit()
        self.text.setReadOnly(True)
        self.text.setFont(QFont("Consolas", 9))
        self.text.document().setMaximumBlockCount(self.MAX_LOG_LINES)
        self.text.setStyleSheet(
            f"QTextEdit {{ background-color: {SyntaxStyleDark.TextEditBackground.name()};"
            f" color: {SyntaxStyleDark.DefaultText.name()}; border: 1px solid #3E4451; }}"
        )

        outer.addLayout(bar)
        outer.addWidget(self.text)
        self.setWidget(central)
        self._update_counters()

    # ---------------------------------------------------------------- API
    def get_handler(self) -> QtLogHandler:
        return self._qt_handler

    def counters(self) -> Tuple[int, int]:
        return self._warn_cnt, self._error_cnt

    def visible_lines(self) -> list:
        text = self.text.toPlainText()
        return text.splitlines() if text else []

    @Slot()
    def clear_logs(self):
        self.text.clear()
        self._entries.clear()
        self._error_cnt = self._warn_cnt = 0
        self._update_counters()

    # ---------------------------------------------------------------- slots
    @Slot(int)
    def _on_level_changed(self, idx: int):
        self._level_filter = self._LEVELS[idx][1]
        self._repaint()

    @Slot(str)
    def _on_subsystem_changed(self, name: str):
        self._subsystem_filter = name
        self._repaint()

    @Slot(object)
    def _on_log(self, entry: LogEntry):
        self._entries.append(entry)
        if entry.level >= logging.ERROR:
            self._error_cnt += 1
        elif entry.level >= logging.WARNING:
            self._warn_cnt += 1
        self._update_counters()

        if self._passes(entry):
            self._append_line(entry)

    # ---------------------------------------------------------------- helpers
    def _passes(self, entry: LogEntry) -> bool:
        if entry.level < self._level_filter:
            return False
        return self._subsystem_filter in (self.ALL_SUBSYSTEMS, entry.subsystem)

    def _repaint(self):
        self.text.clear()
        shown = [e for e in self._entries if self._passes(e)]
        for entry in shown[-self.MAX_LOG_LINES:]:
            self._append_line(entry)

    def _update_counters(self):
        self.counters_lbl.setText(f"Warnings: {self._warn_cnt}   Errors: {self._error_cnt}")

    def _append_line(self, entry: LogEntry):
        color = SyntaxStyleDark.DefaultText
        for level in sorted(self._LEVEL_COLORS, reverse=True):
            if entry.level >= level:
                color = self._LEVEL_COLORS[level]
                break

        self.text.moveCursor(self.text.textCursor().MoveOperation.End)
        self.text.setTextColor(color)
        self.text.insertPlainText(entry.text + "\n")
        self.text.setTextColor(SyntaxStyleDark.DefaultText)
        self.text.verticalScrollBar().setValue(self.text.verticalScrollBar().maximum())
