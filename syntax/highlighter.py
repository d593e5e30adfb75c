# syntax/highlighter.py
from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional, Set

from PySide6.QtCore import QObject, QRunnable, QThreadPool, QTimer, Signal, Slot

from config import DEFAULT_HIGHLIGHT_DELAY_MS
from models.highlight import HighlightRequest, HighlightResult, TextChange
from syntax.spans import StyleSpan, compute_highlighting
from utils.logger import get_child_logger

_log = get_child_logger("highlighter")

SpanComputer = Callable[[str], List[StyleSpan]]


class HighlightState(Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMPUTING = "computing"
    APPLYING = "applying"


class HighlightTaskSignals(QObject):
    """Signals emitted by background highlight tasks."""

    finished = Signal(object)   # HighlightResult
    failed = Signal(int, str)   # generation, error text


class HighlightTask(QRunnable):
    """Считает spans для одного снимка текста вне UI-потока."""

    def __init__(self, request: HighlightRequest, compute: SpanComputer):
        super().__init__()
        self.request = request
        self.compute = compute
        self.signals = HighlightTaskSignals()

    def run(self) -> None:
        try:
            spans = self.compute(self.request.text)
        except Exception as exc:
            _log.error(f"Highlight #{self.request.generation} failed: {exc}", exc_info=True)
            self.signals.failed.emit(self.request.generation, f"{type(exc).__name__}: {exc}")
            return
        self.signals.finished.emit(
            HighlightResult(self.request.generation, len(self.request.text), spans)
        )


class AsyncPlantUmlHighlighter(QObject):
    """
    Debounced off-thread подсветка для editor shell.

    Editor shell должен предоставлять:
        • text_changed: Signal(object) c TextChange
        • get_text(): полный текст буфера
        • apply_style_spans(spans)

    Любое содержательное изменение текста увеличивает generation, поэтому
    результат, посчитанный для старого снимка, отбрасывается: применяется
    только последний запланированный, а не первый завершившийся.
    """

    state_changed = Signal(str)
    highlight_applied = Signal(int)     # generation
    highlight_failed = Signal(str)

    def __init__(
        self,
        editor,
        delay_ms: int = DEFAULT_HIGHLIGHT_DELAY_MS,
        compute: Optional[SpanComputer] = None,
        max_workers: int = 1,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._editor = editor
        self._compute: SpanComputer = compute or compute_highlighting
        self._state = HighlightState.IDLE
        self._generation = 0
        self._applied_generation = 0
        self._active_tasks: Set[HighlightTask] = set()
        self._closed = False

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self._on_quiet_period_elapsed)

        # собственный пул, а не глобальный executor
        self._pool = QThreadPool(self)
        self._pool.setMaxThreadCount(max(1, max_workers))

        self._editor.text_changed.connect(self.on_text_changed)

    # ------------------------------------------------------------ props
    @property
    def state(self) -> HighlightState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def applied_generation(self) -> int:
        return self._applied_generation

    @property
    def delay_ms(self) -> int:
        return self._timer.interval()

    @delay_ms.setter
    def delay_ms(self, value: int) -> None:
        self._timer.setInterval(max(0, int(value)))

    # ------------------------------------------------------------ input
    @Slot(object)
    def on_text_changed(self, change: Optional[TextChange] = None) -> None:
        if self._closed:
            return
        if change is not None and change.is_noop:
            return
        # помечаем in-flight результат устаревшим и перезапускаем таймер
        self._generation += 1
        self._set_state(HighlightState.PENDING)
        self._timer.start()

    def rehighlight(self) -> None:
        """Пересчитать немедленно, без ожидания паузы."""
        if self._closed:
            return
        self._timer.stop()
        self._generation += 1
        self._dispatch()

    # ------------------------------------------------------------ pipeline
    @Slot()
    def _on_quiet_period_elapsed(self) -> None:
        if self._closed:
            return
        self._dispatch()

    def _dispatch(self) -> None:
        # снимок берётся в момент планирования, а не в момент вычисления
        request = HighlightRequest(self._generation, self._editor.get_text())
        task = HighlightTask(request, self._compute)
        task.signals.finished.connect(self._on_task_finished)
        task.signals.failed.connect(self._on_task_failed)
        self._active_tasks.add(task)

        self._set_state(HighlightState.COMPUTING)
        _log.debug(f"Highlight #{request.generation} scheduled ({len(request.text)} chars)")
        self._pool.start(task)

    @Slot(object)
    def _on_task_finished(self, result: HighlightResult) -> None:
        self._forget_task(result.generation)
        if self._closed:
            return
        if result.generation != self._generation or result.generation <= self._applied_generation:
            _log.debug(f"Discarding stale highlight #{result.generation} (current #{self._generation})")
            return

        current_length = len(self._editor.get_text())
        if current_length != result.text_length:
            # буфер изменили без уведомления; spans будут обрезаны редактором
            _log.debug(
                f"Highlight #{result.generation} computed for {result.text_length} chars, "
                f"buffer now has {current_length}"
            )

        self._set_state(HighlightState.APPLYING)
        try:
            self._editor.apply_style_spans(result.spans)
        except Exception as exc:
            _log.error(f"Applying highlight #{result.generation} failed: {exc}", exc_info=True)
            self._set_state(HighlightState.IDLE)
            self.highlight_failed.emit(str(exc))
            return

        self._applied_generation = result.generation
        self._set_state(HighlightState.IDLE)
        self.highlight_applied.emit(result.generation)

    @Slot(int, str)
    def _on_task_failed(self, generation: int, message: str) -> None:
        self._forget_task(generation)
        if self._closed:
            return
        # прежняя раскраска остаётся до следующего успешного прохода
        if generation == self._generation:
            self._set_state(HighlightState.IDLE)
        self.highlight_failed.emit(message)

    # ------------------------------------------------------------ lifecycle
    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._timer.stop()
        self._generation += 1
        try:
            self._editor.text_changed.disconnect(self.on_text_changed)
        except (RuntimeError, TypeError):
            pass
        self._pool.clear()
        self._pool.waitForDone()
        self._active_tasks.clear()
        self._set_state(HighlightState.IDLE)
        _log.info("Highlighter stopped")

    # ------------------------------------------------------------ helpers
    def _forget_task(self, generation: int) -> None:
        done = [t for t in self._active_tasks if t.request.generation == generation]
        for task in done:
            self._active_tasks.discard(task)

    def _set_state(self, state: HighlightState) -> None:
        if state is self._state:
            return
        self._state = state
        self.state_changed.emit(state.value)
