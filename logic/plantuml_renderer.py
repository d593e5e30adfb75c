# logic/plantuml_renderer.py
from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, QRunnable, Signal

from utils.logger import get_child_logger

_log = get_child_logger("renderer")

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class RenderError(RuntimeError):
    """Ошибка рендера; line: строка диаграммы (1-based), если PlantUML её назвал."""

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.line = line


def _stderr_lines(stderr_text: str) -> list[str]:
    raw = (stderr_text or "").replace("\r\n", "\n").replace("\r", "\n")
    return [line.strip() for line in raw.split("\n") if line.strip()]


def parse_error_line(stderr_text: str) -> Optional[int]:
    # Типичный вывод PlantUML:
    # ERROR
    # <номер строки>
    # <сообщение>
    lines = _stderr_lines(stderr_text)
    if len(lines) >= 2 and lines[0].upper() == "ERROR" and lines[1].isdigit():
        return int(lines[1])
    return None


def extract_plantuml_error_details(stderr_text: str) -> str:
    """Сжимает stderr PlantUML до читаемого сообщения."""
    lines = _stderr_lines(stderr_text)
    if not lines:
        return "unknown error"
    line_no = parse_error_line(stderr_text)
    if line_no is not None and len(lines) >= 3:
        return f"line {line_no}: {lines[2]}"
    return "\n".join(lines[:8])


class PlantUmlRenderer:
    """Текст диаграммы -> PNG через `java -jar plantuml.jar -pipe`."""

    def __init__(self, jar_path: Optional[Path], timeout_s: float = 20.0, java: str = "java"):
        self.jar_path = Path(jar_path) if jar_path else None
        self.timeout_s = timeout_s
        self.java = java

    def setup_error(self) -> Optional[str]:
        if self.jar_path is None:
            return "plantuml.jar not found (set PLANTUML_JAR or place jar at vendor/plantuml/plantuml.jar)"
        if shutil.which(self.java) is None:
            return "Java runtime not found in PATH; install Java to render PlantUML diagrams"
        return None

    def command(self) -> list[str]:
        return [
            self.java,
            "-Djava.awt.headless=true",
            "-jar",
            str(self.jar_path),
            "-pipe",
            "-tpng",
            "-charset",
            "UTF-8",
        ]

    def render(self, diagram_text: str) -> bytes:
        issue = self.setup_error()
        if issue is not None:
            raise RenderError(issue)

        try:
            result = subprocess.run(
                self.command(),
                input=diagram_text.encode("utf-8"),
                capture_output=True,
                check=False,
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired as e:
            raise RenderError("PlantUML render timed out") from e
        except OSError as e:
            raise RenderError(f"PlantUML render failed: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or b"").decode("utf-8", errors="replace")
            raise RenderError(
                f"PlantUML render failed: {extract_plantuml_error_details(stderr)}",
                line=parse_error_line(stderr),
            )

        png = result.stdout or b""
        if not png.startswith(PNG_SIGNATURE):
            raise RenderError("PlantUML did not return PNG output")

        _log.info(f"Diagram rendered ({len(png)} bytes)")
        return png


class RenderWorkerSignals(QObject):
    """Signals emitted by background PlantUML render workers."""

    finished = Signal(int, object, str, int)   # request_id, png bytes, error text, error line (0 = нет)


class RenderWorker(QRunnable):
    """Рендер одной диаграммы вне UI-потока."""

    def __init__(self, request_id: int, diagram_text: str, renderer: PlantUmlRenderer):
        super().__init__()
        self.request_id = request_id
        self.diagram_text = diagram_text
        self.renderer = renderer
        self.signals = RenderWorkerSignals()

    def run(self) -> None:
        try:
            png = self.renderer.render(self.diagram_text)
        except RenderError as exc:
            _log.error(f"Render #{self.request_id}: {exc}")
            self.signals.finished.emit(self.request_id, b"", str(exc), exc.line or 0)
            return
        self.signals.finished.emit(self.request_id, png, "", 0)
