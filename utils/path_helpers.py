import os
import tempfile
from pathlib import Path

from config import APP_DIR, UNTITLED_FILE_PREFIX, UNTITLED_FILE_SUFFIX
from utils.logger import editor_logger


def ensure_work_folder(work_dir: Path) -> Path:
    """Создаёт рабочую папку (~/.FabrikUml), если её ещё нет."""
    work_dir = Path(work_dir).expanduser()
    if not work_dir.is_dir():
        work_dir.mkdir(parents=True, exist_ok=True)
        editor_logger.info(f"Work folder created: {work_dir}")
    return work_dir


def create_untitled_file(work_dir: Path, initial_text: str = "") -> str:
    folder = ensure_work_folder(work_dir)
    fd, path = tempfile.mkstemp(prefix=UNTITLED_FILE_PREFIX, suffix=UNTITLED_FILE_SUFFIX, dir=str(folder))
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(initial_text)
    editor_logger.info(f"Untitled file created: {path}")
    return str(Path(path).resolve())


def resolve_plantuml_jar(configured: Path | None = None) -> Path | None:
    """plantuml.jar: настройка/env, vendor/, рядом с приложением, текущая папка."""
    candidates: list[Path] = []
    if configured:
        candidates.append(Path(configured).expanduser())
    candidates.append(APP_DIR / "vendor" / "plantuml" / "plantuml.jar")
    candidates.append(APP_DIR / "plantuml.jar")
    candidates.append(Path.cwd() / "plantuml.jar")

    for candidate in candidates:
        if candidate.is_file():
            editor_logger.debug(f"plantuml.jar found: {candidate}")
            return candidate.resolve()
    editor_logger.warning("plantuml.jar not found (set PLANTUML_JAR or place it at vendor/plantuml/plantuml.jar)")
    return None
