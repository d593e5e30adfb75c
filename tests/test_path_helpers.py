"""Work folder, untitled files and plantuml.jar lookup."""

from pathlib import Path

from config import UNTITLED_FILE_PREFIX, UNTITLED_FILE_SUFFIX
from utils.path_helpers import create_untitled_file, ensure_work_folder, resolve_plantuml_jar


def test_work_folder_is_created(tmp_path):
    target = tmp_path / "nested" / ".FabrikUml"
    assert ensure_work_folder(target) == target
    assert target.is_dir()
    # повторный вызов ничего не ломает
    assert ensure_work_folder(target) == target


def test_untitled_files_are_unique(tmp_path):
    first = Path(create_untitled_file(tmp_path, "@startuml\n@enduml"))
    second = Path(create_untitled_file(tmp_path))
    assert first != second
    assert first.name.startswith(UNTITLED_FILE_PREFIX)
    assert first.name.endswith(UNTITLED_FILE_SUFFIX)
    assert first.read_text(encoding="utf-8") == "@startuml\n@enduml"
    assert second.read_text(encoding="utf-8") == ""


def test_configured_jar_wins(tmp_path):
    jar = tmp_path / "my.jar"
    jar.write_bytes(b"")
    assert resolve_plantuml_jar(jar) == jar.resolve()


def test_missing_configured_jar_falls_through(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "plantuml.jar").write_bytes(b"")
    found = resolve_plantuml_jar(tmp_path / "absent.jar")
    # vendor/ рядом с приложением может существовать у разработчика
    assert found is not None
    assert found.name == "plantuml.jar"
