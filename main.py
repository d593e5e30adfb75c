import os
import sys

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication, QMessageBox

project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from config import SETTINGS_APP_NAME, ConfigError, load_config
from ui.main_window import FabrikUmlWindow
from utils.logger import editor_logger, setup_editor_logger
from utils.path_helpers import ensure_work_folder


def run_application():
    if hasattr(Qt, 'AA_UseHighDpiPixmaps'):
        QApplication.setAttribute(Qt.AA_UseHighDpiPixmaps, True)

    app = QApplication(sys.argv)

    try:
        config = load_config()
    except ConfigError as e:
        editor_logger.error(str(e))
        QMessageBox.critical(None, SETTINGS_APP_NAME, str(e))
        sys.exit(2)

    setup_editor_logger(config.log_level)
    editor_logger.info(f"Starting {SETTINGS_APP_NAME}...")

    try:
        ensure_work_folder(config.work_dir)
    except OSError as e:
        editor_logger.warning(f"Work folder unavailable: {e}")

    main_window = FabrikUmlWindow(config)
    main_window.show()

    # файлы из командной строки ведут себя как брошенные в список
    cli_files = [a for a in app.arguments()[1:] if os.path.isfile(a)]
    if cli_files:
        main_window.import_files(cli_files)

    exit_code = app.exec()
    editor_logger.info(f"Application finished with code: {exit_code}")
    sys.exit(exit_code)


if __name__ == "__main__":
    run_application()
