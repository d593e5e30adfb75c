import os

from PySide6.QtCore import QSettings, QThreadPool, Qt, Slot
from PySide6.QtGui import QKeySequence
from PySide6.QtWidgets import QLabel, QMainWindow, QMessageBox, QSplitter, QStatusBar

from config import AppConfig, SAMPLE_DIAGRAM, SETTINGS_APP_NAME, SETTINGS_ORG_NAME
from logic.document_list import DocumentList, DocumentReadError, read_document
from logic.plantuml_renderer import PlantUmlRenderer, RenderWorker
from syntax.highlighter import AsyncPlantUmlHighlighter
from ui.document_list_panel import DocumentListPanel
from utils.logger import add_editor_log_handler, get_child_logger, remove_editor_log_handler
from utils.path_helpers import create_untitled_file, resolve_plantuml_jar
from widgets.code_editor import PlantUmlCodeEdit
from widgets.diagram_preview import DiagramPreview
from widgets.log_panel import LogPanel

_log = get_child_logger("window")


class FabrikUmlWindow(QMainWindow):

    # -------------------------- init -----------------------------
    def __init__(self, config: AppConfig, parent=None):
        super().__init__(parent)
        self.resize(1280, 840)
        self.setMinimumSize(960, 600)
        self.setWindowTitle(SETTINGS_APP_NAME)

        self.config = config
        self.settings = QSettings(SETTINGS_ORG_NAME, SETTINGS_APP_NAME)
        self.documents = DocumentList()
        self.current_path: str | None = None

        self.renderer = PlantUmlRenderer(resolve_plantuml_jar(config.plantuml_jar), config.render_timeout_s)
        self._render_pool = QThreadPool(self)
        self._render_pool.setMaxThreadCount(1)
        self._render_request_id = 0
        self._active_render_workers: set[RenderWorker] = set()

        self._build_ui()
        self._load_window_layout_settings()

        self.highlighter = AsyncPlantUmlHighlighter(
            self.editor,
            delay_ms=config.highlight_delay_ms,
            max_workers=config.highlight_workers,
            parent=self,
        )
        self.highlighter.highlight_failed.connect(
            lambda msg: self.statusBar().showMessage(f"Highlighting failed: {msg}", 5000)
        )

        self.editor.setPlainText(SAMPLE_DIAGRAM)

        if (issue := self.renderer.setup_error()):
            _log.warning(issue)
            self.status_lbl.setText("Preview unavailable")

    def _load_window_layout_settings(self):
        if (geo := self.settings.value("geometry")): self.restoreGeometry(geo)
        if (st := self.settings.value("windowState")): self.restoreState(st)
        if (sp := self.settings.value("splitter")):    self.splitter.restoreState(sp)

    # --------------------- UI construction ----------------------
    def _build_ui(self):
        spl = QSplitter(Qt.Horizontal, self); self.splitter = spl; self.setCentralWidget(spl)

        self.doc_list = DocumentListPanel(self); spl.addWidget(self.doc_list)
        self.editor = PlantUmlCodeEdit(self);    spl.addWidget(self.editor)
        self.preview = DiagramPreview(self);     spl.addWidget(self.preview)
        spl.setStretchFactor(1, 1); spl.setStretchFactor(2, 1)

        self.log_dock = LogPanel(parent=self); self.addDockWidget(Qt.BottomDockWidgetArea, self.log_dock)

        sb = QStatusBar(); self.setStatusBar(sb)
        self.status_lbl = QLabel("No document"); sb.addPermanentWidget(self.status_lbl)

        self.doc_list.files_dropped.connect(self.import_files)
        self.doc_list.document_activated.connect(self.open_file)

        self._build_menu()
        add_editor_log_handler(self.log_dock.get_handler())

    def _build_menu(self):
        mb = self.menuBar()

        fm = mb.addMenu("&File")
        fm.addAction("New", self.new_document).setShortcut(QKeySequence("Ctrl+N"))
        fm.addAction("Close document", self.close_current_document).setShortcut(QKeySequence("Ctrl+W"))
        fm.addSeparator()
        fm.addAction("Render preview", self.render_preview).setShortcut(QKeySequence("F5"))
        fm.addSeparator()
        fm.addAction("Exit", self.close).setShortcut(QKeySequence("Ctrl+Q"))

        vm = mb.addMenu("&View")
        log_toggle = self.log_dock.toggleViewAction()
        log_toggle.setText("Log panel")
        vm.addAction(log_toggle)

    # --------------------- documents ----------------------
    @Slot(list)
    def import_files(self, paths):
        added = self.documents.add_paths(paths)
        if added:
            self.doc_list.set_documents(self.documents)
        last = self.documents.last()
        if last:
            self.open_file(last)

    @Slot(str)
    def open_file(self, path: str):
        try:
            data = read_document(path)
        except DocumentReadError as e:
            self.statusBar().showMessage(str(e), 5000)
            return

        self.current_path = path
        self.doc_list.select_document(path)
        self.status_lbl.setText(path)
        self.editor.setPlainText(data)
        self.highlighter.rehighlight()
        self.render_preview()

    def new_document(self):
        try:
            path = create_untitled_file(self.config.work_dir, SAMPLE_DIAGRAM)
        except OSError as e:
            _log.error(f"Cannot create untitled file: {e}")
            QMessageBox.critical(self, "New document", str(e))
            return
        self.import_files([path])

    def close_current_document(self):
        path = self.doc_list.current_document() or self.current_path
        if not path or not self.documents.remove(path):
            return
        self.doc_list.set_documents(self.documents)
        if path == self.current_path:
            self.current_path = None
            self.status_lbl.setText("No document")
            self.editor.clear()
            self.preview.clear_image()

    # --------------------- preview ----------------------
    def render_preview(self):
        if self.renderer.setup_error():
            self.statusBar().showMessage(self.renderer.setup_error(), 5000)
            return
        self._render_request_id += 1
        self._render_pool.clear()
        worker = RenderWorker(self._render_request_id, self.editor.get_text(), self.renderer)
        worker.signals.finished.connect(self._on_render_finished)
        self._active_render_workers.add(worker)
        self.statusBar().showMessage("Rendering diagram…")
        self._render_pool.start(worker)

    @Slot(int, object, str, int)
    def _on_render_finished(self, request_id: int, png: bytes, error_text: str, error_line: int):
        done = [w for w in self._active_render_workers if w.request_id <= request_id]
        for w in done:
            self._active_render_workers.discard(w)

        if request_id != self._render_request_id:
            return
        if error_text:
            # предпросмотр остаётся прежним, в gutter отмечаем строку
            self.editor.set_error_line(error_line or None)
            self.statusBar().showMessage(f"Preview render failed: {error_text}", 5000)
            return
        self.editor.set_error_line(None)
        if not self.preview.show_png(png):
            _log.error("Rendered PNG could not be decoded")
            self.statusBar().showMessage("Rendered image could not be decoded", 5000)
            return
        name = os.path.basename(self.current_path) if self.current_path else "sample"
        self.statusBar().showMessage(f"Preview rendered: {name}", 3000)

    # --------------------- shutdown ----------------------
    def shutdown(self):
        """Остановить подсветку и рендер, отцепить панель логов."""
        self.highlighter.shutdown()
        self._render_request_id += 1
        self._render_pool.clear()
        self._render_pool.waitForDone()
        self._active_render_workers.clear()
        remove_editor_log_handler(self.log_dock.get_handler())

    def closeEvent(self, ev):
        self._save_settings()
        self.shutdown()
        super().closeEvent(ev)

    def _save_settings(self):
        self.settings.setValue("geometry", self.saveGeometry())
        self.settings.setValue("windowState", self.saveState())
        self.settings.setValue("splitter", self.splitter.saveState())
