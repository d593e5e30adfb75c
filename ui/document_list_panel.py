import os

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QAbstractItemView, QListWidget, QListWidgetItem

from utils.logger import get_child_logger

_log = get_child_logger("documents")


class DocumentListPanel(QListWidget):
    """
    Левая панель со списком документов.

    Сигналы
    -------
    files_dropped(list)        – файлы, брошенные в список извне
    document_activated(str)    – клик по документу
    """
    files_dropped = Signal(list)
    document_activated = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAcceptDrops(True)
        self.setDragEnabled(False)
        self.setDragDropMode(QAbstractItemView.DropOnly)
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.itemClicked.connect(self._on_item_clicked)

    # ------------------------------------------------------------------ #
    def set_documents(self, paths):
        self.clear()
        for path in paths:
            item = QListWidgetItem(os.path.basename(path) or path)
            item.setData(Qt.UserRole, path)
            item.setToolTip(path)
            self.addItem(item)

    def select_document(self, path: str):
        for i in range(self.count()):
            item = self.item(i)
            if item.data(Qt.UserRole) == path:
                self.setCurrentItem(item)
                return

    def current_document(self) -> str | None:
        item = self.currentItem()
        return item.data(Qt.UserRole) if item else None

    # ------------------------------------------------------------------ #
    #                           DRAG & DROP
    # ------------------------------------------------------------------ #
    def dragEnterEvent(self, e):
        if e.source() is not self and e.mimeData().hasUrls():
            e.acceptProposedAction()
        else:
            e.ignore()

    def dragMoveEvent(self, e):
        # перетаскивание внутри самого списка не принимаем
        if e.source() is not self and e.mimeData().hasUrls():
            e.acceptProposedAction()
        else:
            e.ignore()

    def dropEvent(self, e):
        paths = [u.toLocalFile() for u in e.mimeData().urls() if u.isLocalFile()]
        paths = [p for p in paths if os.path.isfile(p)]
        if not paths:
            e.ignore()
            return
        _log.info(f"Files dropped: {len(paths)}")
        e.acceptProposedAction()
        self.files_dropped.emit(paths)

    # ------------------------------------------------------------------ #
    def _on_item_clicked(self, item: QListWidgetItem):
        path = item.data(Qt.UserRole)
        if path:
            self.document_activated.emit(path)
