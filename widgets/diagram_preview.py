from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import QLabel, QScrollArea

from syntax.styles import SyntaxStyleDark


class DiagramPreview(QScrollArea):
    """Панель предпросмотра: показывает PNG, полученный от PlantUML."""

    PLACEHOLDER = "No diagram rendered yet"

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWidgetResizable(True)
        self.setAlignment(Qt.AlignCenter)

        self._label = QLabel(self.PLACEHOLDER)
        self._label.setAlignment(Qt.AlignCenter)
        self._label.setStyleSheet(f"color: {SyntaxStyleDark.DefaultText.name()};")
        self.setWidget(self._label)
        self._has_image = False

    def has_image(self) -> bool:
        return self._has_image

    def show_png(self, png: bytes) -> bool:
        pixmap = QPixmap()
        if not pixmap.loadFromData(png, "PNG"):
            return False
        self._label.setPixmap(pixmap)
        self._has_image = True
        return True

    def clear_image(self):
        self._label.clear()
        self._label.setText(self.PLACEHOLDER)
        self._has_image = False
