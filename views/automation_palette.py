"""
Automation palette for adding nodes to the canvas.

Each item can be clicked to add a node at the canvas center or dragged
onto the canvas to place it under the cursor.
"""

from typing import Optional
from PyQt6.QtCore import Qt, pyqtSignal, QMimeData, QPoint
from PyQt6.QtGui import QFont, QColor, QDrag, QPainter, QPixmap
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel,
    QPushButton, QFrame
)

from models import NodeKind, PaletteItem, DEFAULT_PALETTE_ITEMS
from services import encode_palette_payload


class PaletteItemButton(QPushButton):
    """
    A button representing a palette item.

    Can be clicked to add or dragged onto canvas.
    """

    clicked_with_kind = pyqtSignal(object)   # NodeKind

    # Colors matching the canvas
    COLORS = {
        NodeKind.TRIGGER: "#F59E0B",
        NodeKind.ACTION: "#3B82F6",
        NodeKind.CONDITION: "#8B5CF6",
    }

    ICONS = {
        NodeKind.TRIGGER: "T",
        NodeKind.ACTION: "A",
        NodeKind.CONDITION: "?",
    }

    DESCRIPTIONS = {
        NodeKind.TRIGGER: "Starts the automation",
        NodeKind.ACTION: "Does one step of work",
        NodeKind.CONDITION: "Branches on a check",
    }

    def __init__(self, item: PaletteItem, parent=None):
        super().__init__(parent)
        self.item = item
        self._drag_start_pos: Optional[QPoint] = None
        self._setup_ui()

        self.clicked.connect(lambda: self.clicked_with_kind.emit(self.item.kind))

    def _setup_ui(self):
        self.setFixedHeight(64)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

        color = self.COLORS[self.item.kind]

        self.setStyleSheet(f"""
            QPushButton {{
                background: white;
                border: 2px solid #E5E7EB;
                border-radius: 10px;
                text-align: left;
                padding: 10px 12px;
            }}
            QPushButton:hover {{
                border-color: {color};
                background: #F9FAFB;
            }}
        """)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)
        layout.setSpacing(12)

        icon_frame = QFrame()
        icon_frame.setFixedSize(40, 40)
        icon_frame.setStyleSheet(f"QFrame {{ background: {color}; border-radius: 20px; }}")

        icon_layout = QVBoxLayout(icon_frame)
        icon_layout.setContentsMargins(0, 0, 0, 0)
        icon_label = QLabel(self.ICONS[self.item.kind])
        icon_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        icon_label.setStyleSheet("color: white; font-size: 16px; font-weight: bold;")
        icon_layout.addWidget(icon_label)
        layout.addWidget(icon_frame)

        text_layout = QVBoxLayout()
        text_layout.setSpacing(2)

        name_label = QLabel(self.item.label)
        name_label.setStyleSheet("color: #374151; font-size: 13px; font-weight: 600;")
        text_layout.addWidget(name_label)

        desc_label = QLabel(self.DESCRIPTIONS[self.item.kind])
        desc_label.setStyleSheet("color: #9CA3AF; font-size: 11px;")
        text_layout.addWidget(desc_label)

        layout.addLayout(text_layout)
        layout.addStretch()

    def mousePressEvent(self, event):
        """Remember where a possible drag starts."""
        if event.button() == Qt.MouseButton.LeftButton:
            self._drag_start_pos = event.pos()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        """Start a drag carrying the palette item as JSON text."""
        if not (event.buttons() & Qt.MouseButton.LeftButton):
            return
        if self._drag_start_pos is None:
            return
        if (event.pos() - self._drag_start_pos).manhattanLength() < 10:
            return

        drag = QDrag(self)
        mime_data = QMimeData()
        mime_data.setText(encode_palette_payload(self.item))
        drag.setMimeData(mime_data)

        pixmap = self._create_drag_pixmap()
        drag.setPixmap(pixmap)
        drag.setHotSpot(QPoint(pixmap.width() // 2, pixmap.height() // 2))

        self._drag_start_pos = None
        self.setDown(False)
        drag.exec(Qt.DropAction.CopyAction)

    def _create_drag_pixmap(self) -> QPixmap:
        """Create pixmap for drag preview."""
        size = 60
        pixmap = QPixmap(size, size)
        pixmap.fill(Qt.GlobalColor.transparent)

        painter = QPainter(pixmap)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setBrush(QColor(self.COLORS[self.item.kind]))
        painter.setPen(Qt.PenStyle.NoPen)
        painter.drawEllipse(5, 5, size - 10, size - 10)

        painter.setPen(QColor("white"))
        font = QFont("SF Pro Display", 18)
        font.setWeight(QFont.Weight.Bold)
        painter.setFont(font)
        painter.drawText(pixmap.rect(), Qt.AlignmentFlag.AlignCenter, self.ICONS[self.item.kind])

        painter.end()
        return pixmap


class AutomationPalette(QWidget):
    """
    Palette panel listing the node kinds that can be added.
    """

    kindSelected = pyqtSignal(object)   # NodeKind

    def __init__(self, items: Optional[list[PaletteItem]] = None, parent=None):
        super().__init__(parent)
        self._items = list(items) if items is not None else list(DEFAULT_PALETTE_ITEMS)
        self._setup_ui()

    def _setup_ui(self):
        self.setMinimumWidth(220)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        title = QLabel("Components")
        title_font = QFont("SF Pro Display", 14)
        title_font.setWeight(QFont.Weight.Bold)
        title.setFont(title_font)
        title.setStyleSheet("color: #111827;")
        layout.addWidget(title)

        subtitle = QLabel("Click to add or drag onto canvas")
        subtitle.setStyleSheet("color: #6B7280; font-size: 12px; margin-bottom: 8px;")
        layout.addWidget(subtitle)

        for item in self._items:
            btn = PaletteItemButton(item)
            btn.clicked_with_kind.connect(self.kindSelected)
            layout.addWidget(btn)

        layout.addStretch()

        help_text = QLabel("Drag from a node's right handle\nto another node to connect")
        help_text.setAlignment(Qt.AlignmentFlag.AlignCenter)
        help_text.setStyleSheet("""
            color: #9CA3AF;
            font-size: 11px;
            padding: 12px;
            background: #F9FAFB;
            border-radius: 6px;
        """)
        layout.addWidget(help_text)
