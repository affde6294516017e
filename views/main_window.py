"""
Main application window.

Assembles the palette, the canvas and the automation toolbar, and owns
the controlled canvas value that is saved to and loaded from the store.
"""

import logging
from typing import Optional
from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout,
    QToolBar, QPushButton, QLabel, QSplitter,
    QStatusBar, QMessageBox, QLineEdit, QDialog,
    QDialogButtonBox, QListWidget, QListWidgetItem, QSizePolicy
)

from models import CanvasDocument, NodeKind
from views.automation_canvas import AutomationCanvas, qt_scheduler
from views.automation_palette import AutomationPalette
from services import (
    AutomationEditor, AutomationStore, AutomationRecord,
    AutomationStoreError, get_settings
)

logger = logging.getLogger(__name__)


class AutomationToolbar(QToolBar):
    """Toolbar with the automation name and save controls."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._setup_ui()

    def _setup_ui(self):
        self.setMovable(False)
        self.setStyleSheet("""
            QToolBar {
                background: white;
                border-bottom: 1px solid #E5E7EB;
                padding: 8px 16px;
                spacing: 8px;
            }
        """)

        name_label = QLabel("Name")
        name_label.setStyleSheet("color: #6B7280; font-size: 12px;")
        self.addWidget(name_label)

        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("Automation name")
        self.name_edit.setMinimumWidth(260)
        self.name_edit.setStyleSheet("""
            QLineEdit {
                border: 1px solid #D1D5DB;
                border-radius: 6px;
                padding: 6px 8px;
            }
        """)
        self.addWidget(self.name_edit)

        self.addSeparator()

        self.save_btn = QPushButton("Save")
        self.save_btn.setEnabled(False)
        self.save_btn.setStyleSheet("""
            QPushButton {
                background: #3B82F6;
                color: white;
                border: none;
                border-radius: 6px;
                padding: 8px 16px;
                font-weight: 600;
            }
            QPushButton:hover {
                background: #2563EB;
            }
            QPushButton:disabled {
                background: #93C5FD;
            }
        """)
        self.addWidget(self.save_btn)

        spacer = QWidget()
        spacer.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        self.addWidget(spacer)

        self.status_label = QLabel("Unsaved")
        self.status_label.setStyleSheet("color: #6B7280; font-size: 12px;")
        self.addWidget(self.status_label)


class OpenAutomationDialog(QDialog):
    """Dialog listing stored automations, newest first."""

    def __init__(self, records: list[AutomationRecord], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Open Automation")
        self.setMinimumSize(420, 360)
        self._setup_ui(records)

    def _setup_ui(self, records: list[AutomationRecord]):
        layout = QVBoxLayout(self)

        self.list_widget = QListWidget()
        for record in records:
            item = QListWidgetItem(f"{record.name}    ({record.updated_at or record.created_at})")
            item.setData(Qt.ItemDataRole.UserRole, record.id)
            self.list_widget.addItem(item)
        self.list_widget.itemDoubleClicked.connect(lambda _: self.accept())
        layout.addWidget(self.list_widget)

        if not records:
            empty = QLabel("No saved automations yet")
            empty.setStyleSheet("color: #9CA3AF;")
            layout.addWidget(empty)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Open | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def selected_id(self) -> Optional[str]:
        item = self.list_widget.currentItem()
        if item is None:
            return None
        return item.data(Qt.ItemDataRole.UserRole)


class MainWindow(QMainWindow):
    """
    Main application window for the automation editor.

    Layout:
    ┌─────────────────────────────────────────────────────┐
    │  Toolbar: Name [..........] [Save]          Status  │
    ├─────────────┬───────────────────────────────────────┤
    │             │                                       │
    │  Palette    │          Automation Canvas            │
    │             │                                       │
    ├─────────────┴───────────────────────────────────────┤
    │  Status Bar                                         │
    └─────────────────────────────────────────────────────┘

    The window holds the canvas value. Edits arrive through the editor's
    on_change callback and are fed straight back with set_value, the way
    a controlled owner would.
    """

    def __init__(self, open_id: Optional[str] = None):
        super().__init__()

        # Settings manager (JSON file based)
        self.settings_manager = get_settings()
        self.settings_manager.ensure_workspace()
        self.store = AutomationStore(self.settings_manager.get_automations_dir())

        # Controlled canvas value and the record it belongs to
        self.canvas_value = CanvasDocument()
        self.automation_id = self.store.new_id()
        self._saved = False

        self.editor = AutomationEditor(
            value=self.canvas_value,
            on_change=self._on_canvas_changed,
            schedule=qt_scheduler,
        )

        # Setup
        self._setup_window()
        self._setup_menu()
        self._setup_toolbar()
        self._setup_central_widget()
        self._setup_status_bar()
        self._connect_signals()

        # Restore window geometry
        self._load_window_settings()

        reopen = open_id or self.settings_manager.last_automation_id
        if reopen:
            self.open_automation(reopen)

    def _load_window_settings(self):
        """Restore window geometry and state."""
        geometry, state = self.settings_manager.get_window_geometry()
        if geometry:
            self.restoreGeometry(geometry)
        if state:
            self.restoreState(state)

    def _save_window_settings(self):
        """Save window geometry and state."""
        self.settings_manager.save_window_geometry(
            bytes(self.saveGeometry()),
            bytes(self.saveState())
        )

    def closeEvent(self, event):
        """Handle window close - save settings."""
        self._save_window_settings()
        super().closeEvent(event)

    def _setup_window(self):
        self._update_window_title()
        self.setMinimumSize(1000, 700)
        self.resize(1280, 820)

        self.setStyleSheet("""
            QMainWindow {
                background: #F3F4F6;
            }
            QSplitter::handle {
                background: #E5E7EB;
            }
            QSplitter::handle:horizontal {
                width: 1px;
            }
        """)

    def _update_window_title(self):
        """Update window title with the automation name."""
        base_title = "Automation Canvas"
        name = self.toolbar.name_edit.text().strip() if hasattr(self, "toolbar") else ""
        marker = "" if self._saved else " *"
        self.setWindowTitle(f"{name or 'Untitled'}{marker} - {base_title}")

    def _setup_menu(self):
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")

        new_action = QAction("&New Automation", self)
        new_action.setShortcut(QKeySequence.StandardKey.New)
        new_action.triggered.connect(self._on_new_automation)
        file_menu.addAction(new_action)

        open_action = QAction("&Open...", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self._on_open_automation)
        file_menu.addAction(open_action)

        save_action = QAction("&Save", self)
        save_action.setShortcut(QKeySequence.StandardKey.Save)
        save_action.triggered.connect(self._on_save)
        file_menu.addAction(save_action)

        file_menu.addSeparator()

        self._recent_menu = file_menu.addMenu("Open &Recent")
        self._recent_menu.aboutToShow.connect(self._populate_recent_menu)

        file_menu.addSeparator()

        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        edit_menu = menubar.addMenu("&Edit")

        # The canvas handles the Delete and Backspace keys itself
        delete_action = QAction("&Delete Selected", self)
        delete_action.triggered.connect(self._on_delete_selected)
        edit_menu.addAction(delete_action)

        view_menu = menubar.addMenu("&View")

        fit_action = QAction("&Fit to Contents", self)
        fit_action.setShortcut("Ctrl+0")
        fit_action.triggered.connect(lambda: self.canvas.fit_contents())
        view_menu.addAction(fit_action)

        reset_action = QAction("&Reset View", self)
        reset_action.setShortcut("Ctrl+R")
        reset_action.triggered.connect(lambda: self.canvas.reset_view())
        view_menu.addAction(reset_action)

        view_menu.addSeparator()

        minimap_action = QAction("Show &Minimap", self)
        minimap_action.setCheckable(True)
        minimap_action.setChecked(self.settings_manager.canvas.show_minimap)
        minimap_action.toggled.connect(self._on_toggle_minimap)
        view_menu.addAction(minimap_action)

    def _setup_toolbar(self):
        self.toolbar = AutomationToolbar()
        self.addToolBar(self.toolbar)

    def _setup_central_widget(self):
        central = QWidget()
        self.setCentralWidget(central)

        layout = QHBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        splitter = QSplitter(Qt.Orientation.Horizontal)

        self.palette = AutomationPalette()
        self.palette.setStyleSheet("""
            QWidget {
                background: white;
                border-right: 1px solid #E5E7EB;
            }
        """)
        splitter.addWidget(self.palette)

        self.canvas = AutomationCanvas(self.editor, self.settings_manager.canvas)
        splitter.addWidget(self.canvas)

        splitter.setSizes([240, 1040])
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)
        layout.addWidget(splitter)

    def _setup_status_bar(self):
        status = QStatusBar()
        status.setStyleSheet("""
            QStatusBar {
                background: #F9FAFB;
                border-top: 1px solid #E5E7EB;
                padding: 4px 8px;
                color: #6B7280;
                font-size: 12px;
            }
        """)
        self.setStatusBar(status)

        self._count_label = QLabel("Nodes: 0  Edges: 0")
        status.addWidget(self._count_label)

        status.addWidget(QWidget(), 1)

        self._instruction_label = QLabel("Drag items onto the canvas • Right-click for menu • Scroll to zoom")
        status.addWidget(self._instruction_label)

    def _connect_signals(self):
        # Palette -> Canvas handle
        self.palette.kindSelected.connect(self._on_kind_selected)

        # Scene -> counts
        self.canvas.automation_scene.documentChanged.connect(self._update_counts)
        self._update_counts(len(self.editor.document.nodes), len(self.editor.document.edges))

        # Toolbar
        self.toolbar.name_edit.textChanged.connect(self._on_name_changed)
        self.toolbar.save_btn.clicked.connect(self._on_save)

    def _on_kind_selected(self, kind: NodeKind):
        node = self.canvas.handle.create_node(kind)
        if node is not None:
            self.statusBar().showMessage(f"Added {kind.value}", 2000)

    def _on_canvas_changed(self, document: CanvasDocument):
        """Edits from the canvas become the owned value and flow back in."""
        self.canvas_value = document
        self._mark_dirty()
        self.editor.set_value(self.canvas_value)

    def _on_name_changed(self, text: str):
        self.toolbar.save_btn.setEnabled(bool(text.strip()))
        self._mark_dirty()

    def _mark_dirty(self):
        self._saved = False
        self.toolbar.status_label.setText("Unsaved")
        self._update_window_title()

    def _update_counts(self, nodes: int, edges: int):
        self._count_label.setText(f"Nodes: {nodes}  Edges: {edges}")

    def _on_delete_selected(self):
        self.canvas.automation_scene.delete_selected()

    def _on_toggle_minimap(self, checked: bool):
        self.canvas.set_minimap_visible(checked)
        self.settings_manager.save()

    # Persistence. Requests run on the next event loop turn and report
    # failures in the status bar.

    def _on_save(self):
        name = self.toolbar.name_edit.text().strip()
        if not name:
            self.statusBar().showMessage("Enter a name before saving", 3000)
            return

        self.editor.save()
        document = self.canvas_value.copy()
        automation_id = self.automation_id
        self.toolbar.status_label.setText("Saving...")
        QTimer.singleShot(0, lambda: self._save_automation(automation_id, name, document))

    def _save_automation(self, automation_id: str, name: str, document: CanvasDocument):
        try:
            self.store.save(automation_id, name, document)
        except (ValueError, AutomationStoreError) as e:
            logger.error(f"Failed to save automation {automation_id}: {e}")
            self.toolbar.status_label.setText("Save failed")
            self.statusBar().showMessage(f"Save failed: {e}", 5000)
            return

        self.settings_manager.add_recent_automation(automation_id)
        self.settings_manager.last_automation_id = automation_id
        if automation_id == self.automation_id:
            self._saved = True
            self.toolbar.status_label.setText("Saved")
            self._update_window_title()
        self.statusBar().showMessage(f"Saved '{name}'", 2000)

    def open_automation(self, automation_id: str):
        """Load a stored automation into the editor on the next event loop turn."""
        self.toolbar.status_label.setText("Loading...")
        QTimer.singleShot(0, lambda: self._load_automation(automation_id))

    def _load_automation(self, automation_id: str):
        try:
            record = self.store.get(automation_id)
        except AutomationStoreError as e:
            logger.error(f"Failed to load automation {automation_id}: {e}")
            self.toolbar.status_label.setText("Load failed")
            self.statusBar().showMessage(f"Could not open automation: {e}", 5000)
            return

        self.automation_id = record.id
        self.canvas_value = record.document
        self.editor.set_value(self.canvas_value)

        self.toolbar.name_edit.blockSignals(True)
        self.toolbar.name_edit.setText(record.name)
        self.toolbar.name_edit.blockSignals(False)
        self.toolbar.save_btn.setEnabled(bool(record.name.strip()))

        self._saved = True
        self.toolbar.status_label.setText("Saved")
        self._update_window_title()
        self.settings_manager.add_recent_automation(record.id)
        self.settings_manager.last_automation_id = record.id
        self.canvas.fit_contents()
        self.statusBar().showMessage(f"Opened '{record.name}'", 2000)

    def _confirm_discard(self, title: str) -> bool:
        if self._saved or self.editor.document.is_empty:
            return True
        reply = QMessageBox.question(
            self,
            title,
            "Discard unsaved changes?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        return reply == QMessageBox.StandardButton.Yes

    def _on_new_automation(self):
        if not self._confirm_discard("New Automation"):
            return

        self.automation_id = self.store.new_id()
        self.canvas_value = CanvasDocument()
        self.editor.set_value(self.canvas_value)

        self.toolbar.name_edit.blockSignals(True)
        self.toolbar.name_edit.clear()
        self.toolbar.name_edit.blockSignals(False)
        self.toolbar.save_btn.setEnabled(False)

        self._mark_dirty()
        self.canvas.reset_view()
        self.statusBar().showMessage("New automation created", 2000)

    def _on_open_automation(self):
        if not self._confirm_discard("Open Automation"):
            return

        dialog = OpenAutomationDialog(self.store.list_automations(), self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        automation_id = dialog.selected_id()
        if automation_id:
            self.open_automation(automation_id)

    def _populate_recent_menu(self):
        self._recent_menu.clear()
        for automation_id in self.settings_manager.get_recent_automations():
            try:
                label = self.store.get(automation_id).name
            except AutomationStoreError:
                continue
            action = self._recent_menu.addAction(label)
            action.triggered.connect(lambda checked, i=automation_id: self.open_automation(i))

        if self._recent_menu.isEmpty():
            action = self._recent_menu.addAction("No recent automations")
            action.setEnabled(False)
