"""
Automation canvas for visual graph editing.

Uses Qt's Graphics View Framework for rendering and interaction. All
edits go through an AutomationEditor; the scene only mirrors the
editor's working document.
"""

import logging
from typing import Optional
from PyQt6.QtCore import Qt, QPoint, QPointF, QRectF, QTimer, pyqtSignal
from PyQt6.QtGui import (
    QPainter, QPen, QBrush, QColor, QFont, QPainterPath, QPolygonF,
    QWheelEvent, QMouseEvent, QKeyEvent, QContextMenuEvent,
    QDragEnterEvent, QDragMoveEvent, QDropEvent, QResizeEvent
)
from PyQt6.QtWidgets import (
    QGraphicsView, QGraphicsScene, QGraphicsItem,
    QGraphicsRectItem, QGraphicsEllipseItem, QGraphicsPathItem,
    QGraphicsTextItem, QMenu
)

from models import AutomationNode, CanvasDocument, NodeKind
from services import (
    AutomationEditor, CanvasSettings, DragDropIngestion, PaneMenuOpen,
    NodeMenuOpen, PANE_MENU_ITEMS
)

# Setup logger for this module
logger = logging.getLogger(__name__)


# Color scheme
COLORS = {
    NodeKind.TRIGGER: QColor("#F59E0B"),   # Amber
    NodeKind.ACTION: QColor("#3B82F6"),    # Blue
    NodeKind.CONDITION: QColor("#8B5CF6"), # Violet
    "edge": QColor("#6B7280"),             # Gray
    "selection": QColor("#10B981"),        # Green
    "hover": QColor("#60A5FA"),            # Light blue
    "grid": QColor("#2A2A2A"),             # Dark dots
    "background": QColor("#18181B"),       # Near black
    "node_fill": QColor("#27272A"),
    "node_text": QColor("#F4F4F5"),
    "anchor": QColor("#A1A1AA"),
}

MENU_STYLE = """
    QMenu {
        background: white;
        border: 1px solid #D1D5DB;
        border-radius: 8px;
        padding: 4px;
    }
    QMenu::item {
        padding: 6px 20px;
        border-radius: 4px;
    }
    QMenu::item:selected {
        background: #EBF5FF;
    }
"""


def qt_scheduler(callback):
    """Run callback on the next turn of the Qt event loop."""
    QTimer.singleShot(0, callback)


class AnchorGraphicsItem(QGraphicsEllipseItem):
    """
    Connection anchor on a node.

    Dragging from the outgoing anchor (right side) to another node
    creates an edge.
    """

    RADIUS = 5.0

    def __init__(self, parent_node: 'NodeGraphicsItem', outgoing: bool):
        r = self.RADIUS
        super().__init__(-r, -r, 2 * r, 2 * r, parent_node)
        self.parent_node = parent_node
        self.outgoing = outgoing
        self.setBrush(QBrush(COLORS["anchor"]))
        self.setPen(QPen(COLORS["background"], 1))
        self.setAcceptHoverEvents(outgoing)
        if outgoing:
            self.setCursor(Qt.CursorShape.CrossCursor)

    def hoverEnterEvent(self, event):
        self.setBrush(QBrush(COLORS["hover"]))
        super().hoverEnterEvent(event)

    def hoverLeaveEvent(self, event):
        self.setBrush(QBrush(COLORS["anchor"]))
        super().hoverLeaveEvent(event)

    def mousePressEvent(self, event):
        scene = self.scene()
        if self.outgoing and event.button() == Qt.MouseButton.LeftButton and isinstance(scene, AutomationScene):
            scene.start_connection(self.parent_node)
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        scene = self.scene()
        if isinstance(scene, AutomationScene) and scene.is_connecting:
            scene.update_connection(event.scenePos())
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        scene = self.scene()
        if isinstance(scene, AutomationScene) and scene.is_connecting:
            scene.finish_connection(event.scenePos())
            event.accept()
            return
        super().mouseReleaseEvent(event)


class NodeGraphicsItem(QGraphicsRectItem):
    """
    Visual representation of an automation node.

    The item's position is the node's top-left corner in scene
    coordinates, the same convention the saved document uses.
    """

    def __init__(self, node: AutomationNode, width: float, height: float):
        super().__init__(0, 0, width, height)
        self.node_id = node.id
        self.kind = node.kind

        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable, True)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)
        self.setAcceptHoverEvents(True)
        self.setPen(QPen(COLORS[node.kind], 2))
        self.setBrush(QBrush(COLORS["node_fill"]))

        self._label = QGraphicsTextItem(self)
        self._label.setDefaultTextColor(COLORS["node_text"])
        self._label.setFont(QFont("SF Pro Display", 10))

        self._in_anchor = AnchorGraphicsItem(self, outgoing=False)
        self._in_anchor.setPos(0, height / 2)
        self._out_anchor = AnchorGraphicsItem(self, outgoing=True)
        self._out_anchor.setPos(width, height / 2)

        self.update_from_model(node)
        # Enabled last so the initial setPos is not reported as a drag
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemSendsGeometryChanges, True)

    def update_from_model(self, node: AutomationNode):
        """Refresh label, color and position from the document."""
        self.kind = node.kind
        self.setPen(QPen(COLORS[node.kind], 2))
        self.setToolTip(f"{node.kind.value}: {node.id}")

        if self._label.toPlainText() != node.label:
            self._label.setPlainText(node.label)
        rect = self.rect()
        text_rect = self._label.boundingRect()
        self._label.setPos(
            (rect.width() - text_rect.width()) / 2,
            (rect.height() - text_rect.height()) / 2,
        )

        if self.pos() != QPointF(node.position.x, node.position.y):
            self.setPos(node.position.x, node.position.y)

    def incoming_point(self) -> QPointF:
        return self._in_anchor.scenePos()

    def outgoing_point(self) -> QPointF:
        return self._out_anchor.scenePos()

    def itemChange(self, change: QGraphicsItem.GraphicsItemChange, value):
        """Report position changes to the scene."""
        if change == QGraphicsItem.GraphicsItemChange.ItemPositionHasChanged:
            scene = self.scene()
            if scene and isinstance(scene, AutomationScene):
                scene.node_item_moved(self)
        return super().itemChange(change, value)

    def hoverEnterEvent(self, event):
        self.setPen(QPen(COLORS["hover"], 2))
        super().hoverEnterEvent(event)

    def hoverLeaveEvent(self, event):
        self.setPen(QPen(COLORS[self.kind], 2))
        super().hoverLeaveEvent(event)

    def paint(self, painter: QPainter, option, widget=None):
        """Rounded box with a selection ring."""
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        rect = self.rect()
        if self.isSelected():
            painter.setPen(QPen(COLORS["selection"], 2, Qt.PenStyle.DashLine))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRoundedRect(rect.adjusted(-4, -4, 4, 4), 10, 10)
        painter.setPen(self.pen())
        painter.setBrush(self.brush())
        painter.drawRoundedRect(rect, 8, 8)


def _edge_path(start: QPointF, end: QPointF) -> QPainterPath:
    """Horizontal bezier between two anchors."""
    path = QPainterPath(start)
    dx = max(abs(end.x() - start.x()) * 0.5, 40.0)
    path.cubicTo(
        QPointF(start.x() + dx, start.y()),
        QPointF(end.x() - dx, end.y()),
        end,
    )
    return path


class EdgeGraphicsItem(QGraphicsPathItem):
    """Visual representation of an edge between two nodes."""

    ARROW_SIZE = 8.0

    def __init__(self, edge_id: str, source_item: NodeGraphicsItem, target_item: NodeGraphicsItem):
        super().__init__()
        self.edge_id = edge_id
        self.source_item = source_item
        self.target_item = target_item
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)
        self.setPen(QPen(COLORS["edge"], 2))
        self.setZValue(-1)  # Behind nodes
        self.update_position()

    def update_position(self):
        self.setPath(_edge_path(self.source_item.outgoing_point(), self.target_item.incoming_point()))

    def paint(self, painter: QPainter, option, widget=None):
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        color = COLORS["selection"] if self.isSelected() else COLORS["edge"]
        painter.setPen(QPen(color, 2))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(self.path())

        # Arrow head at the target anchor
        end = self.target_item.incoming_point()
        s = self.ARROW_SIZE
        painter.setBrush(QBrush(color))
        painter.drawPolygon(QPolygonF([
            end,
            QPointF(end.x() - s, end.y() - s / 2),
            QPointF(end.x() - s, end.y() + s / 2),
        ]))


class TempEdgeItem(QGraphicsPathItem):
    """Edge preview shown while dragging from an anchor."""

    def __init__(self, start: QPointF):
        super().__init__()
        self._start = start
        self.setPen(QPen(COLORS["hover"], 2, Qt.PenStyle.DashLine))
        self.setZValue(10)
        self.update_end(start)

    def update_end(self, end: QPointF):
        self.setPath(_edge_path(self._start, end))


class AutomationScene(QGraphicsScene):
    """
    Scene mirroring the editor's working document.

    Gestures are forwarded to the editor; the scene rebuilds its items
    from the document whenever the editor reports a change.
    """

    # Signals
    documentChanged = pyqtSignal(int, int)   # node count, edge count

    def __init__(self, editor: AutomationEditor, canvas_settings: CanvasSettings, parent=None):
        super().__init__(parent)
        self.editor = editor
        self.canvas_settings = canvas_settings

        # Graphics items tracking
        self._node_items: dict[str, NodeGraphicsItem] = {}
        self._edge_items: dict[str, EdgeGraphicsItem] = {}

        # Connection state
        self._connect_source: Optional[NodeGraphicsItem] = None
        self._temp_edge: Optional[TempEdgeItem] = None
        self._syncing = False

        self.setBackgroundBrush(COLORS["background"])
        self.setSceneRect(QRectF(-4000, -4000, 8000, 8000))

        editor.add_document_listener(self.sync_from_document)
        self.sync_from_document(editor.document)

    def get_node_item(self, node_id: str) -> Optional[NodeGraphicsItem]:
        return self._node_items.get(node_id)

    def get_edge_item(self, edge_id: str) -> Optional[EdgeGraphicsItem]:
        return self._edge_items.get(edge_id)

    def sync_from_document(self, document: CanvasDocument):
        """Add, update and remove items so the scene matches the document."""
        self._syncing = True
        try:
            self._sync_nodes(document)
            self._sync_edges(document)
        finally:
            self._syncing = False
        self.documentChanged.emit(len(document.nodes), len(document.edges))

    def _sync_nodes(self, document: CanvasDocument):
        wanted = {n.id for n in document.nodes}
        for node_id in [nid for nid in self._node_items if nid not in wanted]:
            item = self._node_items.pop(node_id)
            if self._connect_source is item:
                self.cancel_connection()
            self.removeItem(item)

        width, height = self.canvas_settings.node_width, self.canvas_settings.node_height
        for z, node in enumerate(document.nodes):
            item = self._node_items.get(node.id)
            if item is None:
                item = NodeGraphicsItem(node, width, height)
                self.addItem(item)
                self._node_items[node.id] = item
            else:
                # May fire itemChange; the editor's guard covers replacements
                item.update_from_model(node)
            item.setZValue(z)

    def _sync_edges(self, document: CanvasDocument):
        wanted = {e.id for e in document.edges}
        for edge_id in [eid for eid in self._edge_items if eid not in wanted]:
            self.removeItem(self._edge_items.pop(edge_id))

        for edge in document.edges:
            item = self._edge_items.get(edge.id)
            source = self._node_items.get(edge.source)
            target = self._node_items.get(edge.target)
            if source is None or target is None:
                continue
            if item is None or item.source_item is not source or item.target_item is not target:
                if item is not None:
                    self.removeItem(item)
                item = EdgeGraphicsItem(edge.id, source, target)
                self.addItem(item)
                self._edge_items[edge.id] = item
            else:
                item.update_position()

    def node_item_moved(self, item: NodeGraphicsItem):
        """Forward a drag to the editor and keep incident edges attached."""
        for edge_item in self._edge_items.values():
            if edge_item.source_item is item or edge_item.target_item is item:
                edge_item.update_position()

        if item.node_id not in self._node_items:
            return
        pos = item.pos()
        self.editor.move_node(item.node_id, pos.x(), pos.y())

    # Connections

    @property
    def is_connecting(self) -> bool:
        return self._connect_source is not None

    def start_connection(self, source_item: NodeGraphicsItem):
        self.cancel_connection()
        self._connect_source = source_item
        self._temp_edge = TempEdgeItem(source_item.outgoing_point())
        self.addItem(self._temp_edge)

    def update_connection(self, scene_pos: QPointF):
        if self._temp_edge:
            self._temp_edge.update_end(scene_pos)

    def finish_connection(self, scene_pos: QPointF):
        """Connect to the node under scene_pos, if any."""
        source = self._connect_source
        self.cancel_connection()
        if source is None:
            return

        target = self.node_item_at(scene_pos)
        if target is None:
            return
        edge = self.editor.connect(source.node_id, target.node_id)
        if edge is not None:
            logger.debug(f"Connected {source.node_id} -> {target.node_id} as {edge.id}")

    def cancel_connection(self):
        if self._temp_edge is not None:
            self.removeItem(self._temp_edge)
        self._temp_edge = None
        self._connect_source = None

    def node_item_at(self, scene_pos: QPointF) -> Optional[NodeGraphicsItem]:
        for item in self.items(scene_pos):
            if isinstance(item, NodeGraphicsItem):
                return item
            parent = item.parentItem()
            if isinstance(parent, NodeGraphicsItem):
                return parent
        return None

    def delete_selected(self) -> int:
        """Delete selected nodes and edges as one edit."""
        node_ids = []
        edge_ids = []
        for item in self.selectedItems():
            if isinstance(item, NodeGraphicsItem):
                node_ids.append(item.node_id)
            elif isinstance(item, EdgeGraphicsItem):
                edge_ids.append(item.edge_id)
        return self.editor.delete_items(node_ids, edge_ids)


class MiniMapView(QGraphicsView):
    """
    Overview of the whole automation in a corner of the canvas.

    Shares the canvas scene, outlines the part of it the canvas currently
    shows, and centers the canvas on whatever point is clicked.
    """

    SIZE = (200, 140)

    def __init__(self, canvas: 'AutomationCanvas'):
        super().__init__(canvas.automation_scene, canvas)
        self._canvas = canvas

        self.setFixedSize(*self.SIZE)
        self.setInteractive(False)
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.setStyleSheet("QGraphicsView { border: 1px solid #D1D5DB; background: white; }")

        canvas.automation_scene.documentChanged.connect(lambda nodes, edges: self.fit_scene())
        canvas.horizontalScrollBar().valueChanged.connect(lambda value: self.viewport().update())
        canvas.verticalScrollBar().valueChanged.connect(lambda value: self.viewport().update())
        self.fit_scene()

    def fit_scene(self):
        rect = self.scene().itemsBoundingRect()
        if rect.isEmpty():
            rect = QRectF(-200, -150, 400, 300)
        self.fitInView(rect.adjusted(-40, -40, 40, 40), Qt.AspectRatioMode.KeepAspectRatio)
        self.viewport().update()

    def drawBackground(self, painter: QPainter, rect: QRectF):
        painter.fillRect(rect, COLORS["background"])

    def drawForeground(self, painter: QPainter, rect: QRectF):
        """Outline the region visible in the canvas."""
        visible = self._canvas.mapToScene(self._canvas.viewport().rect()).boundingRect()
        painter.setPen(QPen(COLORS["selection"], 0))
        painter.setBrush(QBrush(QColor(16, 185, 129, 30)))
        painter.drawRect(visible)

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton:
            self._canvas.centerOn(self.mapToScene(event.position().toPoint()))
            self.viewport().update()
            event.accept()
            return
        super().mousePressEvent(event)

    def wheelEvent(self, event: QWheelEvent):
        event.ignore()


class AutomationCanvas(QGraphicsView):
    """
    Canvas widget for viewing and editing an automation graph.

    Provides zooming, panning, context menus and palette drops. Also the
    geometry source (view transform, bounds, origin) for the editor's
    node placement.
    """

    def __init__(
        self,
        editor: Optional[AutomationEditor] = None,
        canvas_settings: Optional[CanvasSettings] = None,
        parent=None
    ):
        super().__init__(parent)
        self.canvas_settings = canvas_settings or CanvasSettings()
        self.editor = editor or AutomationEditor(schedule=qt_scheduler)
        self.editor.attach_view(
            transform=self,
            bounds=self,
            container_origin=self.container_origin,
        )

        # Create scene
        self.automation_scene = AutomationScene(self.editor, self.canvas_settings)
        self.setScene(self.automation_scene)

        # View settings
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.FullViewportUpdate)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)
        self.setDragMode(QGraphicsView.DragMode.RubberBandDrag)
        self.setAcceptDrops(True)

        # State
        self._zoom_factor = 1.0
        self._is_panning = False
        self._last_pan_pos = QPointF()

        self.minimap = MiniMapView(self)
        self.set_minimap_visible(self.canvas_settings.show_minimap)

    @property
    def handle(self) -> AutomationEditor:
        """The createNode capability for hosts."""
        return self.editor

    # Geometry used by node placement

    def map_to_scene(self, x: float, y: float) -> tuple[float, float]:
        p = self.mapToScene(QPoint(round(x), round(y)))
        return p.x(), p.y()

    def container_size(self) -> tuple[float, float]:
        viewport = self.viewport()
        return float(viewport.width()), float(viewport.height())

    def container_origin(self) -> tuple[float, float]:
        origin = self.viewport().mapToGlobal(QPoint(0, 0))
        return float(origin.x()), float(origin.y())

    def drawBackground(self, painter: QPainter, rect: QRectF):
        """Draw dotted grid background."""
        super().drawBackground(painter, rect)
        if not self.canvas_settings.show_grid:
            return

        grid_size = max(self.canvas_settings.grid_size, 4)
        left = int(rect.left()) - (int(rect.left()) % grid_size)
        top = int(rect.top()) - (int(rect.top()) % grid_size)

        painter.setPen(QPen(COLORS["grid"], 1.5))
        x = left
        while x < rect.right():
            y = top
            while y < rect.bottom():
                painter.drawPoint(int(x), int(y))
                y += grid_size
            x += grid_size

    # Minimap

    def set_minimap_visible(self, visible: bool):
        self.canvas_settings.show_minimap = visible
        self.minimap.setVisible(visible)
        if visible:
            self._place_minimap()
            self.minimap.fit_scene()

    def _place_minimap(self):
        margin = 12
        self.minimap.move(
            self.viewport().width() - self.minimap.width() - margin,
            self.viewport().height() - self.minimap.height() - margin,
        )

    def resizeEvent(self, event: QResizeEvent):
        super().resizeEvent(event)
        self._place_minimap()
        self.minimap.viewport().update()

    # Context menus

    def contextMenuEvent(self, event: QContextMenuEvent):
        """Open the node menu over a node, the pane menu elsewhere."""
        interaction = self.editor.interaction
        scene_pos = self.mapToScene(event.pos())
        node_item = self.automation_scene.node_item_at(scene_pos)
        global_pos = event.globalPos()

        if node_item is not None:
            interaction.open_node_menu(node_item.node_id, global_pos.x(), global_pos.y())
        else:
            interaction.open_pane_menu(global_pos.x(), global_pos.y())

        self._exec_menu()
        # Closing the menu without choosing counts as a dismissal
        interaction.dismiss()
        event.accept()

    def _exec_menu(self):
        interaction = self.editor.interaction
        state = interaction.state

        menu = QMenu(self)
        menu.setStyleSheet(MENU_STYLE)

        if isinstance(state, PaneMenuOpen):
            for label, kind in PANE_MENU_ITEMS:
                action = menu.addAction(label)
                action.triggered.connect(lambda checked, k=kind: interaction.add_node_from_menu(k))
        elif isinstance(state, NodeMenuOpen):
            menu.addAction("Edit Node").triggered.connect(lambda checked: interaction.edit_node_from_menu())
            menu.addAction("Delete Node").triggered.connect(lambda checked: interaction.delete_node_from_menu())
            menu.addAction("Change Automation Type").triggered.connect(
                lambda checked: interaction.change_type_from_menu()
            )
        else:
            return

        menu.exec(QPoint(round(state.x), round(state.y)))

    # Palette drops

    @staticmethod
    def _is_palette_drag(event) -> bool:
        return any(DragDropIngestion.accepts(f) for f in event.mimeData().formats())

    def dragEnterEvent(self, event: QDragEnterEvent):
        if self._is_palette_drag(event):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event: QDragMoveEvent):
        if self._is_palette_drag(event):
            event.setDropAction(Qt.DropAction.CopyAction)
            event.accept()
        else:
            event.ignore()

    def dropEvent(self, event: QDropEvent):
        """Create a node for a palette item dropped on the canvas."""
        payload = event.mimeData().text()
        global_pos = self.viewport().mapToGlobal(event.position().toPoint())
        node = self.editor.handle_drop(payload, global_pos.x(), global_pos.y())
        if node is not None:
            event.setDropAction(Qt.DropAction.CopyAction)
            event.accept()
        else:
            event.ignore()

    # Zoom and pan

    def wheelEvent(self, event: QWheelEvent):
        """Handle zoom with mouse wheel, clamped to the configured range."""
        factor = self.canvas_settings.zoom_step
        if event.angleDelta().y() < 0:
            factor = 1 / factor

        new_zoom = self._zoom_factor * factor
        if not (self.canvas_settings.min_zoom <= new_zoom <= self.canvas_settings.max_zoom):
            return
        self._zoom_factor = new_zoom
        self.scale(factor, factor)
        self.minimap.viewport().update()

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.MiddleButton:
            self._is_panning = True
            self._last_pan_pos = event.position()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
            return
        if event.button() == Qt.MouseButton.LeftButton:
            self.editor.interaction.dismiss()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        if self._is_panning:
            delta = event.position() - self._last_pan_pos
            self._last_pan_pos = event.position()
            self.horizontalScrollBar().setValue(
                self.horizontalScrollBar().value() - int(delta.x())
            )
            self.verticalScrollBar().setValue(
                self.verticalScrollBar().value() - int(delta.y())
            )
            event.accept()
        else:
            super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if self._is_panning and event.button() == Qt.MouseButton.MiddleButton:
            self._is_panning = False
            self.unsetCursor()
            event.accept()
        else:
            super().mouseReleaseEvent(event)

    def keyPressEvent(self, event: QKeyEvent):
        """Handle keyboard shortcuts."""
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self.automation_scene.delete_selected()
            event.accept()
        elif event.key() == Qt.Key.Key_Escape:
            if self.automation_scene.is_connecting:
                self.automation_scene.cancel_connection()
            else:
                self.automation_scene.clearSelection()
            self.editor.interaction.dismiss()
            event.accept()
        else:
            super().keyPressEvent(event)

    def fit_contents(self):
        """Fit view to show all items."""
        rect = self.automation_scene.itemsBoundingRect()
        if rect.isEmpty():
            self.reset_view()
            return
        self.fitInView(rect.adjusted(-50, -50, 50, 50), Qt.AspectRatioMode.KeepAspectRatio)
        self._zoom_factor = self.transform().m11()
        self.minimap.viewport().update()

    def reset_view(self):
        """Reset to default zoom and position."""
        self.resetTransform()
        self._zoom_factor = 1.0
        self.centerOn(0, 0)
        self.minimap.viewport().update()
