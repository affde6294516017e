"""
Automation editor controller.

Ties the working document, node placement, context menu state,
drag-and-drop and the synchronizer together. The Qt canvas forwards
user gestures here; hosts talk to it through the CanvasHandle
capability and the on_change callback.
"""

import logging
from typing import Any, Callable, Iterable, Optional, Protocol, Union

from models import AutomationEdge, AutomationNode, CanvasDocument, NodeKind
from .placement import BoundsProvider, NodeIdMinter, NodePlacementEngine, ViewTransform
from .interaction import InteractionStateManager
from .drag_drop import DragDropIngestion
from .synchronizer import CanvasStateSynchronizer, Scheduler

logger = logging.getLogger(__name__)

KindLike = Union[NodeKind, str]


class CanvasHandle(Protocol):
    """Capability a host holds to insert nodes from outside the canvas."""

    def create_node(self, kind: KindLike) -> Optional[AutomationNode]:
        ...


class AutomationEditor:
    """
    Editing session over one automation document.

    Args:
        value: Optional initial document (CanvasDocument or saved dict).
        on_change: Called with a document snapshot when the user edits.
        schedule: Next-turn scheduler for the synchronizer guard.
        minter: Optional node id minter.
    """

    def __init__(
        self,
        value: Any = None,
        on_change: Optional[Callable[[CanvasDocument], None]] = None,
        schedule: Optional[Scheduler] = None,
        minter: Optional[NodeIdMinter] = None,
    ):
        self._document_listeners: list[Callable[[CanvasDocument], None]] = []
        self._container_origin: Callable[[], tuple[float, float]] = lambda: (0.0, 0.0)

        self.sync = CanvasStateSynchronizer(
            initial=value,
            on_change=on_change,
            schedule=schedule,
            on_replaced=self._on_document_replaced,
        )
        self.placement = NodePlacementEngine(
            document_getter=lambda: self.sync.working_document,
            minter=minter,
        )
        self.interaction = InteractionStateManager(
            place_node=self.placement.create_node_at,
            document_getter=lambda: self.sync.working_document,
            container_origin=lambda: self._container_origin(),
            on_mutation=self._mutated,
        )
        self.drag_drop = DragDropIngestion(
            place_node=self.placement.create_node_at,
            container_origin=lambda: self._container_origin(),
            on_mutation=self._mutated,
        )

    @property
    def document(self) -> CanvasDocument:
        """The working document. Do not keep it: external values replace it."""
        return self.sync.working_document

    @property
    def on_change(self) -> Optional[Callable[[CanvasDocument], None]]:
        return self.sync.on_change

    @on_change.setter
    def on_change(self, callback: Optional[Callable[[CanvasDocument], None]]):
        self.sync.on_change = callback

    def attach_view(
        self,
        transform: Optional[ViewTransform] = None,
        bounds: Optional[BoundsProvider] = None,
        container_origin: Optional[Callable[[], tuple[float, float]]] = None,
    ):
        """Connect the geometry of the widget displaying this editor."""
        self.placement.transform = transform
        self.placement.bounds = bounds
        if container_origin is not None:
            self._container_origin = container_origin

    def add_document_listener(self, listener: Callable[[CanvasDocument], None]):
        """Register a callback run after every structural change or replacement."""
        self._document_listeners.append(listener)

    def set_value(self, value: Any) -> bool:
        """Apply a value from the owner (controlled mode)."""
        return self.sync.apply_external(value)

    # CanvasHandle

    def create_node(self, kind: KindLike) -> Optional[AutomationNode]:
        """Insert a node in the middle of the visible canvas."""
        node_kind = NodeKind.parse(kind)
        if node_kind is None:
            logger.warning(f"Unknown node kind: {kind!r}")
            return None
        node = self.placement.create_node_at_center(node_kind)
        self._mutated()
        return node

    # Gestures

    def create_node_at(self, x: float, y: float, kind: KindLike) -> Optional[AutomationNode]:
        node_kind = NodeKind.parse(kind)
        if node_kind is None:
            logger.warning(f"Unknown node kind: {kind!r}")
            return None
        node = self.placement.create_node_at(x, y, node_kind)
        self._mutated()
        return node

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """Record a drag. Returns True if the owner was notified."""
        if self.document.move_node(node_id, x, y) is None:
            return False
        return self.sync.on_internal_mutation()

    def connect(self, source: str, target: str) -> Optional[AutomationEdge]:
        """
        Connect two nodes.

        Unknown endpoints and repeated connections between the same pair
        are ignored.
        """
        document = self.document
        if document.get_node(source) is None or document.get_node(target) is None:
            logger.debug(f"Ignoring connect {source} -> {target}: missing endpoint")
            return None
        if document.find_edge(source, target) is not None:
            return None

        edge = document.add_edge(source, target)
        self._mutated()
        return edge

    def delete_node(self, node_id: str) -> Optional[AutomationNode]:
        removed = self.document.remove_node(node_id)
        if removed is not None:
            self._mutated()
        return removed

    def delete_edge(self, edge_id: str) -> Optional[AutomationEdge]:
        removed = self.document.remove_edge(edge_id)
        if removed is not None:
            self._mutated()
        return removed

    def delete_items(self, node_ids: Iterable[str] = (), edge_ids: Iterable[str] = ()) -> int:
        """Delete a selection as one edit. Returns how many items went away."""
        document = self.document
        count = 0
        for edge_id in edge_ids:
            if document.remove_edge(edge_id) is not None:
                count += 1
        for node_id in node_ids:
            if document.remove_node(node_id) is not None:
                count += 1
        if count:
            self._mutated()
        return count

    def handle_drop(self, payload: Optional[str], x: float, y: float) -> Optional[AutomationNode]:
        return self.drag_drop.handle_drop(payload, x, y)

    def save(self) -> CanvasDocument:
        """Push the current document to the owner, even if unchanged."""
        return self.sync.flush()

    def _mutated(self):
        self.sync.on_internal_mutation()
        self._notify_listeners()

    def _on_document_replaced(self, document: CanvasDocument):
        self.interaction.dismiss()
        self._notify_listeners()

    def _notify_listeners(self):
        for listener in self._document_listeners:
            listener(self.document)
