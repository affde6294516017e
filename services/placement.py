"""
Node placement.

Turns pointer, context-menu and drop coordinates into canvas-space
positions and mints identities for new nodes.
"""

import logging
import time
from typing import Callable, Optional, Protocol

from models import AutomationNode, CanvasDocument, NodeKind, Position

logger = logging.getLogger(__name__)


class ViewTransform(Protocol):
    """Maps viewport pixels to canvas (scene) coordinates, pan and zoom included."""

    def map_to_scene(self, x: float, y: float) -> tuple[float, float]:
        ...


class BoundsProvider(Protocol):
    """Reports the current size of the canvas container in pixels."""

    def container_size(self) -> tuple[float, float]:
        ...


class NodeIdMinter:
    """
    Mints node ids of the form "{kind}-{milliseconds}".

    The millisecond suffix is forced to increase strictly, so two nodes
    created within the same millisecond still get distinct ids.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._last_ms = 0

    def mint(self, kind: NodeKind, taken: Optional[Callable[[str], bool]] = None) -> str:
        ms = int(self._clock() * 1000)
        if ms <= self._last_ms:
            ms = self._last_ms + 1

        node_id = f"{kind.value}-{ms}"
        # Ids loaded from a saved document can be ahead of our clock
        while taken is not None and taken(node_id):
            ms += 1
            node_id = f"{kind.value}-{ms}"

        self._last_ms = ms
        return node_id


class NodePlacementEngine:
    """
    Creates nodes on the working document.

    Args:
        document_getter: Returns the current working document. A getter is
            used because the synchronizer may replace the document object.
        transform: Optional view transform; without one, viewport
            coordinates are used as canvas coordinates directly.
        bounds: Optional container bounds, needed for create_node_at_center.
        minter: Id minter, mostly overridden in tests.
    """

    def __init__(
        self,
        document_getter: Callable[[], CanvasDocument],
        transform: Optional[ViewTransform] = None,
        bounds: Optional[BoundsProvider] = None,
        minter: Optional[NodeIdMinter] = None,
    ):
        self._document_getter = document_getter
        self.transform = transform
        self.bounds = bounds
        self._minter = minter or NodeIdMinter()

    def project(self, viewport_x: float, viewport_y: float) -> Position:
        """Convert viewport pixels to a canvas position."""
        if self.transform is None:
            return Position(viewport_x, viewport_y)
        x, y = self.transform.map_to_scene(viewport_x, viewport_y)
        return Position(x, y)

    def create_node_at(self, viewport_x: float, viewport_y: float, kind: NodeKind) -> AutomationNode:
        """Create a node of the given kind under a viewport point."""
        document = self._document_getter()
        node = AutomationNode(
            id=self._minter.mint(kind, taken=lambda nid: document.get_node(nid) is not None),
            kind=kind,
            label=kind.default_label,
            position=self.project(viewport_x, viewport_y),
        )
        document.add_node(node)
        logger.debug(f"Placed {node.id} at ({node.position.x:.1f}, {node.position.y:.1f})")
        return node

    def create_node_at_center(self, kind: NodeKind) -> AutomationNode:
        """Create a node in the middle of the visible container."""
        width, height = self.bounds.container_size() if self.bounds else (0.0, 0.0)
        return self.create_node_at(width / 2, height / 2, kind)
