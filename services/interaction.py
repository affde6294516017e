"""
Context menu state for the automation canvas.

At most one menu is open at a time. The state is a tagged variant
(MenuClosed | PaneMenuOpen | NodeMenuOpen) rather than two flags.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from models import AutomationNode, CanvasDocument, NodeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MenuClosed:
    """No context menu is open."""


@dataclass(frozen=True)
class PaneMenuOpen:
    """Menu opened by right-clicking empty canvas, at screen coordinates."""
    x: float
    y: float


@dataclass(frozen=True)
class NodeMenuOpen:
    """Menu opened by right-clicking a node."""
    node_id: str
    x: float
    y: float


MenuState = Union[MenuClosed, PaneMenuOpen, NodeMenuOpen]

MENU_CLOSED = MenuClosed()

# (label, kind) entries of the pane menu, in display order
PANE_MENU_ITEMS = [
    ("Add Node", NodeKind.ACTION),
    ("Add Trigger", NodeKind.TRIGGER),
    ("Add Condition", NodeKind.CONDITION),
]

NODE_MENU_ITEMS = ["Edit Node", "Delete Node", "Change Automation Type"]


class InteractionStateManager:
    """
    Tracks which context menu is open and performs menu actions.

    Args:
        place_node: Called as place_node(x, y, kind) with container-relative
            coordinates; normally NodePlacementEngine.create_node_at.
        document_getter: Returns the current working document.
        container_origin: Returns the container's top-left corner in the same
            coordinate space the menu events use.
        on_mutation: Called after a menu action changed the document.
    """

    def __init__(
        self,
        place_node: Callable[[float, float, NodeKind], AutomationNode],
        document_getter: Callable[[], CanvasDocument],
        container_origin: Optional[Callable[[], tuple[float, float]]] = None,
        on_mutation: Optional[Callable[[], None]] = None,
    ):
        self._place_node = place_node
        self._document_getter = document_getter
        self._container_origin = container_origin or (lambda: (0.0, 0.0))
        self._on_mutation = on_mutation
        self._state: MenuState = MENU_CLOSED
        self._listeners: list[Callable[[MenuState], None]] = []

    @property
    def state(self) -> MenuState:
        return self._state

    @property
    def is_open(self) -> bool:
        return not isinstance(self._state, MenuClosed)

    def add_listener(self, listener: Callable[[MenuState], None]):
        """Register a callback invoked with the new state on every transition."""
        self._listeners.append(listener)

    def _set_state(self, state: MenuState):
        self._state = state
        for listener in self._listeners:
            listener(state)

    # Transitions

    def open_pane_menu(self, x: float, y: float):
        self._set_state(PaneMenuOpen(x, y))

    def open_node_menu(self, node_id: str, x: float, y: float):
        self._set_state(NodeMenuOpen(node_id, x, y))

    def dismiss(self):
        if self.is_open:
            self._set_state(MENU_CLOSED)

    # Menu actions

    def add_node_from_menu(self, kind: NodeKind) -> Optional[AutomationNode]:
        """Place a node where the pane menu was opened, then close."""
        state = self._state
        if not isinstance(state, PaneMenuOpen):
            logger.debug(f"Ignoring add {kind.value}: pane menu not open")
            return None

        left, top = self._container_origin()
        node = self._place_node(state.x - left, state.y - top, kind)
        self._set_state(MENU_CLOSED)
        self._notify_mutation()
        return node

    def delete_node_from_menu(self) -> Optional[AutomationNode]:
        """Delete the node the menu was opened on (edges cascade), then close."""
        state = self._state
        if not isinstance(state, NodeMenuOpen):
            return None

        removed = self._document_getter().remove_node(state.node_id)
        self._set_state(MENU_CLOSED)
        if removed is not None:
            self._notify_mutation()
        return removed

    def edit_node_from_menu(self):
        """Placeholder: there is no node editing UI yet."""
        if isinstance(self._state, NodeMenuOpen):
            self._set_state(MENU_CLOSED)

    def change_type_from_menu(self):
        """Placeholder: changing a node's kind is not supported yet."""
        if isinstance(self._state, NodeMenuOpen):
            self._set_state(MENU_CLOSED)

    def _notify_mutation(self):
        if self._on_mutation:
            self._on_mutation()
