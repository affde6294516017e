"""
Automation graph data models.

These models represent the automation graph edited on the canvas:
typed nodes (trigger, action, condition) connected by edges. The
CanvasDocument is the unit exchanged with whoever owns the saved
automation and the unit compared when keeping the editor in sync.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
import logging
import math
import uuid

logger = logging.getLogger(__name__)


class NodeKind(Enum):
    """
    Kinds of automation nodes.

    The value is the wire name used in saved documents and in
    palette drag payloads.
    """
    TRIGGER = "trigger"       # Starts an automation (HTTP call, schedule, ...)
    ACTION = "action"         # Does something
    CONDITION = "condition"   # Branches on a predicate

    @property
    def default_label(self) -> str:
        """Label given to freshly placed nodes, e.g. 'Trigger node'."""
        return f"{self.value.title()} node"

    @classmethod
    def parse(cls, value: Any) -> Optional["NodeKind"]:
        """Return the kind for a wire name, or None if it is not one."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class GraphDocumentError(Exception):
    """Base class for structural invariant violations."""


class DuplicateIdError(GraphDocumentError):
    """A node with the same id already exists in the document."""

    def __init__(self, node_id: str):
        super().__init__(f"Node id already present: {node_id}")
        self.node_id = node_id


class DanglingReferenceError(GraphDocumentError):
    """An edge endpoint does not reference a node in the document."""

    def __init__(self, node_id: str):
        super().__init__(f"Edge endpoint does not exist: {node_id}")
        self.node_id = node_id


@dataclass
class Position:
    """2D position on the canvas."""
    x: float = 0.0
    y: float = 0.0

    def to_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass
class AutomationNode:
    """
    A node on the automation canvas.

    Attributes:
        id: Unique identifier within the document, never reassigned
        kind: Trigger, action or condition
        label: Display text
        position: Canvas position (free floating, no grid snapping)
    """
    id: str
    kind: NodeKind = NodeKind.ACTION
    label: str = ""
    position: Position = field(default_factory=Position)

    def __post_init__(self):
        if not self.label:
            self.label = self.kind.default_label

    def copy(self) -> "AutomationNode":
        return AutomationNode(
            id=self.id,
            kind=self.kind,
            label=self.label,
            position=Position(self.position.x, self.position.y),
        )


@dataclass
class AutomationEdge:
    """
    A directed connection between two nodes.

    Attributes:
        id: Unique identifier
        source: ID of the source node
        target: ID of the target node
    """
    id: str = field(default_factory=lambda: f"edge-{str(uuid.uuid4())[:8]}")
    source: str = ""
    target: str = ""

    def copy(self) -> "AutomationEdge":
        return AutomationEdge(id=self.id, source=self.source, target=self.target)


@dataclass
class PaletteItem:
    """An entry of the node palette, also carried as a drag payload."""
    id: str
    label: str
    kind: NodeKind


DEFAULT_PALETTE_ITEMS = [
    PaletteItem(id="trigger-http", label="HTTP Trigger", kind=NodeKind.TRIGGER),
    PaletteItem(id="action-log", label="Log Action", kind=NodeKind.ACTION),
    PaletteItem(id="condition-branch", label="Condition", kind=NodeKind.CONDITION),
]


@dataclass
class CanvasDocument:
    """
    Root model containing the whole automation graph.

    Node order is the rendering z-order; it does not matter for
    validity but it does matter for documents_equal().
    """
    nodes: list[AutomationNode] = field(default_factory=list)
    edges: list[AutomationEdge] = field(default_factory=list)

    def add_node(self, node: AutomationNode) -> AutomationNode:
        """Append a node. Raises DuplicateIdError if the id is taken."""
        if self.get_node(node.id) is not None:
            raise DuplicateIdError(node.id)
        self.nodes.append(node)
        return node

    def remove_node(self, node_id: str) -> Optional[AutomationNode]:
        """Remove a node and all edges touching it."""
        node = self.get_node(node_id)
        if node is None:
            return None

        self.edges = [
            e for e in self.edges
            if e.source != node_id and e.target != node_id
        ]
        self.nodes = [n for n in self.nodes if n.id != node_id]
        return node

    def add_edge(self, source: str, target: str) -> AutomationEdge:
        """
        Create and add an edge between two existing nodes.

        Raises:
            DanglingReferenceError: if either endpoint is not in the document
        """
        for endpoint in (source, target):
            if self.get_node(endpoint) is None:
                raise DanglingReferenceError(endpoint)

        edge = AutomationEdge(source=source, target=target)
        while self.get_edge(edge.id) is not None:
            edge = AutomationEdge(source=source, target=target)
        self.edges.append(edge)
        return edge

    def remove_edge(self, edge_id: str) -> Optional[AutomationEdge]:
        """Remove an edge by ID."""
        for i, edge in enumerate(self.edges):
            if edge.id == edge_id:
                return self.edges.pop(i)
        return None

    def move_node(self, node_id: str, x: float, y: float) -> Optional[AutomationNode]:
        """Update a node's canvas position; a non-finite coordinate is not applied."""
        node = self.get_node(node_id)
        if node is not None:
            node.position.x = _number(x, node.position.x)
            node.position.y = _number(y, node.position.y)
        return node

    def get_node(self, node_id: str) -> Optional[AutomationNode]:
        """Get a node by ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[AutomationEdge]:
        """Get an edge by ID."""
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def find_edge(self, source: str, target: str) -> Optional[AutomationEdge]:
        """Get the first edge going from source to target."""
        for edge in self.edges:
            if edge.source == source and edge.target == target:
                return edge
        return None

    def copy(self) -> "CanvasDocument":
        """Deep copy, safe to hand to another owner."""
        return CanvasDocument(
            nodes=[n.copy() for n in self.nodes],
            edges=[e.copy() for e in self.edges],
        )

    def clear(self):
        """Remove all nodes and edges."""
        self.nodes.clear()
        self.edges.clear()

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def to_dict(self) -> dict:
        """Serialize to the saved-automation shape."""
        return {
            "nodes": [
                {
                    "id": n.id,
                    "position": {"x": n.position.x, "y": n.position.y},
                    "data": {"label": n.label, "type": n.kind.value},
                }
                for n in self.nodes
            ],
            "edges": [
                {"id": e.id, "source": e.source, "target": e.target}
                for e in self.edges
            ],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "CanvasDocument":
        """
        Build a document from loosely shaped data.

        Never raises: anything that is not a mapping, or lacks node/edge
        lists, gives an empty document. Individual entries that cannot be
        read are skipped.
        """
        if isinstance(data, CanvasDocument):
            data = data.to_dict()
        document = cls()
        if not isinstance(data, dict):
            if data is not None:
                logger.warning(f"Ignoring malformed document of type {type(data).__name__}")
            return document

        raw_nodes = data.get("nodes")
        raw_edges = data.get("edges")
        if not isinstance(raw_nodes, list):
            raw_nodes = []
        if not isinstance(raw_edges, list):
            raw_edges = []

        for raw in raw_nodes:
            node = _node_from_dict(raw)
            if node is None or document.get_node(node.id) is not None:
                logger.debug(f"Skipping unreadable node entry: {raw!r}")
                continue
            document.nodes.append(node)

        for raw in raw_edges:
            edge = _edge_from_dict(raw)
            if edge is None:
                logger.debug(f"Skipping unreadable edge entry: {raw!r}")
                continue
            if document.get_node(edge.source) is None or document.get_node(edge.target) is None:
                logger.debug(f"Skipping dangling edge {edge.id}")
                continue
            document.edges.append(edge)

        return document


def _number(value: Any, default: float = 0.0) -> float:
    """Finite float for value, else default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    try:
        number = float(value)
    except OverflowError:
        return default
    return number if math.isfinite(number) else default


def _node_from_dict(raw: Any) -> Optional[AutomationNode]:
    if not isinstance(raw, dict):
        return None
    node_id = raw.get("id")
    if not isinstance(node_id, str) or not node_id:
        return None

    # Saved documents nest label/type under "data"; the flat form is also accepted
    data = raw.get("data") if isinstance(raw.get("data"), dict) else raw
    kind = NodeKind.parse(data.get("type", data.get("kind")))
    if kind is None:
        return None

    label = data.get("label")
    position = raw.get("position") if isinstance(raw.get("position"), dict) else {}
    return AutomationNode(
        id=node_id,
        kind=kind,
        label=label if isinstance(label, str) else "",
        position=Position(_number(position.get("x")), _number(position.get("y"))),
    )


def _edge_from_dict(raw: Any) -> Optional[AutomationEdge]:
    if not isinstance(raw, dict):
        return None
    edge_id, source, target = raw.get("id"), raw.get("source"), raw.get("target")
    if not all(isinstance(v, str) and v for v in (edge_id, source, target)):
        return None
    return AutomationEdge(id=edge_id, source=source, target=target)


def documents_equal(a: Optional[CanvasDocument], b: Optional[CanvasDocument]) -> bool:
    """
    Structural equality of two documents.

    Nodes and edges are compared by list position, not by id lookup:
    the same nodes in a different order are NOT equal.
    """
    if a is None or b is None:
        return False
    if len(a.nodes) != len(b.nodes) or len(a.edges) != len(b.edges):
        return False

    for an, bn in zip(a.nodes, b.nodes):
        if an.id != bn.id:
            return False
        if an.position.x != bn.position.x or an.position.y != bn.position.y:
            return False
        if an.kind != bn.kind or an.label != bn.label:
            return False

    for ae, be in zip(a.edges, b.edges):
        if ae.id != be.id or ae.source != be.source or ae.target != be.target:
            return False

    return True
