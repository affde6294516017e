"""
Palette drag-and-drop ingestion.

The palette sends a JSON string {"id", "label", "kind"} as the drag
payload. Drops that cannot be read are ignored without telling the user.
"""

import json
import logging
from typing import Callable, Optional

from models import AutomationNode, NodeKind, PaletteItem

logger = logging.getLogger(__name__)

# Mime type carried by palette drags
PALETTE_MIME_TYPE = "text/plain"


def encode_palette_payload(item: PaletteItem) -> str:
    """Serialize a palette item into a drag payload."""
    return json.dumps({"id": item.id, "label": item.label, "kind": item.kind.value})


def parse_palette_payload(payload: Optional[str]) -> Optional[PaletteItem]:
    """
    Parse a drag payload into a PaletteItem.

    Returns None if the payload is empty, not a JSON object, or names an
    unknown kind. Payloads using "type" instead of "kind" are accepted.
    """
    if not payload:
        return None

    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as e:
        logger.debug(f"Ignoring drop, payload is not JSON: {e}")
        return None

    if not isinstance(data, dict):
        logger.debug("Ignoring drop, payload is not an object")
        return None

    kind = NodeKind.parse(data.get("kind", data.get("type")))
    if kind is None:
        logger.debug(f"Ignoring drop with unknown kind: {data!r}")
        return None

    item_id = data.get("id")
    label = data.get("label")
    return PaletteItem(
        id=item_id if isinstance(item_id, str) else "",
        label=label if isinstance(label, str) else kind.default_label,
        kind=kind,
    )


class DragDropIngestion:
    """
    Routes palette drops into node placement.

    Args:
        place_node: Called as place_node(x, y, kind) with container-relative
            coordinates; normally NodePlacementEngine.create_node_at.
        container_origin: Returns the container's top-left corner in the
            coordinate space of the drop events.
        on_mutation: Called after a node was created.
    """

    def __init__(
        self,
        place_node: Callable[[float, float, NodeKind], AutomationNode],
        container_origin: Optional[Callable[[], tuple[float, float]]] = None,
        on_mutation: Optional[Callable[[], None]] = None,
    ):
        self._place_node = place_node
        self._container_origin = container_origin or (lambda: (0.0, 0.0))
        self._on_mutation = on_mutation

    @staticmethod
    def accepts(mime_type: str) -> bool:
        """Whether a drag carrying this mime type may be dropped."""
        return mime_type == PALETTE_MIME_TYPE

    def handle_drop(self, payload: Optional[str], x: float, y: float) -> Optional[AutomationNode]:
        """Create a node for a dropped palette item; None if the drop was ignored."""
        item = parse_palette_payload(payload)
        if item is None:
            return None

        left, top = self._container_origin()
        node = self._place_node(x - left, y - top, item.kind)
        logger.info(f"Dropped {item.label or item.kind.value} as {node.id}")

        if self._on_mutation:
            self._on_mutation()
        return node
