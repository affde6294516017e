"""Services package."""

from .placement import NodePlacementEngine, NodeIdMinter, ViewTransform, BoundsProvider
from .interaction import (
    InteractionStateManager,
    MenuState,
    MenuClosed,
    PaneMenuOpen,
    NodeMenuOpen,
    MENU_CLOSED,
    PANE_MENU_ITEMS,
    NODE_MENU_ITEMS,
)
from .synchronizer import CanvasStateSynchronizer, DeferredCallQueue
from .drag_drop import (
    DragDropIngestion,
    PALETTE_MIME_TYPE,
    encode_palette_payload,
    parse_palette_payload,
)
from .automation_editor import AutomationEditor, CanvasHandle
from .automation_store import (
    AutomationStore,
    AutomationRecord,
    AutomationStoreError,
    AutomationNotFoundError,
    decode_metadata,
)
from .settings_manager import (
    SettingsManager,
    AppSettings,
    CanvasSettings,
    PathSettings,
    get_settings,
    reset_settings_manager,
)

__all__ = [
    "NodePlacementEngine",
    "NodeIdMinter",
    "ViewTransform",
    "BoundsProvider",
    "InteractionStateManager",
    "MenuState",
    "MenuClosed",
    "PaneMenuOpen",
    "NodeMenuOpen",
    "MENU_CLOSED",
    "PANE_MENU_ITEMS",
    "NODE_MENU_ITEMS",
    "CanvasStateSynchronizer",
    "DeferredCallQueue",
    "DragDropIngestion",
    "PALETTE_MIME_TYPE",
    "encode_palette_payload",
    "parse_palette_payload",
    "AutomationEditor",
    "CanvasHandle",
    "AutomationStore",
    "AutomationRecord",
    "AutomationStoreError",
    "AutomationNotFoundError",
    "decode_metadata",
    "SettingsManager",
    "AppSettings",
    "CanvasSettings",
    "PathSettings",
    "get_settings",
    "reset_settings_manager",
]
