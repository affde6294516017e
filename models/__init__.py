"""
Models package.

This package contains the data models of the automation canvas:
- Automation graph (NodeKind, AutomationNode, AutomationEdge, CanvasDocument)
- Structural errors (DuplicateIdError, DanglingReferenceError)
- Palette items (PaletteItem, DEFAULT_PALETTE_ITEMS)
"""

from .automation import (
    NodeKind,
    Position,
    AutomationNode,
    AutomationEdge,
    CanvasDocument,
    PaletteItem,
    DEFAULT_PALETTE_ITEMS,
    GraphDocumentError,
    DuplicateIdError,
    DanglingReferenceError,
    documents_equal,
)


__all__ = [
    "NodeKind",
    "Position",
    "AutomationNode",
    "AutomationEdge",
    "CanvasDocument",
    "PaletteItem",
    "DEFAULT_PALETTE_ITEMS",
    "GraphDocumentError",
    "DuplicateIdError",
    "DanglingReferenceError",
    "documents_equal",
]
