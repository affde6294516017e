"""Views package."""

from .automation_canvas import (
    AutomationCanvas,
    AutomationScene,
    NodeGraphicsItem,
    EdgeGraphicsItem,
    AnchorGraphicsItem,
    TempEdgeItem,
    qt_scheduler,
)
from .automation_palette import AutomationPalette, PaletteItemButton
from .main_window import MainWindow, OpenAutomationDialog, AutomationToolbar

__all__ = [
    "AutomationCanvas",
    "AutomationScene",
    "NodeGraphicsItem",
    "EdgeGraphicsItem",
    "AnchorGraphicsItem",
    "TempEdgeItem",
    "qt_scheduler",
    "AutomationPalette",
    "PaletteItemButton",
    "MainWindow",
    "OpenAutomationDialog",
    "AutomationToolbar",
]
